# app/launcharr/commands/setup.py
"""
Guided setup wizard; the only command that mutates settings.

Every save writes the YAML settings file and resets the connection status so
the next dispatch re-probes with the new values.
"""
from __future__ import annotations

import logging
from typing import List

from launcharr import config as config_mod
from launcharr.commands.base import Command
from launcharr.core.models import Query
from launcharr.core.results import Result, error_result

log = logging.getLogger(__name__)

MIN_API_KEY_LENGTH = 32


class SetupCommand(Command):
    flag = "-setup"
    name = "Setup Sonarr Connection"
    description = "Guided setup for Sonarr API key and server configuration"
    usage = "[apikey KEY|server HOST:PORT|https|http]"
    requires_credential = False

    def run(self, query: Query) -> List[Result]:
        arg = self.argument(query)
        keyword, _, value = arg.partition(" ")
        keyword = keyword.lower()
        value = value.strip()

        if not keyword:
            return self._wizard()
        if keyword == "apikey":
            return self._api_key(value)
        if keyword == "server":
            return self._server(value)
        if keyword in ("https", "http"):
            return self._protocol(keyword == "https")
        return self._help()

    # ----- persistence -----------------------------------------------------

    def save(self) -> bool:
        try:
            path = config_mod.save_config(self.settings)
        except OSError as e:
            log.error("Could not save settings: %s", e)
            return False
        self.ctx.probe.reset()
        log.info("Saved settings to %s", path)
        return True

    def _update(self, field: str, value) -> bool:
        """Set one connection field and persist it; a failed save restores the old value."""
        sonarr = self.settings.sonarr
        previous = getattr(sonarr, field)
        setattr(sonarr, field, value)
        if self.save():
            return True
        setattr(sonarr, field, previous)
        return False

    def set_api_key(self, key: str) -> bool:
        return self._update("api_key", key.strip())

    def set_server(self, server: str) -> bool:
        return self._update("server_url", config_mod.normalize_server_url(server))

    # ----- views -----------------------------------------------------------

    def _wizard(self) -> List[Result]:
        sonarr = self.settings.sonarr
        results = [Result(
            title="🚀 Sonarr Setup Wizard",
            subtitle="Configure your Sonarr connection step by step",
            score=100,
        )]
        if sonarr.api_key:
            results.append(Result(title="✅ API Key Set",
                                  subtitle=f"API Key: {sonarr.api_key[:8]}...", score=95))
        else:
            results.append(Result(title="🔑 Step 1: Enter API Key",
                                  subtitle="Type: snr -setup apikey YOUR_API_KEY_HERE", score=95))
        results.append(Result(
            title="✅ Server URL Set" if sonarr.server_url else "🌐 Step 2: Enter Server URL",
            subtitle=f"Server: {sonarr.web_base_url}" if sonarr.server_url
            else "Type: snr -setup server YOUR_SERVER:PORT (e.g., localhost:8989)",
            score=90,
        ))
        results.append(Result(
            title="🔒 Step 3: Protocol (Optional)",
            subtitle=f"Currently: {sonarr.scheme.upper()} - Type 'snr -setup https' or 'snr -setup http'",
            score=85,
        ))
        if self.settings.has_credential():
            results.append(Result(
                title="🧪 Test Connection",
                subtitle="Type 'snr -test connection' to check your Sonarr connection",
                score=80,
            ))
        results.append(Result(
            title="❓ Need Help Finding Your API Key?",
            subtitle="In Sonarr: Settings → General → API Key (copy the long string)",
            score=75,
        ))
        return results

    def _api_key(self, key: str) -> List[Result]:
        if not key:
            return [Result(title="🔑 Enter Your API Key",
                           subtitle="Continue typing your Sonarr API key after 'apikey '", score=100)]
        if len(key) < MIN_API_KEY_LENGTH:
            return [
                Result(title="⚠️ API Key Seems Too Short",
                       subtitle=f"Current: {key} (Sonarr API keys are usually 32+ characters)", score=100),
                Result(title="💾 Save Anyway", subtitle="Select to save this API key and continue",
                       score=95, action=lambda: self.set_api_key(key)),
            ]
        return [Result(title="✅ API Key Looks Good!", subtitle=f"Select to save: {key[:16]}...",
                       score=100, action=lambda: self.set_api_key(key))]

    def _server(self, server: str) -> List[Result]:
        server = config_mod.normalize_server_url(server)
        if not server:
            return [Result(title="🌐 Enter Your Server URL",
                           subtitle="Continue typing your server URL (e.g., localhost:8989 or 192.168.1.100:8989)",
                           score=100)]
        return [Result(title="✅ Server URL Ready", subtitle=f"Select to save: {server}",
                       score=100, action=lambda: self.set_server(server))]

    def _protocol(self, use_https: bool) -> List[Result]:
        if not self._update("use_https", use_https):
            return [error_result("Could not save settings", self.settings.path)]
        label = "HTTPS" if use_https else "HTTP"
        return [Result(title=f"✅ Protocol Set to {label}",
                       subtitle=f"Your Sonarr will be accessed via {label}", score=100)]

    def _help(self) -> List[Result]:
        return [
            Result(title="🔧 Setup Commands", subtitle="Available setup commands", score=100),
            Result(title="snr -setup", subtitle="Start or return to setup wizard", score=95),
            Result(title="snr -setup apikey YOUR_KEY", subtitle="Set your Sonarr API key", score=90),
            Result(title="snr -setup server YOUR_SERVER:PORT", subtitle="Set your Sonarr server URL", score=85),
            Result(title="snr -setup https / snr -setup http", subtitle="Toggle between HTTPS and HTTP", score=80),
        ]
