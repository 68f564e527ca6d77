# app/launcharr/commands/utility.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from launcharr import config as config_mod
from launcharr.commands.base import Command
from launcharr.core.models import Query
from launcharr.core.results import Result, error_result, run_action

log = logging.getLogger(__name__)


class UtilityCommand(Command):
    flag = "-test"
    aliases = ("-settings", "-util")
    name = "Test & Utilities"
    description = "Test connection, access settings, and utility functions"
    usage = "[connection|settings|logs|reload]"
    requires_credential = False

    def run(self, query: Query) -> List[Result]:
        arg = self.argument(query).lower()
        if not arg:
            return self._overview()
        if arg in ("connection", "conn"):
            return [self._connection_result(100)]
        if arg in ("settings", "config"):
            return [self._settings_result(100)]
        if arg in ("logs", "log"):
            return [self._logs_result(100)]
        if arg in ("reload", "refresh"):
            return [self._reload_result(100)]
        return [Result(
            title="❓ Unknown Utility Command",
            subtitle="Available: connection, settings, logs, reload",
            score=100,
        )]

    def _overview(self) -> List[Result]:
        return [
            Result(title="🔧 Utility Commands", subtitle="Available utility functions", score=100),
            self._connection_result(95),
            self._settings_result(94),
            self._logs_result(93),
            self._reload_result(92),
        ]

    # ----- actions ---------------------------------------------------------

    def test_connection(self) -> bool:
        """Raw reachability check; the outcome is recorded as the connection status."""
        ok, message = self.client.check_connectivity()
        self.ctx.probe.record_result(ok, "" if ok else message)
        if ok:
            log.info("Connection test: %s", message)
        else:
            log.warning("Connection test failed: %s", message)
        return ok

    def open_settings(self) -> bool:
        path = Path(self.settings.path or config_mod.default_config_path()).expanduser()
        if not path.exists():
            config_mod.save_config(self.settings, str(path))
        return self.client.open_url(path.resolve().as_uri())

    def reload(self) -> bool:
        config_mod.reload_into(self.settings)
        self.ctx.probe.reset()
        log.info("Reloaded settings from %s", self.settings.path)
        return True

    # ----- rows ------------------------------------------------------------

    def _connection_result(self, score: int) -> Result:
        sonarr = self.settings.sonarr
        if not sonarr.server_url:
            return error_result("No Server URL Configured",
                                "Set your Sonarr server with 'snr -setup server HOST:PORT'")
        return Result(
            title="🌐 Test Connection",
            subtitle=(f"Test connectivity to {sonarr.web_base_url} "
                      f"({self.settings.probe.timeout_seconds}s timeout)"),
            score=score,
            action=self.test_connection,
        )

    def _settings_result(self, score: int) -> Result:
        return Result(
            title="⚙️ Open Settings",
            subtitle=self.settings.path or config_mod.default_config_path(),
            score=score,
            action=run_action("open settings", self.open_settings),
        )

    def _logs_result(self, score: int) -> Result:
        log_file = self.settings.log_file
        return Result(
            title="📁 Log File",
            subtitle=log_file or "Logging to console only (set log_file in settings)",
            score=score,
        )

    def _reload_result(self, score: int) -> Result:
        return Result(
            title="Reload Settings",
            subtitle="Re-read settings from disk without restarting",
            icon="refresh.png",
            score=score,
            action=run_action("reload settings", self.reload),
        )
