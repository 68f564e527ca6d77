# app/launcharr/dispatcher.py
"""
Query routing.

Resolution order for a non-empty query:

1. Reserved shortcuts (``-n``, ``-y``), exact match on the trimmed text only.
2. Credential-independent commands by flag or alias prefix.
3. Credential-dependent commands by flag prefix.
4. Library search with the whole query as the search term.

Within each group the first registered command wins. Dispatch never raises
and never waits on a connection probe.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from launcharr.commands.about import AboutCommand
from launcharr.commands.activity import ActivityCommand
from launcharr.commands.base import Command, CommandContext
from launcharr.commands.calendar import CalendarCommand
from launcharr.commands.dates import DateTimeCommand
from launcharr.commands.health import HealthCommand
from launcharr.commands.help import HelpCommand
from launcharr.commands.links import ExternalLinksCommand
from launcharr.commands.refresh import OVERDUE, YESTERDAY, RefreshCommand, acknowledge
from launcharr.commands.search import LibrarySearchCommand
from launcharr.commands.setup import SetupCommand
from launcharr.commands.utility import UtilityCommand
from launcharr.core.models import Query
from launcharr.core.refresh import RefreshCoordinator
from launcharr.core.results import Result, error_result, setup_guidance
from launcharr.core.sonarr import SonarrClient
from launcharr.core.status import UNCONFIGURED_MESSAGE, ConnectionProbe
from launcharr.core.tasks import BackgroundRunner

log = logging.getLogger(__name__)

SHORTCUTS = {"-n": OVERDUE, "-y": YESTERDAY}

COMMAND_TYPES = (
    LibrarySearchCommand,
    CalendarCommand,
    ActivityCommand,
    RefreshCommand,
    HealthCommand,
    SetupCommand,
    AboutCommand,
    HelpCommand,
    UtilityCommand,
    DateTimeCommand,
    ExternalLinksCommand,
)


class CommandRegistry:
    def __init__(self):
        self.commands: List[Command] = []

    def register(self, command: Command) -> Command:
        self.commands.append(command)
        return command

    @property
    def independent(self) -> List[Command]:
        return [c for c in self.commands if not c.requires_credential]

    @property
    def dependent(self) -> List[Command]:
        return [c for c in self.commands if c.requires_credential]

    def resolve(self, text: str) -> Optional[Command]:
        """First matching command, scanning credential-independent ones first."""
        for group in (self.independent, self.dependent):
            for command in group:
                if command.matches(text):
                    return command
        return None

    def find(self, command_type) -> Optional[Command]:
        for command in self.commands:
            if isinstance(command, command_type):
                return command
        return None


class Dispatcher:
    def __init__(self, ctx: CommandContext, registry: Optional[CommandRegistry] = None):
        self.ctx = ctx
        if registry is None:
            registry = CommandRegistry()
            for command_type in COMMAND_TYPES:
                registry.register(command_type(ctx))
        self.registry = registry
        ctx.registry = registry
        self.default_command = registry.find(LibrarySearchCommand) or LibrarySearchCommand(ctx)

    @property
    def settings(self):
        return self.ctx.settings

    def dispatch(self, text: str, has_credential: Optional[bool] = None) -> List[Result]:
        try:
            if has_credential is None:
                has_credential = self.settings.has_credential()
            self._maybe_probe(has_credential)
            results = self._route(Query(search=text or ""), has_credential)
            banner = self._banner(has_credential)
            return ([banner] if banner else []) + results
        except Exception as e:
            log.exception("Dispatch of %r failed", text)
            return [error_result("Unexpected error", str(e))]

    # ----- routing ---------------------------------------------------------

    def _route(self, query: Query, has_credential: bool) -> List[Result]:
        text = query.text
        if not text:
            return self._menu(has_credential)

        shortcut = SHORTCUTS.get(text.lower())
        if shortcut:
            if not has_credential:
                return setup_guidance()
            return [acknowledge(self.ctx, shortcut, submit_now=True)]

        command = self.registry.resolve(text) or self.default_command
        log.debug("Query %r -> %s", text, command.flag)
        return command.execute(query, has_credential)

    def _menu(self, has_credential: bool) -> List[Result]:
        results = [c.menu_entry() for c in self.registry.independent]
        if has_credential:
            results.extend(c.menu_entry() for c in self.registry.dependent)
        else:
            results.append(Result(
                title="🔒 API features disabled",
                subtitle="Set your Sonarr API key with 'snr -setup apikey YOUR_KEY' to enable search, "
                         "calendar, activity, refresh and health",
                score=100,
            ))
        return results

    # ----- connection status -----------------------------------------------

    def _banner(self, has_credential: bool) -> Optional[Result]:
        status = self.ctx.probe.status
        if not has_credential or not status.is_failed:
            return None
        return Result(
            title="⚠️ Sonarr connection problem",
            subtitle=status.last_error or "Last connection test failed",
            score=1000,
        )

    def _maybe_probe(self, has_credential: bool) -> None:
        probe = self.ctx.probe
        if not has_credential:
            if probe.status.last_error != UNCONFIGURED_MESSAGE:
                probe.mark_unconfigured()
            return
        if probe.status.last_error == UNCONFIGURED_MESSAGE:
            # a key is present now; the unconfigured stamp must not hold off the probe
            probe.reset()
        if probe.should_probe():
            probe.probe_in_background(self.ctx.runner, self.ctx.client)


def build_dispatcher(settings, runner: Optional[BackgroundRunner] = None,
                     client: Optional[SonarrClient] = None,
                     probe: Optional[ConnectionProbe] = None,
                     coordinator: Optional[RefreshCoordinator] = None) -> Dispatcher:
    """Wire the default collaborators around shared settings."""
    client = client or SonarrClient(settings)
    runner = runner or BackgroundRunner()
    probe = probe or ConnectionProbe(settings.probe.interval_seconds)
    coordinator = coordinator or RefreshCoordinator(
        client,
        delay_seconds=settings.refresh.delay_seconds,
        buffer_minutes=settings.refresh.overdue_buffer_minutes,
    )
    ctx = CommandContext(client=client, settings=settings, coordinator=coordinator,
                         runner=runner, probe=probe)
    return Dispatcher(ctx)
