# app/launcharr/commands/about.py
from __future__ import annotations

from typing import List

from launcharr.commands.base import Command
from launcharr.config import APP_DESCRIPTION, APP_NAME, APP_VERSION
from launcharr.core.models import Query
from launcharr.core.results import Result
from launcharr.core.timewindow import resolve_window


class AboutCommand(Command):
    flag = "-about"
    name = "About Launcharr"
    description = "Version, connection and calendar window information"
    requires_credential = False

    def run(self, query: Query) -> List[Result]:
        sonarr = self.settings.sonarr
        status = self.ctx.probe.status
        today = self.ctx.coordinator.clock().date()
        week_start, week_end = resolve_window("week", today)
        next_start, next_end = resolve_window("next week", today)

        state = status.state.value.upper()
        if status.last_error:
            state = f"{state} - {status.last_error}"

        return [
            Result(title=f"ℹ️ {APP_NAME} v{APP_VERSION}", subtitle=APP_DESCRIPTION, score=100),
            Result(
                title="🌐 Server",
                subtitle=f"{sonarr.web_base_url} | API key {'set' if self.settings.has_credential() else 'not set'}",
                score=95,
            ),
            Result(title="🔌 Connection Status", subtitle=state, score=90),
            Result(title="📁 Settings File", subtitle=self.settings.path or "(not saved)", score=85),
            Result(
                title="📅 Calendar Windows",
                subtitle=f"This week: {week_start:%Y-%m-%d} to {week_end:%Y-%m-%d} | "
                         f"Next week: {next_start:%Y-%m-%d} to {next_end:%Y-%m-%d}",
                score=80,
            ),
        ]
