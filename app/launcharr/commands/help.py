# app/launcharr/commands/help.py
from __future__ import annotations

from typing import List

from launcharr.commands.base import Command
from launcharr.core.models import Query
from launcharr.core.results import Result

SHORTCUTS = (
    ("-n", "Refresh series with overdue episodes from today's calendar"),
    ("-y", "Refresh series from yesterday's calendar"),
)


class HelpCommand(Command):
    flag = "-help"
    name = "Help"
    description = "List every command, its arguments and shortcuts"
    requires_credential = False

    def run(self, query: Query) -> List[Result]:
        results: List[Result] = []
        score = 100
        if not self.settings.has_credential():
            results.append(Result(
                title="⚠️ Sonarr API Key Not Set",
                subtitle="Most commands need an API key. Type 'snr -setup' to configure it.",
                score=score,
            ))
            score -= 1

        registry = self.ctx.registry
        for command in registry.commands if registry else []:
            flags = " / ".join(command.prefixes)
            usage = f" {command.usage}" if command.usage else ""
            results.append(Result(
                title=f"{flags}{usage}",
                subtitle=f"{command.name}: {command.description}",
                score=score,
            ))
            score -= 1

        for token, meaning in SHORTCUTS:
            results.append(Result(title=f"{token} (shortcut)", subtitle=meaning, score=score))
            score -= 1
        return results
