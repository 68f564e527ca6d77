# app/launcharr/commands/base.py
"""
Shared command plumbing.

A command owns a flag (plus optional alias prefixes), a name and a
description, and turns a Query into display results. ``execute`` never
raises: API commands answer a missing key with the setup guidance and any
exception from ``run`` becomes a single high-priority error row.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from launcharr.core.models import Query, RefreshResult
from launcharr.core.notifier import notify_refresh
from launcharr.core.results import Result, error_result, setup_guidance

log = logging.getLogger(__name__)


@dataclass
class CommandContext:
    """Collaborators injected into every command."""
    client: object
    settings: object
    coordinator: object
    runner: object
    probe: object
    registry: object = None

    def submit_refresh(self, label: str, operation: Callable[[], RefreshResult]) -> None:
        """Run a coordinator operation in the background and report its summary."""
        def _job():
            result = operation()
            if result.success:
                log.info("%s: %s", label, result.message)
            else:
                log.error("%s: %s", label, result.message)
            notify_refresh(result, self.settings, label)
        self.runner.submit(label.lower().replace(" ", "-"), _job)


class Command:
    flag: str = ""
    name: str = ""
    description: str = ""
    usage: str = ""
    aliases: Tuple[str, ...] = ()
    requires_credential: bool = True

    def __init__(self, ctx: CommandContext):
        self.ctx = ctx

    @property
    def client(self):
        return self.ctx.client

    @property
    def settings(self):
        return self.ctx.settings

    @property
    def prefixes(self) -> Tuple[str, ...]:
        return (self.flag,) + tuple(self.aliases)

    def matched_prefix(self, text: str) -> Optional[str]:
        lowered = (text or "").strip().lower()
        for prefix in self.prefixes:
            if lowered.startswith(prefix.lower()):
                return prefix
        return None

    def matches(self, text: str) -> bool:
        return self.matched_prefix(text) is not None

    def argument(self, query: Query) -> str:
        """Query text with the command prefix removed."""
        text = query.text
        prefix = self.matched_prefix(text)
        if prefix:
            text = text[len(prefix):]
        return text.strip()

    def menu_entry(self, score: int = 100) -> Result:
        return Result(
            title=self.name,
            subtitle=f"Type {self.flag} - {self.description}",
            score=score,
        )

    def execute(self, query: Query, has_credential: Optional[bool] = None) -> List[Result]:
        if has_credential is None:
            has_credential = self.settings.has_credential()
        if self.requires_credential and not has_credential:
            return setup_guidance()
        try:
            return self.run(query)
        except Exception as e:
            log.exception("Command %s failed", self.flag)
            return [error_result(f"{self.name} failed", str(e))]

    def run(self, query: Query) -> List[Result]:
        raise NotImplementedError
