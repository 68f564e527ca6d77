# app/launcharr/commands/activity.py
from __future__ import annotations

from typing import List

from launcharr.commands.base import Command
from launcharr.core.models import HistoryEntry, Query, QueueEntry
from launcharr.core.results import DEFAULT_ICON, Result, run_action

QUEUE_ARGS = ("q", "queue")
HISTORY_ARGS = ("h", "history")


class ActivityCommand(Command):
    flag = "-a"
    name = "View Sonarr Activity"
    description = "View current downloads and history (use: -a [q|queue|h|history])"
    usage = "[q|queue|h|history]"

    def run(self, query: Query) -> List[Result]:
        arg = self.argument(query).lower()
        want_queue = arg not in HISTORY_ARGS
        want_history = arg not in QUEUE_ARGS

        results: List[Result] = []
        if not arg:
            results.append(Result(
                title="Activity Options",
                subtitle="Type: q/queue (downloads in progress) or h/history (recent activity)",
                score=100,
            ))

        queue = self.client.get_queue() if want_queue else []
        history = self.client.get_history() if want_history else []

        if arg in QUEUE_ARGS and not queue:
            results.append(Result(title="No Active Downloads", subtitle="Queue is empty", score=100))
        elif arg in HISTORY_ARGS and not history:
            results.append(Result(title="No Recent Activity", subtitle="History is empty", score=100))
        elif not queue and not history:
            results.append(Result(
                title="No Activity Found",
                subtitle="No downloads in progress and no recent history",
                score=100,
            ))

        index = 0
        for item in queue:
            results.append(self._queue_result(item, 100 - index))
            index += 1
        for item in history:
            results.append(self._history_result(item, 100 - index))
            index += 1

        results.append(Result(
            title="Open Activity in Browser",
            subtitle="View full activity in Sonarr",
            score=0,
            action=run_action("open activity", self.client.open_activity),
        ))
        return results

    def _queue_result(self, item: QueueEntry, score: int) -> Result:
        return Result(
            title=f"⬇️ {item.title}",
            subtitle=f"{item.code} - {item.status} ({item.progress:.1f}%) - {item.quality}",
            icon=item.poster_url or DEFAULT_ICON,
            score=score,
            action=run_action(f"open {item.title}",
                              lambda slug=item.title_slug or item.series_id: self.client.open_series(slug)),
            context=item,
        )

    def _history_result(self, item: HistoryEntry, score: int) -> Result:
        when = f"{item.date:%Y-%m-%d %H:%M}" if item.date else ""
        return Result(
            title=f"{item.icon} {item.title}",
            subtitle=f"{item.code} - {item.event_type} - {item.quality} - {when}".rstrip(" -"),
            score=score,
            action=run_action(f"open {item.title}",
                              lambda slug=item.title_slug or item.series_id: self.client.open_series(slug)),
            context=item,
        )
