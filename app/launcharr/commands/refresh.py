# app/launcharr/commands/refresh.py
"""
Series refresh command.

Bulk operations (today, yesterday, overdue, prior days) run on the background
runner; the command only returns an acknowledgement row. The same
acknowledgement is used by the ``-n`` and ``-y`` shortcuts in the dispatcher,
which submit immediately instead of on activation.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Tuple

from launcharr.commands.base import Command, CommandContext
from launcharr.core.models import Query, RefreshResult
from launcharr.core.results import DEFAULT_ICON, Result, error_result, run_action

log = logging.getLogger(__name__)

TODAY = "today"
YESTERDAY = "yesterday"
OVERDUE = "overdue"
PRIOR_DAYS = "prior-days"

ARGUMENT_KINDS = {
    "c": TODAY, "calendar": TODAY,
    "n": OVERDUE, "now": OVERDUE, "overdue": OVERDUE,
    "y": YESTERDAY, "yesterday": YESTERDAY,
}

MAX_SERIES_RESULTS = 10


def _plural(days: int) -> str:
    return "" if days == 1 else "s"


def describe_refresh(kind: str, days: int = 0) -> Tuple[str, str]:
    """(title, in-progress subtitle) for a bulk refresh kind."""
    if kind == TODAY:
        return ("Refresh Today's Calendar Series",
                "Refreshing all series that have episodes in today's calendar...")
    if kind == YESTERDAY:
        return ("Refresh Yesterday's Calendar Series",
                "Refreshing all series that had episodes in yesterday's calendar...")
    if kind == OVERDUE:
        return ("Refresh Overdue Episodes",
                "Refreshing series with episodes that have already aired today...")
    return (f"Refresh Prior {days} Day{_plural(days)} Calendar Series",
            f"Refreshing all series that had episodes in the past {days} day{_plural(days)}...")


def refresh_operation(coordinator, kind: str, days: int = 0) -> Callable[[], RefreshResult]:
    if kind == TODAY:
        return coordinator.refresh_today
    if kind == YESTERDAY:
        return coordinator.refresh_yesterday
    if kind == OVERDUE:
        return coordinator.refresh_overdue
    return lambda: coordinator.refresh_prior_days(days)


def acknowledge(ctx: CommandContext, kind: str, days: int = 0, submit_now: bool = False) -> Result:
    """
    Acknowledgement row for a bulk refresh.

    With ``submit_now`` the work is queued before returning; otherwise it is
    queued when the row is activated.
    """
    title, subtitle = describe_refresh(kind, days)
    operation = refresh_operation(ctx.coordinator, kind, days)

    def _submit() -> bool:
        ctx.submit_refresh(title, operation)
        return True

    if submit_now:
        _submit()
        return Result(title=f"🔄 {title}", subtitle=f"Started in background. {subtitle}",
                      icon="refresh.png", score=100)
    return Result(title=title, subtitle=subtitle, icon="refresh.png", score=100, action=_submit)


class RefreshCommand(Command):
    flag = "-r"
    name = "Refresh Series"
    description = "Refresh all series, calendar windows, overdue episodes or a specific series"
    usage = "[all|c|n|y|<days>|<series>]"

    def run(self, query: Query) -> List[Result]:
        arg = self.argument(query)
        lowered = arg.lower()

        if not lowered or lowered == "all":
            return self._menu(show_hint=not lowered)
        if lowered in ARGUMENT_KINDS:
            return [acknowledge(self.ctx, ARGUMENT_KINDS[lowered])]
        if lowered.isdigit():
            days = int(lowered)
            if days < 1:
                return [error_result("Invalid Number of Days", "Days back must be 1 or greater")]
            return [acknowledge(self.ctx, PRIOR_DAYS, days)]
        return self._series(arg)

    def _refresh_all_result(self, subtitle: str, score: int) -> Result:
        return Result(
            title="Refresh All Series",
            subtitle=subtitle,
            icon="refresh.png",
            score=score,
            action=run_action("refresh all", self.client.rescan_all),
        )

    def _menu(self, show_hint: bool) -> List[Result]:
        results = [
            self._refresh_all_result("Trigger a refresh/rescan of all series in Sonarr", 100),
            Result(
                title="Refresh Today's Calendar Series",
                subtitle="snr -r c - Refresh all series that have episodes in today's calendar",
                icon="refresh.png", score=95,
                action=acknowledge(self.ctx, TODAY).action,
            ),
            Result(
                title="Refresh Yesterday's Calendar Series",
                subtitle="snr -r y - Refresh all series that had episodes in yesterday's calendar",
                icon="refresh.png", score=94,
                action=acknowledge(self.ctx, YESTERDAY).action,
            ),
            Result(
                title="Refresh Overdue Episodes",
                subtitle="snr -r n - Refresh series with episodes that have already aired today",
                icon="refresh.png", score=93,
                action=acknowledge(self.ctx, OVERDUE).action,
            ),
            Result(
                title="Refresh Prior Days",
                subtitle="snr -r {number} - Refresh series from past N days (e.g., 'snr -r 3' for 3 days back)",
                icon="refresh.png", score=92,
            ),
        ]
        if show_hint:
            results.append(Result(
                title="Refresh Options",
                subtitle="Use '-r all', '-r c' (today), '-r y' (yesterday), '-r n' (overdue), "
                         "'-r {days}' (prior days), or '-r <series name>'",
                score=90,
            ))
        return results

    def _series(self, term: str) -> List[Result]:
        shows = self.client.search_series(term)
        if not shows:
            return [
                Result(
                    title="No Series Found",
                    subtitle=f"No series found matching '{term}'. Try a different search term.",
                    score=100,
                ),
                self._refresh_all_result("Or refresh all series in Sonarr", 50),
            ]
        results = [
            Result(
                title=f"Refresh: {show.title}",
                subtitle=f"Refresh/rescan series: {show.title} - {show.status} | "
                         f"{show.statistics.season_count} Seasons",
                icon=show.poster_url or DEFAULT_ICON,
                score=100,
                action=run_action(f"refresh {show.title}",
                                  lambda sid=show.id: self.client.rescan_series(sid)),
                context=show,
            )
            for show in shows[:MAX_SERIES_RESULTS]
        ]
        results.append(self._refresh_all_result("Or refresh all series in Sonarr", 50))
        return results
