# app/launcharr/core/refresh.py
"""
Calendar-driven bulk refresh.

Each operation fetches calendar entries for a window, reduces them to the
distinct series they belong to (first appearance wins), then asks Sonarr to
rescan each series one at a time. Individual failures are collected by
display title and never stop the sweep; only a failure of the whole operation
(e.g. the calendar fetch) produces ``success=False``.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

from launcharr.core.models import CalendarEntry, RefreshResult
from launcharr.core.timewindow import (
    DEFAULT_BUFFER_MINUTES, day_window, describe_prior_days, is_overdue,
    prior_days_window, yesterday_window,
)

log = logging.getLogger(__name__)

TODAY_LABEL = "today's calendar"
YESTERDAY_LABEL = "yesterday's calendar"


def distinct_series(entries: List[CalendarEntry]) -> Dict[int, str]:
    """series_id -> display title, in first-appearance order."""
    seen: Dict[int, str] = {}
    for entry in entries:
        if entry.series_id not in seen:
            seen[entry.series_id] = entry.series_title or f"Series {entry.series_id}"
    return seen


class RefreshCoordinator:
    def __init__(self, client, delay_seconds: float = 0.1,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], datetime] = datetime.now,
                 buffer_minutes: int = DEFAULT_BUFFER_MINUTES):
        self.client = client
        self.delay_seconds = delay_seconds
        self.sleep = sleep
        self.clock = clock
        self.buffer_minutes = buffer_minutes

    # ----- public operations ----------------------------------------------

    def refresh_for_window(self, start: datetime, end: datetime, label: str) -> RefreshResult:
        try:
            entries = self.client.get_calendar(start, end)
            if not entries:
                return RefreshResult(success=True, message=f"No episodes found in {label}")
            return self._rescan(entries, f"from {label}")
        except Exception as e:
            log.error("Error refreshing %s series: %s", label, e)
            return RefreshResult(success=False, message=f"Error: {e}")

    def refresh_today(self) -> RefreshResult:
        start, end = day_window(self.clock())
        return self.refresh_for_window(start, end, TODAY_LABEL)

    def refresh_yesterday(self) -> RefreshResult:
        start, end = yesterday_window(self.clock())
        return self.refresh_for_window(start, end, YESTERDAY_LABEL)

    def refresh_prior_days(self, days: int) -> RefreshResult:
        if days < 1:
            return RefreshResult(success=False, message="Days back must be 1 or greater")
        start, end = prior_days_window(days, self.clock())
        return self.refresh_for_window(start, end, describe_prior_days(days))

    def refresh_overdue(self, buffer_minutes: Optional[int] = None) -> RefreshResult:
        """Rescan series whose episodes aired today (plus buffer) and are due."""
        buffer_minutes = self.buffer_minutes if buffer_minutes is None else buffer_minutes
        try:
            now = self.clock()
            start, end = day_window(now)
            entries = self.client.get_calendar(start, end)
            if not entries:
                return RefreshResult(success=True, message=f"No episodes found in {TODAY_LABEL}")

            overdue = [e for e in entries if is_overdue(e.air_date, now, buffer_minutes)]
            if not overdue:
                return RefreshResult(
                    success=True,
                    message=f"No overdue episodes found in {TODAY_LABEL} (checked {len(entries)} episodes)",
                )
            return self._rescan(
                overdue,
                f"with {len(overdue)} overdue episodes from {TODAY_LABEL}",
            )
        except Exception as e:
            log.error("Error refreshing overdue series: %s", e)
            return RefreshResult(success=False, message=f"Error: {e}")

    # ----- internals -------------------------------------------------------

    def _rescan(self, entries: List[CalendarEntry], suffix: str) -> RefreshResult:
        targets = distinct_series(entries)
        failed: List[str] = []
        refreshed = 0

        for i, (series_id, title) in enumerate(targets.items()):
            if i and self.delay_seconds > 0:
                self.sleep(self.delay_seconds)
            try:
                ok = self.client.rescan_series(series_id)
            except Exception as e:
                log.warning("Rescan of %s (%s) raised: %s", title, series_id, e)
                ok = False
            if ok:
                refreshed += 1
            else:
                failed.append(title)

        message = f"Refreshed {refreshed} of {len(targets)} series {suffix}"
        if failed:
            message += f". Failed: {', '.join(failed)}"
        log.info(message)
        return RefreshResult(
            success=True,
            series_refreshed=refreshed,
            total_series=len(targets),
            message=message,
            failed_series=failed,
        )
