# app/launcharr/commands/calendar.py
from __future__ import annotations

from collections import OrderedDict
from datetime import datetime
from typing import Dict, List, Optional

from launcharr.commands.base import Command
from launcharr.core.models import CalendarEntry, Query
from launcharr.core.results import DEFAULT_ICON, Result, run_action
from launcharr.core.timewindow import day_label, resolve_window, to_local_naive


def _local(entry: CalendarEntry) -> Optional[datetime]:
    return to_local_naive(entry.air_date)


def group_by_day(entries: List[CalendarEntry]) -> Dict[object, List[CalendarEntry]]:
    """Entries bucketed by local air day (None last), each sorted by series title."""
    ordered = sorted(entries, key=lambda e: (_local(e) is None, _local(e) or datetime.min))
    groups: Dict[object, List[CalendarEntry]] = OrderedDict()
    for entry in ordered:
        local = _local(entry)
        groups.setdefault(local.date() if local else None, []).append(entry)
    for day in groups:
        groups[day].sort(key=lambda e: e.series_title.lower())
    return groups


class CalendarCommand(Command):
    flag = "-c"
    name = "View Sonarr Calendar"
    description = "View upcoming episodes (use: today, tomorrow, week, next week, month)"
    usage = "[today|tomorrow|week|next week|month]"

    def run(self, query: Query) -> List[Result]:
        arg = self.argument(query).lower()
        today = self.ctx.coordinator.clock().date()
        start, end = resolve_window(arg, today)
        entries = self.client.get_calendar(start, end)

        results: List[Result] = []
        if not arg:
            results.append(Result(
                title="Calendar Options",
                subtitle="Type: today, tomorrow, week, next week, month",
                score=100,
            ))

        if not entries:
            results.append(Result(
                title="No Episodes Found",
                subtitle=f"No episodes scheduled between {start:%Y-%m-%d} and {end:%Y-%m-%d}",
                score=100,
            ))
        else:
            index = 0
            for day, group in group_by_day(entries).items():
                header = day_label(day, today) if day else "Unknown Air Date"
                count = len(group)
                results.append(Result(
                    title=f"📅 {header}",
                    subtitle=f"{count} episode{'' if count == 1 else 's'}",
                    score=100,
                ))
                for entry in group:
                    results.append(self._entry_result(entry, 100 - index))
                    index += 1

        results.append(Result(
            title="Open Calendar in Browser",
            subtitle="View full calendar in Sonarr",
            score=80,
            action=run_action("open calendar", self.client.open_calendar),
        ))
        return results

    def _entry_result(self, entry: CalendarEntry, score: int) -> Result:
        local = _local(entry)
        when = f"{local:%Y-%m-%d %H:%M}" if local else "TBA"
        icon = "✅" if entry.has_file else "📅"
        return Result(
            title=f"{icon} {entry.series_title}",
            subtitle=f"{entry.code} - {entry.episode_title} - {when}",
            icon=entry.poster_url or DEFAULT_ICON,
            score=score,
            action=run_action(f"open {entry.series_title}",
                              lambda slug=entry.title_slug or entry.series_id: self.client.open_series(slug)),
            context=entry,
        )
