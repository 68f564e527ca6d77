# app/launcharr/commands/dates.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List

from dateutil import tz
from dateutil.relativedelta import relativedelta

from launcharr.commands.base import Command
from launcharr.core.models import Query
from launcharr.core.results import Result

WORLD_ZONES = (
    ("EST", "America/New_York"),
    ("PST", "America/Los_Angeles"),
    ("GMT", "Europe/London"),
    ("CET", "Europe/Paris"),
    ("JST", "Asia/Tokyo"),
    ("AEST", "Australia/Sydney"),
)


def _long(value: datetime) -> str:
    return f"{value:%A, %B} {value.day}, {value:%Y at %H:%M:%S}"


class DateTimeCommand(Command):
    flag = "-date"
    aliases = ("-time",)
    name = "Date & Time"
    description = "Date/time utilities and timezone conversions"
    usage = "[time [zone]|convert|utc]"
    requires_credential = False

    def run(self, query: Query) -> List[Result]:
        arg = self.argument(query)
        keyword, _, rest = arg.partition(" ")
        keyword = keyword.lower()
        now = self.ctx.coordinator.clock()

        if keyword in ("time", "tz", "zone"):
            return self._zones(rest.strip(), now)
        if keyword == "convert":
            return self._relative(now)
        if keyword == "utc":
            return self._utc(now)
        return self._overview(now)

    def _now_aware(self, now: datetime) -> datetime:
        return now if now.tzinfo else now.replace(tzinfo=tz.tzlocal())

    def _overview(self, now: datetime) -> List[Result]:
        aware = self._now_aware(now)
        utc_now = aware.astimezone(timezone.utc)
        iso_year, iso_week, _ = aware.isocalendar()
        zone_name = aware.tzname() or "local"
        return [
            Result(title="🕒 Current Local Time", subtitle=f"{_long(aware)} ({zone_name})", score=100),
            Result(title="🌍 Current UTC Time", subtitle=f"{_long(utc_now)} UTC", score=95),
            Result(title="⏱️ Unix Timestamp",
                   subtitle=f"{int(aware.timestamp())} (seconds since 1970-01-01)", score=90),
            Result(title="📅 Week Information",
                   subtitle=f"ISO week {iso_week} of {iso_year} | Day {aware.timetuple().tm_yday} of year",
                   score=85),
            Result(title="🔢 Quick Calculations", subtitle="snr -date convert - Date conversion tools", score=80),
        ]

    def _zones(self, requested: str, now: datetime) -> List[Result]:
        utc_now = self._now_aware(now).astimezone(timezone.utc)
        if requested:
            zone = tz.gettz(requested)
            if zone is None:
                return [Result(title="❓ Unknown Time Zone",
                               subtitle=f"'{requested}' is not a known IANA zone (e.g. Europe/Berlin)",
                               score=100)]
            local = utc_now.astimezone(zone)
            return [Result(title=f"🕐 {requested}",
                           subtitle=f"{local:%H:%M:%S} ({local:%A, %b} {local.day}) {local.tzname()}",
                           score=100)]

        results = [Result(title="🌐 World Time Zones", subtitle="Current time in major timezones", score=100)]
        for abbr, name in WORLD_ZONES:
            zone = tz.gettz(name)
            if zone is None:
                continue
            local = utc_now.astimezone(zone)
            results.append(Result(
                title=f"🕐 {abbr} - {name}",
                subtitle=f"{local:%H:%M:%S} ({local:%A, %b} {local.day})",
                score=95,
            ))
        return results

    def _relative(self, now: datetime) -> List[Result]:
        offsets = (
            ("Yesterday", timedelta(days=-1)),
            ("Tomorrow", timedelta(days=1)),
            ("Last Week", timedelta(days=-7)),
            ("Next Week", timedelta(days=7)),
            ("Last Month", relativedelta(months=-1)),
            ("Next Month", relativedelta(months=1)),
        )
        results = [Result(title="🔄 Date Conversion Tools",
                          subtitle="Various date and time conversion utilities", score=100)]
        for name, delta in offsets:
            target = now + delta
            days = abs((target.date() - now.date()).days)
            results.append(Result(
                title=f"📆 {name}",
                subtitle=f"{target:%A, %B} {target.day}, {target:%Y} ({days} days)",
                score=95,
            ))
        return results

    def _utc(self, now: datetime) -> List[Result]:
        utc_now = self._now_aware(now).astimezone(timezone.utc)
        return [
            Result(title="🌍 UTC Time Information", subtitle="Coordinated Universal Time details", score=100),
            Result(title="⏰ Current UTC", subtitle=f"{utc_now:%Y-%m-%d %H:%M:%S} UTC", score=95),
            Result(title="📄 ISO 8601 Format",
                   subtitle=utc_now.isoformat(timespec="milliseconds").replace("+00:00", "Z"), score=90),
        ]
