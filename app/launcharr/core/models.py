# app/launcharr/core/models.py
"""
Plain data records for Sonarr payloads.

Every ``from_json`` decoder tolerates missing or null fields and falls back to
an empty string, zero or False. Nested lookups (``series.title``,
``quality.quality.name``, ``episode.seasonNumber``) default the same way.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser

log = logging.getLogger(__name__)

POSTER_COVER_TYPE = "poster"


# ===== Decoding helpers ======================================================

def _dig(data: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    cur = data
    for key in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _int(value: Any) -> int:
    try:
        return int(value) if value is not None else 0
    except (TypeError, ValueError):
        return 0


def _float(value: Any) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _bool(value: Any) -> bool:
    return bool(value) if value is not None else False


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp.

    Returns an aware datetime when the text carries an offset or ``Z``, a naive
    one when it does not, and None when the value is missing or unparsable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return date_parser.isoparse(str(value))
    except (ValueError, OverflowError):
        log.warning("Unparsable timestamp %r; treating as unknown", value)
        return None


def extract_poster_url(images: Any) -> str:
    """First poster image, preferring its remote URL over the local one."""
    if not isinstance(images, list):
        return ""
    for image in images:
        if isinstance(image, dict) and image.get("coverType") == POSTER_COVER_TYPE:
            return _str(image.get("remoteUrl")) or _str(image.get("url"))
    return ""


def episode_code(season: int, episode: int) -> str:
    return f"S{season:02d}E{episode:02d}"


# ===== Records ===============================================================

@dataclass
class SeriesStatistics:
    season_count: int = 0
    episode_count: int = 0
    episode_file_count: int = 0
    total_episode_count: int = 0
    size_on_disk: int = 0

    @classmethod
    def from_json(cls, data: Any) -> "SeriesStatistics":
        data = data if isinstance(data, dict) else {}
        return cls(
            season_count=_int(data.get("seasonCount")),
            episode_count=_int(data.get("episodeCount")),
            episode_file_count=_int(data.get("episodeFileCount")),
            total_episode_count=_int(data.get("totalEpisodeCount")),
            size_on_disk=_int(data.get("sizeOnDisk")),
        )


@dataclass
class Series:
    id: int = 0
    title: str = ""
    title_slug: str = ""
    overview: str = ""
    status: str = ""
    network: str = ""
    path: str = ""
    statistics: SeriesStatistics = field(default_factory=SeriesStatistics)
    poster_url: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Series":
        return cls(
            id=_int(data.get("id")),
            title=_str(data.get("title")),
            title_slug=_str(data.get("titleSlug")),
            overview=_str(data.get("overview")),
            status=_str(data.get("status")),
            network=_str(data.get("network")),
            path=_str(data.get("path")),
            statistics=SeriesStatistics.from_json(data.get("statistics")),
            poster_url=extract_poster_url(data.get("images")),
        )

    def matches(self, term: str) -> bool:
        term = (term or "").strip().lower()
        if not term:
            return True
        return term in self.title.lower() or term in self.overview.lower()


@dataclass
class CalendarEntry:
    """
    One episode from the calendar endpoint.

    ``air_date`` is aware when the server reported an offset, naive when it did
    not, and None when unknown.
    """
    id: int = 0
    series_id: int = 0
    series_title: str = ""
    episode_title: str = ""
    season_number: int = 0
    episode_number: int = 0
    air_date: Optional[datetime] = None
    has_file: bool = False
    monitored: bool = False
    overview: str = ""
    title_slug: str = ""
    series_path: str = ""
    poster_url: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "CalendarEntry":
        # airDateUtc carries the broadcast time; airDate is only the day
        raw_air = data.get("airDateUtc") or data.get("airDate")
        return cls(
            id=_int(data.get("id")),
            series_id=_int(data.get("seriesId")),
            series_title=_str(_dig(data, "series", "title")),
            episode_title=_str(data.get("title")),
            season_number=_int(data.get("seasonNumber")),
            episode_number=_int(data.get("episodeNumber")),
            air_date=parse_datetime(raw_air),
            has_file=_bool(data.get("hasFile")),
            monitored=_bool(data.get("monitored")),
            overview=_str(data.get("overview")),
            title_slug=_str(_dig(data, "series", "titleSlug")),
            series_path=_str(_dig(data, "series", "path")),
            poster_url=extract_poster_url(_dig(data, "series", "images")),
        )

    @property
    def code(self) -> str:
        return episode_code(self.season_number, self.episode_number)


def queue_progress(data: Dict[str, Any]) -> float:
    """Percent downloaded from size/sizeleft, with a status-based fallback."""
    total = _float(data.get("size"))
    left = _float(data.get("sizeleft"))
    if total > 0 and left >= 0:
        return min(100.0, max(0.0, (total - left) / total * 100))
    status = _str(data.get("status")).lower()
    if status == "completed":
        return 100.0
    if status == "downloading":
        return 50.0
    return 0.0


@dataclass
class QueueEntry:
    id: int = 0
    series_id: int = 0
    title: str = ""
    season_number: int = 0
    episode_number: int = 0
    quality: str = ""
    status: str = ""
    progress: float = 0.0
    estimated_completion: Optional[datetime] = None
    protocol: str = ""
    download_client: str = ""
    title_slug: str = ""
    poster_url: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "QueueEntry":
        return cls(
            id=_int(data.get("id")),
            series_id=_int(data.get("seriesId")),
            title=_str(_dig(data, "series", "title")) or _str(data.get("title")),
            season_number=_int(_dig(data, "episode", "seasonNumber")),
            episode_number=_int(_dig(data, "episode", "episodeNumber")),
            quality=_str(_dig(data, "quality", "quality", "name")),
            status=_str(data.get("status")),
            progress=queue_progress(data),
            estimated_completion=parse_datetime(data.get("estimatedCompletionTime")),
            protocol=_str(data.get("protocol")),
            download_client=_str(data.get("downloadClient")),
            title_slug=_str(_dig(data, "series", "titleSlug")),
            poster_url=extract_poster_url(_dig(data, "series", "images")),
        )

    @property
    def code(self) -> str:
        return episode_code(self.season_number, self.episode_number)


HISTORY_ICONS = {
    "grabbed": "⬇️",
    "downloadfolderimported": "✅",
    "downloadfailed": "❌",
}


@dataclass
class HistoryEntry:
    id: int = 0
    series_id: int = 0
    title: str = ""
    season_number: int = 0
    episode_number: int = 0
    quality: str = ""
    event_type: str = ""
    date: Optional[datetime] = None
    title_slug: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "HistoryEntry":
        season = _dig(data, "episodeInfo", "seasonNumber")
        if season is None:
            season = _dig(data, "episode", "seasonNumber")
        number = _dig(data, "episodeInfo", "episodeNumber")
        if number is None:
            number = _dig(data, "episode", "episodeNumber")
        return cls(
            id=_int(data.get("id")),
            series_id=_int(data.get("seriesId")),
            title=_str(_dig(data, "series", "title")) or _str(data.get("sourceTitle")),
            season_number=_int(season),
            episode_number=_int(number),
            quality=_str(_dig(data, "quality", "quality", "name")),
            event_type=_str(data.get("eventType")),
            date=parse_datetime(data.get("date")),
            title_slug=_str(_dig(data, "series", "titleSlug")),
        )

    @property
    def icon(self) -> str:
        return HISTORY_ICONS.get(self.event_type.lower(), "📝")

    @property
    def code(self) -> str:
        return episode_code(self.season_number, self.episode_number)


HEALTH_ICONS = {"error": "❌", "warning": "⚠️", "info": "ℹ️"}
HEALTH_SEVERITY = {"error": 0, "warning": 1, "info": 2}


@dataclass
class HealthCheck:
    source: str = ""
    type: str = ""
    message: str = ""
    wiki_url: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "HealthCheck":
        return cls(
            source=_str(data.get("source")),
            type=_str(data.get("type")),
            message=_str(data.get("message")),
            wiki_url=_str(data.get("wikiUrl")),
        )

    @property
    def icon(self) -> str:
        return HEALTH_ICONS.get(self.type.lower(), "🔍")

    @property
    def display_title(self) -> str:
        return f"{self.icon} {self.source}"

    @property
    def display_subtitle(self) -> str:
        return f"{self.type.upper()}: {self.message}"

    @property
    def severity(self) -> int:
        return HEALTH_SEVERITY.get(self.type.lower(), 3)

    @property
    def is_update_check(self) -> bool:
        return "update" in self.source.lower()


@dataclass
class RefreshResult:
    """Outcome of one bulk refresh; failed_series keeps rescan order."""
    success: bool = False
    series_refreshed: int = 0
    total_series: int = 0
    message: str = ""
    failed_series: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "series_refreshed": self.series_refreshed,
            "total_series": self.total_series,
            "message": self.message,
            "failed_series": list(self.failed_series),
        }


@dataclass(frozen=True)
class Query:
    """Raw launcher input; never mutated."""
    search: str = ""
    action_keyword: str = ""

    @property
    def text(self) -> str:
        return self.search.strip()
