# app/launcharr/core/sonarr.py
"""
Thin Sonarr v3 API client over requests.

The client reads the shared settings on every call, so changes made by the
setup wizard take effect without rebuilding it. Non-2xx responses and
transport failures raise SonarrAPIError; the command helpers that return a
bool log and swallow it.
"""
from __future__ import annotations

import logging
import threading
import webbrowser
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

import requests

from launcharr.core.models import (
    CalendarEntry, HealthCheck, HistoryEntry, QueueEntry, Series,
)

log = logging.getLogger(__name__)



class SonarrAPIError(Exception):
    """Raised for failed Sonarr requests."""
    def __init__(self, message: str, status_code: int = 0, response: str = ""):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.message)


def _fmt_time(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%S")


class SonarrClient:
    def __init__(self, settings, session_factory=requests.Session):
        self.settings = settings
        self._session_factory = session_factory
        self._session: Optional[requests.Session] = None
        self._session_key: Optional[Tuple[str, str, bool]] = None
        self._lock = threading.Lock()

    # ----- transport -------------------------------------------------------

    @property
    def sonarr(self):
        return self.settings.sonarr

    def _current_key(self) -> Tuple[str, str, bool]:
        s = self.sonarr
        return (s.api_key, s.server_url, s.use_https)

    def session(self) -> requests.Session:
        """Session bound to the current credentials; rebuilt when they change."""
        key = self._current_key()
        with self._lock:
            if self._session is None or self._session_key != key:
                if self._session is not None:
                    self._session.close()
                sess = self._session_factory()
                sess.headers.update({
                    "X-Api-Key": key[0],
                    "Accept": "application/json",
                })
                self._session = sess
                self._session_key = key
            return self._session

    def _url(self, endpoint: str) -> str:
        return f"{self.sonarr.base_url}/{endpoint.lstrip('/')}"

    def _request(self, method: str, endpoint: str,
                 params: Optional[Dict[str, Any]] = None,
                 payload: Optional[Dict[str, Any]] = None) -> Any:
        url = self._url(endpoint)
        try:
            resp = self.session().request(
                method, url, params=params, json=payload,
                timeout=self.sonarr.request_timeout,
            )
        except requests.RequestException as e:
            raise SonarrAPIError(f"Connection error: {e}") from e

        if not resp.ok:
            raise SonarrAPIError(
                f"HTTP {resp.status_code}: {resp.reason or 'request failed'}",
                status_code=resp.status_code,
                response=resp.text[:500] if resp.text else "",
            )
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise SonarrAPIError(f"Invalid JSON response: {e}") from e

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", endpoint, params=params)

    def post(self, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("POST", endpoint, payload=payload or {})

    def _command(self, name: str, **body: Any) -> bool:
        try:
            self.post("command", {"name": name, **body})
            log.info("Sent %s %s", name, body or "")
            return True
        except SonarrAPIError as e:
            log.error("Command %s failed: %s", name, e)
            return False

    # ----- queries ---------------------------------------------------------

    def get_series(self) -> List[Series]:
        data = self.get("series")
        return [Series.from_json(s) for s in data if isinstance(s, dict)] if isinstance(data, list) else []

    def search_series(self, query: str) -> List[Series]:
        return [s for s in self.get_series() if s.matches(query)]

    def get_calendar(self, start: datetime, end: datetime) -> List[CalendarEntry]:
        data = self.get("calendar", params={
            "start": _fmt_time(start),
            "end": _fmt_time(end),
            "includeSeries": "true",
        })
        entries: List[CalendarEntry] = []
        for record in data if isinstance(data, list) else []:
            if not isinstance(record, dict):
                log.warning("Skipping malformed calendar record: %r", record)
                continue
            try:
                entries.append(CalendarEntry.from_json(record))
            except (TypeError, ValueError, AttributeError) as e:
                log.warning("Skipping calendar record %s: %s", record.get("id"), e)
        log.debug("Calendar %s..%s returned %d entries", start, end, len(entries))
        return entries

    def get_queue(self, page_size: int = 10) -> List[QueueEntry]:
        data = self.get("queue", params={
            "pageSize": page_size,
            "sortKey": "timeleft",
            "sortDir": "asc",
            "includeSeries": "true",
            "includeEpisode": "true",
        })
        records = data.get("records", []) if isinstance(data, dict) else []
        return [QueueEntry.from_json(r) for r in records if isinstance(r, dict)]

    def get_history(self, page_size: int = 10) -> List[HistoryEntry]:
        data = self.get("history", params={
            "page": 1,
            "pageSize": page_size,
            "sortKey": "date",
            "sortDir": "desc",
            "includeSeries": "true",
            "includeEpisode": "true",
        })
        records = data.get("records", []) if isinstance(data, dict) else []
        return [HistoryEntry.from_json(r) for r in records if isinstance(r, dict)]

    def get_health_checks(self) -> List[HealthCheck]:
        data = self.get("health")
        return [HealthCheck.from_json(h) for h in data if isinstance(h, dict)] if isinstance(data, list) else []

    # ----- commands --------------------------------------------------------

    def rescan_series(self, series_id: int) -> bool:
        return self._command("RescanSeries", seriesId=series_id)

    def rescan_all(self) -> bool:
        return self._command("RescanSeries")

    def trigger_health_check(self) -> bool:
        return self._command("CheckHealth")

    def retest_health_check(self, check: HealthCheck) -> bool:
        if check.is_update_check:
            return self._command("ApplicationCheckUpdate")
        return self._command("CheckHealth")

    # ----- connectivity ----------------------------------------------------

    def ping(self) -> bool:
        ok, _ = self.check_connectivity()
        return ok

    def check_connectivity(self, timeout: Optional[int] = None) -> Tuple[bool, str]:
        """Raw GET of the web root's /ping; returns (ok, human message)."""
        if timeout is None:
            timeout = self.settings.probe.timeout_seconds
        url = f"{self.sonarr.web_base_url}/ping"
        try:
            resp = self.session().get(url, timeout=timeout)
        except requests.RequestException as e:
            log.warning("Ping %s failed: %s", url, e)
            return False, f"Connection failed: {e}"
        if resp.ok:
            return True, f"Connected to {self.sonarr.server_url}"
        return False, f"HTTP {resp.status_code} from {self.sonarr.server_url}"

    # ----- browser ---------------------------------------------------------

    def open_url(self, url: str) -> bool:
        try:
            log.debug("Opening %s", url)
            return bool(webbrowser.open(url))
        except webbrowser.Error as e:
            log.error("Could not open %s: %s", url, e)
            return False

    def series_url(self, slug_or_id: Union[str, int]) -> str:
        return f"{self.sonarr.web_base_url}/series/{slug_or_id}"

    def open_series(self, slug_or_id: Union[str, int]) -> bool:
        return self.open_url(self.series_url(slug_or_id))

    def open_calendar(self) -> bool:
        return self.open_url(f"{self.sonarr.web_base_url}/calendar")

    def open_activity(self) -> bool:
        return self.open_url(f"{self.sonarr.web_base_url}/activity")

    def open_system_status(self) -> bool:
        return self.open_url(f"{self.sonarr.web_base_url}/system/status")
