# app/launcharr/core/status.py
"""
Last known Sonarr connectivity.

The status is a frozen snapshot replaced under a lock; readers always get a
consistent (state, error, timestamp) triple. Probes are rate limited and run
on the background runner so a dispatch never waits on the network.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)

UNCONFIGURED_MESSAGE = "Sonarr API key not configured"


class ConnectionState(str, Enum):
    UNKNOWN = "unknown"
    OK = "ok"
    FAILED = "failed"


@dataclass(frozen=True)
class ConnectionStatus:
    state: ConnectionState = ConnectionState.UNKNOWN
    last_error: str = ""
    last_tested_at: Optional[datetime] = None

    @property
    def is_failed(self) -> bool:
        return self.state is ConnectionState.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "last_error": self.last_error,
            "last_tested_at": self.last_tested_at.isoformat() if self.last_tested_at else None,
        }


class ConnectionProbe:
    def __init__(self, interval_seconds: int = 60):
        self.interval_seconds = interval_seconds
        self._lock = threading.Lock()
        self._status = ConnectionStatus()
        self._in_flight = False

    @property
    def status(self) -> ConnectionStatus:
        with self._lock:
            return self._status

    def should_probe(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now()
        with self._lock:
            if self._in_flight:
                return False
            tested = self._status.last_tested_at
            if tested is None:
                return True
            return (now - tested).total_seconds() > self.interval_seconds

    def record_result(self, ok: bool, error: str = "", now: Optional[datetime] = None) -> ConnectionStatus:
        snapshot = ConnectionStatus(
            state=ConnectionState.OK if ok else ConnectionState.FAILED,
            last_error="" if ok else (error or "Connection failed"),
            last_tested_at=now or datetime.now(),
        )
        with self._lock:
            self._status = snapshot
            self._in_flight = False
        if not ok:
            log.warning("Sonarr connection problem: %s", snapshot.last_error)
        return snapshot

    def mark_unconfigured(self, now: Optional[datetime] = None) -> ConnectionStatus:
        return self.record_result(False, UNCONFIGURED_MESSAGE, now)

    def reset(self) -> None:
        with self._lock:
            self._status = ConnectionStatus()
            self._in_flight = False

    def probe(self, client, now: Optional[datetime] = None) -> ConnectionStatus:
        """One connectivity check against ``client``, recorded into the status."""
        if not client.settings.has_credential():
            return self.mark_unconfigured(now)
        ok, message = client.check_connectivity()
        return self.record_result(ok, "" if ok else message, now)

    def probe_in_background(self, runner, client) -> bool:
        with self._lock:
            if self._in_flight:
                return False
            self._in_flight = True
        runner.submit("connection-probe", self._probe_safely, client)
        return True

    def _probe_safely(self, client) -> None:
        try:
            self.probe(client)
        except Exception as e:
            self.record_result(False, str(e))
