# app/launcharr/core/tasks.py
"""
Fire-and-forget background execution.

Submissions are never deduplicated or joined; two overlapping refresh sweeps
can run at once.
"""
from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Any, Callable, Deque

log = logging.getLogger(__name__)

HISTORY_SIZE = 100


class BackgroundRunner:
    """Runs callables on daemon threads, or inline when ``synchronous``."""

    def __init__(self, synchronous: bool = False):
        self.synchronous = synchronous
        # most recent task names, oldest dropped first
        self.submitted: Deque[str] = deque(maxlen=HISTORY_SIZE)
        self._lock = threading.Lock()

    def submit(self, name: str, fn: Callable[..., Any], *args: Any) -> None:
        with self._lock:
            self.submitted.append(name)
        if self.synchronous:
            self._run(name, fn, args)
            return
        thread = threading.Thread(
            target=self._run, args=(name, fn, args),
            name=f"launcharr-{name}", daemon=True,
        )
        thread.start()

    def _run(self, name: str, fn: Callable[..., Any], args: tuple) -> None:
        started = time.monotonic()
        try:
            log.debug("Task %s started", name)
            fn(*args)
            log.info("Task %s finished in %.2fs", name, time.monotonic() - started)
        except Exception as e:
            log.exception("Task %s failed: %s", name, e)
