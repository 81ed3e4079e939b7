"""Per-user sliding-window quota for AI analysis requests."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from contextlib import contextmanager
from typing import Callable, Deque, Dict, Iterator, Optional

logger = logging.getLogger(__name__)


class InMemoryRateWindowStore:
    """Timestamps of recent requests keyed by user, one lock per user.

    ``try_acquire`` is the only mutating operation and runs entirely under the
    user's lock, so concurrent checks for the same user cannot both take the
    last free slot. Users whose window empties are evicted along with their
    lock.
    """

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._windows: Dict[str, Deque[float]] = {}

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.Lock()
            return lock

    @contextmanager
    def _user_lock(self, user_id: str) -> Iterator[None]:
        # A caller may still hold a lock that was evicted while it waited;
        # it must retry against the live one.
        while True:
            lock = self._lock_for(user_id)
            with lock:
                with self._registry_lock:
                    live = self._locks.get(user_id) is lock
                if live:
                    yield
                    return

    def _evict_if_idle(self, user_id: str) -> None:
        # Caller holds the user's lock.
        if self._windows.get(user_id):
            return
        with self._registry_lock:
            self._locks.pop(user_id, None)
            self._windows.pop(user_id, None)

    @staticmethod
    def _prune(window: Deque[float], cutoff: float) -> None:
        while window and window[0] <= cutoff:
            window.popleft()

    def try_acquire(
        self,
        user_id: str,
        *,
        now: float,
        window_seconds: float,
        max_requests: int,
    ) -> bool:
        with self._user_lock(user_id):
            window = self._windows.setdefault(user_id, deque())
            self._prune(window, now - window_seconds)
            if len(window) >= max_requests:
                return False
            window.append(now)
            return True

    def count(self, user_id: str, *, now: float, window_seconds: float) -> int:
        with self._user_lock(user_id):
            window = self._windows.get(user_id)
            if window:
                self._prune(window, now - window_seconds)
            used = len(window) if window else 0
            self._evict_if_idle(user_id)
            return used

    def sweep(self, *, now: float, window_seconds: float) -> int:
        """Evict every user whose window has fully expired; return how many."""
        with self._registry_lock:
            user_ids = list(self._locks)
        evicted = 0
        for user_id in user_ids:
            with self._user_lock(user_id):
                window = self._windows.get(user_id)
                if window:
                    self._prune(window, now - window_seconds)
                if not window:
                    evicted += 1
                self._evict_if_idle(user_id)
        return evicted

    def tracked_users(self) -> int:
        with self._registry_lock:
            return len(self._locks)


class AnalysisRateLimiter:
    """Allow at most ``max_requests`` analyses per user per trailing window."""

    def __init__(
        self,
        *,
        max_requests: int = 5,
        window_seconds: float = 3600.0,
        store: InMemoryRateWindowStore | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._store = store or InMemoryRateWindowStore()
        self._clock = clock
        self._last_sweep: Optional[float] = None

    def _maybe_sweep(self, now: float) -> None:
        # At most one sweep per window; users idle for a whole window are dropped.
        if self._last_sweep is None:
            self._last_sweep = now
        elif now - self._last_sweep >= self.window_seconds:
            self._last_sweep = now
            evicted = self._store.sweep(now=now, window_seconds=self.window_seconds)
            logger.debug("Evicted %d idle rate-limit windows", evicted)

    def can_analyze(self, user_id: str) -> bool:
        """Record a request for ``user_id`` if quota remains; never raises."""
        now = self._clock()
        self._maybe_sweep(now)
        allowed = self._store.try_acquire(
            user_id,
            now=now,
            window_seconds=self.window_seconds,
            max_requests=self.max_requests,
        )
        if not allowed:
            logger.info("Analysis quota exhausted for user %s", user_id)
        return allowed

    def remaining(self, user_id: str) -> int:
        used = self._store.count(
            user_id, now=self._clock(), window_seconds=self.window_seconds
        )
        return max(self.max_requests - used, 0)


__all__ = ["AnalysisRateLimiter", "InMemoryRateWindowStore"]
