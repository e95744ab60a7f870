"""
Caching and request coalescing for route resolution.

RouteCache: TTL cache keyed by canonical_key(), holds routes AND negative
("every provider failed") results so a failing key isn't retried on every call.

InFlightRegistry: at most one pending resolution per key. Callers for a key
that is already being resolved attach to the same task instead of starting
a second provider sequence.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Dict, Optional

from routing.models import CacheEntry, RouteResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_S = 15.0


class RouteCache:
    """In-process route cache. Nothing is persisted; stale entries are dropped on read."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_S, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, key: str) -> Optional[CacheEntry]:
        """
        Fresh entry for key, or None on a miss.
        entry.route is None means a cached "no route", not a miss.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.created_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return entry

    def store(self, key: str, route: Optional[RouteResult]) -> CacheEntry:
        """Overwrite key with route (or None for "no route"), stamped now."""
        entry = CacheEntry(route=route, created_at=self._clock())
        self._entries[key] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()


class PendingResolution:
    """
    One shared resolution task plus the callers waiting on it.

    abort is the cancellation signal handed to provider adapters; it is set
    when the last attached caller walks away before the task settles.
    """

    def __init__(self, key: str, task: asyncio.Future, abort: asyncio.Event):
        self.key = key
        self.task = task
        self.abort = abort
        self.attached = 0

    def __repr__(self) -> str:
        return f"PendingResolution(key={self.key!r}, attached={self.attached}, done={self.task.done()})"

    def attach(self) -> None:
        self.attached += 1


class InFlightRegistry:
    """key -> PendingResolution, mutated only at register / detach / settle."""

    def __init__(self):
        self._pending: Dict[str, PendingResolution] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, key: str) -> bool:
        return key in self._pending

    def get(self, key: str) -> Optional[PendingResolution]:
        return self._pending.get(key)

    def register(self, key: str, task: asyncio.Future, abort: asyncio.Event) -> PendingResolution:
        if key in self._pending:
            raise RuntimeError(f"A resolution for {key!r} is already in flight.")

        pending = PendingResolution(key, task, abort)
        self._pending[key] = pending
        #removal happens when the task settles, whatever the outcome
        task.add_done_callback(lambda _task: self.resolve(key, pending))
        return pending

    def resolve(self, key: str, pending: PendingResolution) -> None:
        """Drop the registration if it is still this one. Safe to call more than once."""
        if self._pending.get(key) is pending:
            del self._pending[key]

    def detach(self, pending: PendingResolution) -> bool:
        """
        A caller stops waiting on pending.

        Returns True when that caller was the last one and the resolution was
        aborted (abort set, registration dropped so new callers start fresh).
        """
        pending.attached -= 1
        if pending.attached > 0 or pending.task.done():
            return False

        logger.debug("Last caller left %s, aborting provider requests", pending.key)
        pending.abort.set()
        # freed before the aborted task winds down, so a new caller may start
        # a second sequence while the old request is still closing
        self.resolve(pending.key, pending)
        return True
