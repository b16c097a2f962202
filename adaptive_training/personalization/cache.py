"""Per-day personalization cache.

At most one computation runs per (user_id, workout_id, day) key.
Concurrent callers for the same key await the same shared task; a caller
that is cancelled only stops waiting, the computation still completes and
populates the cache for everyone else.

Failed computations are not cached. An entry expires at the first day
rollover after it was stored, once its computation has finished; a key for
an explicit past day therefore stays cached for the rest of the day it was
requested on. Feedback can drop entries explicitly.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date

from loguru import logger

from adaptive_training.personalization.errors import CacheInconsistencyError
from adaptive_training.personalization.types import PersonalizedWorkout


@dataclass(frozen=True)
class CacheKey:
    user_id: str
    workout_id: str
    day: date


@dataclass(frozen=True)
class _Entry:
    key: CacheKey
    task: asyncio.Future
    stored_on: date


class PersonalizationCache:
    def __init__(self, today: Callable[[], date] = date.today) -> None:
        self._entries: dict[CacheKey, _Entry] = {}
        self._locks: dict[CacheKey, asyncio.Lock] = {}
        self._today = today

    def __len__(self) -> int:
        return len(self._entries)

    def _lock_for(self, key: CacheKey) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def get_or_compute(
        self,
        key: CacheKey,
        compute: Callable[[], Awaitable[PersonalizedWorkout]],
    ) -> PersonalizedWorkout:
        """Return the cached workout for ``key``, computing it at most once.

        Args:
            key: Cache key
            compute: Zero-argument coroutine factory producing the workout

        Returns:
            The shared PersonalizedWorkout for the key
        """
        self.purge_expired()

        async with self._lock_for(key):
            entry = self._lookup(key)
            if entry is None:
                task = asyncio.ensure_future(compute())
                entry = _Entry(key=key, task=task, stored_on=self._today())
                self._entries[key] = entry
                task.add_done_callback(lambda t, e=entry: self._on_done(e, t))
                logger.debug(
                    "personalization_cache: Cache miss, computing",
                    user_id=key.user_id,
                    workout_id=key.workout_id,
                    day=key.day.isoformat(),
                )
            else:
                logger.debug(
                    "personalization_cache: Cache hit",
                    user_id=key.user_id,
                    workout_id=key.workout_id,
                    day=key.day.isoformat(),
                    in_flight=not entry.task.done(),
                )

        return await asyncio.shield(entry.task)

    def get(self, key: CacheKey) -> PersonalizedWorkout | None:
        """Return a completed cached workout without computing."""
        entry = self._lookup(key)
        if entry is None or not entry.task.done():
            return None
        return entry.task.result()

    def _lookup(self, key: CacheKey) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        try:
            _check_entry(key, entry)
        except CacheInconsistencyError as e:
            logger.warning("personalization_cache: Unreadable entry treated as miss", cache_key=str(key), error=e.message)
            self._entries.pop(key, None)
            return None
        return entry

    def _on_done(self, entry: _Entry, task: asyncio.Future) -> None:
        if task.cancelled():
            failed = True
        else:
            failed = task.exception() is not None
        if failed and self._entries.get(entry.key) is entry:
            self._entries.pop(entry.key, None)
            logger.debug("personalization_cache: Failed computation not cached", cache_key=str(entry.key))

    async def invalidate(self, user_id: str, workout_id: str) -> int:
        """Drop every entry for the (user_id, workout_id) pair.

        In-flight computations keep running for their current waiters but
        are no longer reachable from the cache.

        Returns:
            Number of entries dropped
        """
        keys = [k for k in self._entries if k.user_id == user_id and k.workout_id == workout_id]
        for key in keys:
            async with self._lock_for(key):
                self._entries.pop(key, None)
        if keys:
            logger.debug("personalization_cache: Invalidated", user_id=user_id, workout_id=workout_id, count=len(keys))
        return len(keys)

    def purge_expired(self) -> int:
        """Drop finished entries stored before today (day rollover).

        In-flight computations are never purged, so concurrent callers for the
        same key keep sharing one task across the rollover.
        """
        today = self._today()
        expired = [k for k, e in self._entries.items() if e.stored_on < today and e.task.done()]
        for key in expired:
            self._entries.pop(key, None)
        for key in [k for k, lock in self._locks.items() if k not in self._entries and not lock.locked()]:
            self._locks.pop(key, None)
        if expired:
            logger.debug("personalization_cache: Purged expired entries", count=len(expired))
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
        self._locks.clear()
        logger.debug("personalization_cache: Cache cleared")


def _check_entry(key: CacheKey, entry: object) -> None:
    if not isinstance(entry, _Entry) or entry.key != key or not isinstance(entry.task, asyncio.Future):
        raise CacheInconsistencyError(f"Malformed cache entry for {key}")
    task = entry.task
    if not task.done():
        return
    if task.cancelled():
        raise CacheInconsistencyError(f"Cancelled computation cached for {key}")
    if task.exception() is not None:
        raise CacheInconsistencyError(f"Failed computation cached for {key}")
    result = task.result()
    if not isinstance(result, PersonalizedWorkout):
        raise CacheInconsistencyError(f"Cached value for {key} is {type(result).__name__}, not PersonalizedWorkout")
    if result.user_id != key.user_id or result.template.workout_id != key.workout_id or result.day != key.day:
        raise CacheInconsistencyError(f"Cached workout does not match {key}")
