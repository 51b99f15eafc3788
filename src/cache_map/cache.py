"""In-memory key/value cache with per-entry expiration and FIFO capacity.

Entries live in an OrderedDict kept in insertion order. Every removal
(delete, expiration, eviction, clear) goes through CacheMap._remove, which
cancels the entry's timer, calls its before-deleted hook once and drops
the slot.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Generic, Hashable, Iterator, List, Optional, Tuple, TypeVar

from cache_map import config
from cache_map.errors import BeforeDeleteHookError
from cache_map.options import BeforeDeleted, CacheMapOptions, global_options, resolve_policy
from cache_map.timers import ExpirationScheduler

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(slots=True, eq=False)
class CacheEntry(Generic[V]):
    # Stores value + pending expiration + hook bound at insertion.
    # eq=False: entries compare by identity, one object per insertion.
    value: V
    before_deleted: Optional[BeforeDeleted] = None
    handle: Optional[asyncio.TimerHandle] = None
    removing: bool = False


class CacheMap(Generic[K, V]):
    """Key/value cache whose entries can expire and whose size can be capped.

    Options resolve per field: per-call options given to ``set`` override the
    options given here, which override the library defaults (never expire,
    no hook). Expiration timers run on the asyncio event loop, so a finite
    ``time_to_live`` needs a running loop or an explicit ``loop``.
    """

    def __init__(
        self,
        options: Optional[CacheMapOptions] = None,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self._options = options or CacheMapOptions()
        self._global = global_options()
        self._max_size = (
            self._options.max_size if self._options.max_size is not None else config.DEFAULT_MAX_SIZE
        )
        self._scheduler = ExpirationScheduler(loop=loop)
        self._store: "OrderedDict[K, CacheEntry[V]]" = OrderedDict()

    @property
    def max_size(self) -> Optional[int]:
        return self._max_size

    @property
    def size(self) -> int:
        return len(self._store)

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        entry = self._store.get(key)
        if entry is None:
            return default
        return entry.value

    def has(self, key: K) -> bool:
        return key in self._store

    def set(self, key: K, value: V, options: Optional[CacheMapOptions] = None) -> None:
        """Store ``value`` under ``key`` at the newest position.

        Re-setting a present key replaces it silently: its timer is
        cancelled and rescheduled, its hook does not fire. A new key on a
        full cache evicts the oldest entry first (hook fires). With
        ``max_size <= 0`` nothing happens at all.
        """
        if self._max_size is not None and self._max_size <= 0:
            return

        policy = resolve_policy(self._global, self._options, options)

        # Schedule before evicting so a scheduling failure leaves the cache as it was
        entry: CacheEntry[V] = CacheEntry(value=value, before_deleted=policy.before_deleted)
        entry.handle = self._scheduler.schedule(policy.time_to_live, self._expire, key, entry)

        if self._max_size is not None:
            try:
                self._maybe_evict_for_insert(key)
            except BaseException:
                self._scheduler.cancel(entry.handle)
                raise

        previous = self._store.get(key)
        if previous is not None:
            self._scheduler.cancel(previous.handle)
            previous.handle = None

        self._store[key] = entry
        # Assignment to an existing key keeps its old slot; reposition explicitly
        self._store.move_to_end(key, last=True)

    def delete(self, key: K) -> None:
        entry = self._store.get(key)
        if entry is None or entry.removing:
            return
        self._remove(key, entry)

    def clear(self) -> None:
        """Remove every entry, oldest first, firing each hook once."""
        for key in list(self._store):
            self.delete(key)

    def keys(self) -> List[K]:
        return list(self._store)

    def items(self) -> List[Tuple[K, V]]:
        return [(k, e.value) for k, e in self._store.items()]

    def _maybe_evict_for_insert(self, key: K) -> None:
        # Replacing a present key never evicts
        if key in self._store:
            return
        if self._max_size is None or len(self._store) < self._max_size:
            return

        # Skip entries whose hook is running; they are already on their way out
        oldest = next((k for k, e in self._store.items() if not e.removing), None)
        if oldest is None:
            return
        logger.debug("Evicting oldest key %r to make room for %r", oldest, key)
        self._remove(oldest, self._store[oldest])

    def _expire(self, key: K, entry: CacheEntry[V]) -> None:
        # Timer belongs to one insertion; skip if the key was removed or re-set since
        if self._store.get(key) is not entry:
            return
        logger.debug("Expiring key %r", key)
        self._remove(key, entry)

    def _remove(self, key: K, entry: CacheEntry[V]) -> None:
        # A hook touching the cache must not start a second removal of this entry
        if entry.removing:
            return
        entry.removing = True
        self._scheduler.cancel(entry.handle)
        entry.handle = None

        try:
            if entry.before_deleted is not None:
                entry.before_deleted(key, entry.value)
        except Exception as e:
            raise BeforeDeleteHookError(key, f"before_deleted hook failed for {key!r}: {e}") from e
        finally:
            # The hook may have re-set the key; only drop this insertion's slot
            if self._store.get(key) is entry:
                del self._store[key]

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._store))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={len(self._store)}, max_size={self._max_size})"
