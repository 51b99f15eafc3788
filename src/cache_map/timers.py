"""
Expiration timers.

One-shot callbacks on the asyncio event loop (loop.call_later). The cache
owns the returned handles and cancels them on every removal path.
"""

from __future__ import annotations

import asyncio
import math
from typing import Any, Callable, Optional


class ExpirationScheduler:
    def __init__(self, *, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        # Pinned loop; otherwise the running loop is looked up per schedule call.
        self._loop = loop

    def schedule(
        self,
        ttl_ms: Optional[float],
        callback: Callable[..., Any],
        *args: Any,
    ) -> Optional[asyncio.TimerHandle]:
        # No timer for absent, infinite or non-positive TTLs.
        if ttl_ms is None or math.isinf(ttl_ms) or ttl_ms <= 0:
            return None

        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(ttl_ms / 1000.0, callback, *args)

    @staticmethod
    def cancel(handle: Optional[asyncio.TimerHandle]) -> None:
        # Cancelling a fired or cancelled handle is a no-op in asyncio.
        if handle is not None:
            handle.cancel()
