"""Configuration and environment helpers for the cache map.

Provides small helpers to read typed environment variables and exposes
the library-level defaults that form the lowest option layer
(DEFAULT_TIME_TO_LIVE_MS, DEFAULT_MAX_SIZE).
"""

from __future__ import annotations

import math
import os
from typing import Optional


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        return default
    # NaN would never compare as expired or as infinite
    return default if math.isnan(value) else value


# Global TTL for entries, in milliseconds (inf = never expires)
DEFAULT_TIME_TO_LIVE_MS = _env_float("CACHE_MAP_DEFAULT_TTL_MS", math.inf)

# Capacity used when a CacheMap is built without max_size (None = unbounded)
DEFAULT_MAX_SIZE = _env_int("CACHE_MAP_DEFAULT_MAX_SIZE", None)
