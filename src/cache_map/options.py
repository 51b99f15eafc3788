"""Option models and the three-layer policy resolver.

CacheMapOptions is the user-facing options struct (every field optional);
EntryPolicy is what one entry ends up with after resolve_policy merges the
global, instance and per-call layers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

from cache_map import config
from cache_map.errors import ValidationError

BeforeDeleted = Callable[[Hashable, Any], None]


@dataclass(frozen=True)
class CacheMapOptions:
    """Options accepted by the CacheMap constructor and by CacheMap.set.

    Field groups:
    - Per entry: time_to_live (milliseconds), before_deleted
    - Container only: max_size (ignored when passed per call)

    A field left as None is absent and inherits from the layer below.
    """

    time_to_live: Optional[float] = None
    max_size: Optional[int] = None
    before_deleted: Optional[BeforeDeleted] = None

    def __post_init__(self) -> None:
        ttl = self.time_to_live
        if ttl is not None:
            if isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
                raise ValidationError("time_to_live must be a number of milliseconds")
            if math.isnan(ttl):
                raise ValidationError("time_to_live must not be NaN")

        size = self.max_size
        if size is not None and (isinstance(size, bool) or not isinstance(size, int)):
            raise ValidationError("max_size must be an integer")

        if self.before_deleted is not None and not callable(self.before_deleted):
            raise ValidationError("before_deleted must be callable")


@dataclass(frozen=True)
class EntryPolicy:
    """Effective policy bound to one entry at insertion time."""

    time_to_live: float = math.inf
    before_deleted: Optional[BeforeDeleted] = None


def global_options() -> CacheMapOptions:
    # Library-level layer: never expires, no hook (TTL overridable by env)
    return CacheMapOptions(time_to_live=config.DEFAULT_TIME_TO_LIVE_MS)


def resolve_policy(
    global_layer: CacheMapOptions,
    instance_layer: Optional[CacheMapOptions] = None,
    call_layer: Optional[CacheMapOptions] = None,
) -> EntryPolicy:
    """Merge option layers into one EntryPolicy.

    Layers are applied left to right and each field resolves on its own:
    the last layer that sets a field wins, so overriding the hook per call
    keeps the inherited time_to_live and vice versa.
    """
    time_to_live: Optional[float] = None
    before_deleted: Optional[BeforeDeleted] = None

    for layer in (global_layer, instance_layer, call_layer):
        if layer is None:
            continue
        if layer.time_to_live is not None:
            time_to_live = layer.time_to_live
        if layer.before_deleted is not None:
            before_deleted = layer.before_deleted

    return EntryPolicy(
        time_to_live=math.inf if time_to_live is None else float(time_to_live),
        before_deleted=before_deleted,
    )
