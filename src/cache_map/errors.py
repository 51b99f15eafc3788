from __future__ import annotations

from typing import Hashable


class CacheMapError(Exception):
    """Base error for the cache map."""


class ValidationError(CacheMapError):
    """Raised when cache options are invalid."""


class BeforeDeleteHookError(CacheMapError):
    """Raised when a before-deleted hook fails. The entry is already removed."""

    def __init__(self, key: Hashable, message: str) -> None:
        super().__init__(message)
        self.key = key
