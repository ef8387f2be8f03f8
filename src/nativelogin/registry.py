"""Keyed registry of per-account instances.

Owned by the application's composition root instead of living in a
process-wide global. Typical use is one NativeLoginManager per tenant or
account id.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ManagerRegistry(Generic[T]):
    """Thread-safe lookup-or-create registry keyed by account id.

    The lock guards only the dictionary operations. The factory runs outside
    the lock, so two racing callers may both build an instance for the same
    key; the first one inserted wins and both callers receive it. The
    losing instance is handed to the optional disposer so resources it
    holds can be released.
    """

    def __init__(
        self,
        factory: Callable[[str], T],
        disposer: Callable[[T], None] | None = None,
    ):
        self._factory = factory
        self._disposer = disposer
        self._instances: dict[str, T] = {}
        self._lock = threading.Lock()

    def get_or_create(self, key: str) -> T:
        """Return the instance for key, creating it on first use.

        Raises:
            ValueError: If key is empty
        """
        if not key:
            raise ValueError("Registry key must be a non-empty string")

        with self._lock:
            existing = self._instances.get(key)
        if existing is not None:
            return existing

        created = self._factory(key)
        with self._lock:
            instance = self._instances.setdefault(key, created)

        if instance is created:
            logger.debug(f"Created registry entry for {key}")
        else:
            logger.debug(f"Discarding duplicate registry entry for {key}")
            if self._disposer is not None:
                self._disposer(created)
        return instance

    def get(self, key: str) -> T | None:
        with self._lock:
            return self._instances.get(key)

    def remove(self, key: str) -> T | None:
        """Remove and return the instance for key, if any."""
        with self._lock:
            removed = self._instances.pop(key, None)
        if removed is not None:
            logger.debug(f"Removed registry entry for {key}")
        return removed

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._instances

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)
