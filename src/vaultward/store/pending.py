"""
VaultWard Pending Operation Store

Correlation-keyed ephemeral map holding tool invocations that are waiting
for a human decision. The store is the single owner of a pending
operation's lifetime: an id present in the store has never been executed,
and an absent id is indistinguishable whether it never existed, was
confirmed, or was cancelled.

The store is injected into both the reflection middleware (which writes)
and the confirmation handshake (which resolves). There is no module-level
instance.
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any

from vaultward.logging import get_logger

logger = get_logger("vaultward.store")


class PendingOperationStore(ABC):
    """Interface for pending-operation storage.

    Implementations must be safe under concurrent access from multiple chat
    turns and the confirmation handshake at the same time.
    """

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, overwriting unconditionally."""
        ...

    @abstractmethod
    def get(self, key: str) -> tuple[Any, bool]:
        """Return ``(value, found)``. ``found`` is False for unknown and resolved keys alike."""
        ...

    @abstractmethod
    def clear(self, key: str) -> None:
        """Remove ``key``. Clearing an absent key is a no-op."""
        ...

    @abstractmethod
    def take(self, key: str) -> tuple[Any, bool]:
        """Atomically get and clear ``key``.

        At most one concurrent caller observes ``found=True`` for a key.
        """
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """Snapshot of the keys currently pending."""
        ...

    @abstractmethod
    def purge_older_than(self, max_age_seconds: float) -> int:
        """Drop entries stored more than ``max_age_seconds`` ago. Returns the count removed."""
        ...

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        _, found = self.get(key)
        return found

    def __len__(self) -> int:
        return len(self.keys())

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())


class InMemoryPendingOperationStore(PendingOperationStore):
    """Process-local store backed by a dict and a lock.

    A ``threading.Lock`` is used rather than an asyncio lock so the store can
    be shared with executors running in worker threads; every critical
    section is a handful of dict operations and never awaits.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[Any, float]] = {}

    def set(self, key: str, value: Any) -> None:
        _require_key(key)
        with self._lock:
            self._entries[key] = (value, time.monotonic())
        logger.debug("Pending operation stored", extra={"correlation_id": key})

    def get(self, key: str) -> tuple[Any, bool]:
        _require_key(key)
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None, False
        return entry[0], True

    def clear(self, key: str) -> None:
        _require_key(key)
        with self._lock:
            removed = self._entries.pop(key, None)
        if removed is not None:
            logger.debug("Pending operation cleared", extra={"correlation_id": key})

    def take(self, key: str) -> tuple[Any, bool]:
        _require_key(key)
        with self._lock:
            entry = self._entries.pop(key, None)
        if entry is None:
            return None, False
        logger.debug("Pending operation taken", extra={"correlation_id": key})
        return entry[0], True

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def purge_older_than(self, max_age_seconds: float) -> int:
        if max_age_seconds < 0:
            raise ValueError("max_age_seconds must be non-negative")
        cutoff = time.monotonic() - max_age_seconds
        with self._lock:
            expired = [k for k, (_, stored_at) in self._entries.items() if stored_at < cutoff]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.info(f"Purged {len(expired)} expired pending operation(s)")
        return len(expired)


def _require_key(key: str) -> None:
    if not isinstance(key, str) or not key:
        raise ValueError("Pending operation key must be a non-empty string")
