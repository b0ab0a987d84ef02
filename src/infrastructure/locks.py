"""
Per-key asyncio lock.

Used by the orchestrator to serialise status updates, cancellations and
completions of the *same* ride while distinct rides proceed in parallel.

Each key gets its own ``asyncio.Lock`` on first use; the entry is dropped
once nobody holds or waits for it, so the table only ever contains keys
with activity in flight. Acquisition is bounded by ``timeout_seconds``.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator

from src.domain.errors import LockTimeoutError


@dataclass
class _Entry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    refs: int = 0


class KeyedLock:
    def __init__(self, timeout_seconds: float = 5.0):
        self.timeout = timeout_seconds
        self._entries: dict[str, _Entry] = {}

    def locked(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        return len(self._entries)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Hold the lock for *key*; raise ``LockTimeoutError`` if it is not
        obtained within the timeout."""
        entry = self._entries.setdefault(key, _Entry())
        entry.refs += 1
        try:
            try:
                await asyncio.wait_for(entry.lock.acquire(), timeout=self.timeout)
            except asyncio.TimeoutError:
                raise LockTimeoutError(f"Could not acquire lock: lock:{key}") from None
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            entry.refs -= 1
            if entry.refs == 0:
                del self._entries[key]
