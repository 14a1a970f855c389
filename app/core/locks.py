import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator


class KeyedLock:
    """
    One asyncio.Lock per key, created on first use.

    Locks are held in a WeakValueDictionary, so a key's lock disappears once
    nobody holds or waits on it.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _get(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._get(key)
        async with lock:
            yield


# Serializes folder structure mutations (create/move/delete) per owner
folder_structure_lock = KeyedLock()
