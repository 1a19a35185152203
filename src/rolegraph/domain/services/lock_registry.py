"""Keyed asyncio locks for serializing role mutations.

Name-space changes lock the owning container, edge changes lock the realm's
composite graph. Locks are held weakly: a key's lock disappears once no
coroutine holds or waits on it.
"""

import asyncio
import weakref


class LockRegistry:
    """Hands out one asyncio.Lock per key.

    Lock keys are formatted as: container:{container_id} or graph:{realm_id}
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def lock_for(self, key: str) -> asyncio.Lock:
        """Get the lock for a key, creating it if nobody holds one."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def container_lock(self, container_id: str) -> asyncio.Lock:
        """Lock guarding a container's role-name namespace."""
        return self.lock_for(f"container:{container_id}")

    def graph_lock(self, realm_id: str) -> asyncio.Lock:
        """Lock guarding the composite edges of every role in a realm."""
        return self.lock_for(f"graph:{realm_id}")

    def size(self) -> int:
        """Number of locks currently alive."""
        return len(self._locks)


# Shared by every service instance in the process
default_lock_registry = LockRegistry()
