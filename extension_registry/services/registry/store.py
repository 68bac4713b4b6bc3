# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Registry Store

Single responsibility: own the in-memory map from package name to entry.

Lifecycle: UNINITIALIZED -> LOADING -> READY (or FAILED). Every accessor
raises RegistryNotLoadedError until load() has succeeded.

Persistence is fire-and-forget: persist() serializes the map immediately
and writes it in a background task. Failures are logged and never undo the
in-memory commit, so a crash between commit and write loses that commit.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterator, List, Optional, Set, Tuple

from extension_registry.core.errors import RegistryNotLoadedError, sanitize_error_for_user
from extension_registry.core.logging import get_service_logger, log_event
from extension_registry.models.registry_models import RegistryEntry, StoreState
from .storage import StorageBackend

logger = get_service_logger("store")


class RegistryStore:
    """In-memory registry backed by a storage backend"""

    def __init__(self, storage: StorageBackend):
        """
        Initialize the store. Call load() before any other operation.

        Args:
            storage: Backend used to load and persist the registry
        """
        self.storage = storage
        self.state = StoreState.UNINITIALIZED
        self._registry: Optional[Dict[str, RegistryEntry]] = None

        # Per-name mutation locks with the number of tasks holding or awaiting each
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._pending: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """
        Populate the map from the storage backend.

        Raises:
            Exception: Whatever the backend raised; the store is left FAILED
        """
        self.state = StoreState.LOADING
        try:
            registry = await self.storage.get_registry()
        except Exception as e:
            self.state = StoreState.FAILED
            logger.error(f"Unable to load registry: {e}", exc_info=True)
            raise

        self._registry = dict(registry)
        self.state = StoreState.READY
        logger.info(f"Registry loaded with {len(self._registry)} entries")

    def ensure_loaded(self) -> None:
        """Raise RegistryNotLoadedError unless the registry is ready"""
        self._require_loaded()

    def _require_loaded(self) -> Dict[str, RegistryEntry]:
        if self.state != StoreState.READY or self._registry is None:
            raise RegistryNotLoadedError()
        return self._registry

    # ------------------------------------------------------------------
    # Map access
    # ------------------------------------------------------------------

    def get(self, name: str) -> Optional[RegistryEntry]:
        return self._require_loaded().get(name)

    def set(self, name: str, entry: RegistryEntry) -> None:
        self._require_loaded()[name] = entry

    def delete(self, name: str) -> None:
        self._require_loaded().pop(name, None)

    def __contains__(self, name: str) -> bool:
        return name in self._require_loaded()

    def __len__(self) -> int:
        return len(self._require_loaded())

    def names(self) -> List[str]:
        return list(self._require_loaded().keys())

    def items(self) -> Iterator[Tuple[str, RegistryEntry]]:
        return iter(list(self._require_loaded().items()))

    def as_dict(self) -> Dict[str, RegistryEntry]:
        """Live map; readers must not mutate it"""
        return self._require_loaded()

    def title_in_use(self, name: str, title: Optional[str]) -> bool:
        """
        Check whether another package already uses ``title``.

        Comparison is case-insensitive; the package ``name`` itself is
        excluded and empty titles never conflict.
        """
        if not title:
            return False

        wanted = title.lower()
        for key, entry in self._require_loaded().items():
            if key == name:
                continue
            other = entry.metadata.title
            if other and other.lower() == wanted:
                return True
        return False

    # ------------------------------------------------------------------
    # Concurrency
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def locked(self, name: str) -> AsyncIterator[None]:
        """
        Hold the mutation lock for a package name.

        Locks are created on demand and dropped once no task holds or waits
        on them, so the table only covers names in active use.
        """
        lock = self._locks.get(name)
        if lock is None:
            lock = self._locks[name] = asyncio.Lock()
        self._lock_users[name] = self._lock_users.get(name, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[name] -= 1
            if not self._lock_users[name]:
                del self._lock_users[name]
                del self._locks[name]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, dict]:
        """Serialize the registry to the persisted layout"""
        return {name: entry.to_dict() for name, entry in self._require_loaded().items()}

    def persist(self) -> asyncio.Task:
        """
        Write the whole registry in the background.

        Returns:
            The scheduled task; callers are not expected to await it
        """
        snapshot = self.snapshot()
        task = asyncio.get_running_loop().create_task(self._save(snapshot))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _save(self, snapshot: Dict[str, dict]) -> None:
        try:
            await self.storage.save_registry(snapshot)
        except Exception as e:
            log_event(
                logger,
                "registry_save_failed",
                level="ERROR",
                entries=len(snapshot),
                error=sanitize_error_for_user(e),
            )

    async def wait_for_persistence(self) -> None:
        """Wait for every outstanding background save to finish"""
        while True:
            pending = [task for task in self._pending if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending)
