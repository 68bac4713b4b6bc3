# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Registry Service - Modular Composition

Composes focused modules into the unified registry service:
- RegistryStore: in-memory registry and persistence
- PackageMutator: add/update workflow
- DownloadAggregator: download telemetry
- ManipulatorExecutor: owner/requirements/delete commands
"""

from typing import Any, Dict, List, Mapping, Optional

from extension_registry.core.config import Config
from extension_registry.core.errors import NotConfiguredError, UnknownExtensionError
from extension_registry.core.logging import get_audit_logger, get_service_logger
from extension_registry.models.registry_models import RegistryEntry
from extension_registry.utils.registry_utils import format_download_url
from .authorization import AuthorizationGuard, OwnershipResolver, is_owner
from .downloads import DownloadAggregator
from .manipulators import (
    ChangePackageOwner,
    ChangePackageRequirements,
    DeletePackageMetadata,
    ManipulatorExecutor,
)
from .packages import PackageMutator
from .storage import StorageBackend, create_storage
from .store import RegistryStore
from .validator import PackageValidator, ZipPackageValidator

logger = get_service_logger("registry")


class RegistryService:
    """
    Unified registry service (modular composition).

    Usage:
        service = RegistryService()
        service.configure(load_config("registry.yaml"))
        await service.start()
        entry = await service.add_package("/tmp/upload.zip", "github:alice")
    """

    def __init__(self):
        self.config: Optional[Config] = None
        self.store: Optional[RegistryStore] = None
        self.guard: Optional[AuthorizationGuard] = None
        self.mutator: Optional[PackageMutator] = None
        self.downloads: Optional[DownloadAggregator] = None
        self.executor: Optional[ManipulatorExecutor] = None

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def configure(
        self,
        config: Config,
        storage: Optional[StorageBackend] = None,
        validator: Optional[PackageValidator] = None,
        ownership_resolver: OwnershipResolver = is_owner
    ) -> None:
        """
        Set the configuration and wire the components together.

        Any previously loaded registry is dropped; call start() to load.

        Args:
            config: Registry configuration
            storage: Storage backend (default: built from config.storage)
            validator: Package validator (default: ZipPackageValidator)
            ownership_resolver: Maps (entry, identity) to ownership

        Raises:
            NotConfiguredError: If the storage backend cannot be created
        """
        if storage is None:
            storage = create_storage(config)

        audit_logger = get_audit_logger(config)

        self.config = config
        self.store = RegistryStore(storage)
        self.guard = AuthorizationGuard(config.admins, ownership_resolver)
        self.mutator = PackageMutator(
            self.store,
            validator or ZipPackageValidator(),
            self.guard,
            audit_logger=audit_logger
        )
        self.downloads = DownloadAggregator(self.store)
        self.executor = ManipulatorExecutor(self.store, self.guard, audit_logger=audit_logger)

        logger.info(f"RegistryService configured with storage: {config.storage}")

    async def start(self) -> None:
        """Load the registry from storage"""
        self._require_configured()
        await self.store.load()

    async def shutdown(self) -> None:
        """Wait for outstanding registry saves"""
        if self.store is not None:
            await self.store.wait_for_persistence()

    def _require_configured(self) -> None:
        if self.config is None or self.store is None:
            raise NotConfiguredError()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_registry(self) -> Dict[str, RegistryEntry]:
        """
        The live registry map.

        Callers must not modify it; use the mutation operations instead.
        """
        self._require_configured()
        return self.store.as_dict()

    def get_entry(self, name: str) -> Optional[RegistryEntry]:
        self._require_configured()
        return self.store.get(name)

    def download_url(self, name: str, version: Optional[str] = None) -> str:
        """
        Public URL of a stored package zip under ``download_base_url``.

        Args:
            name: Package name
            version: Published version (default: latest)

        Raises:
            UnknownExtensionError: If the package or version is not published
        """
        entry = self.get_entry(name)
        if entry is None or not entry.versions:
            raise UnknownExtensionError(name)

        if version is None:
            version = entry.latest_version.version
        elif entry.find_version(version) is None:
            raise UnknownExtensionError(f"{name}@{version}")

        return format_download_url(self.config.download_base_url.rstrip("/"), name, version)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_package(self, artifact_path: str, identity: str) -> RegistryEntry:
        self._require_configured()
        return await self.mutator.add_package(artifact_path, identity)

    async def delete_package_metadata(self, name: str, identity: str) -> None:
        self._require_configured()
        await self.executor.execute(name, identity, DeletePackageMetadata())

    async def change_package_owner(self, name: str, identity: str, new_owner: str) -> None:
        self._require_configured()
        await self.executor.execute(name, identity, ChangePackageOwner(new_owner=new_owner))

    async def change_package_requirements(self, name: str, identity: str, requirements: str) -> None:
        self._require_configured()
        await self.executor.execute(name, identity, ChangePackageRequirements(requirements=requirements))

    # ------------------------------------------------------------------
    # Download statistics
    # ------------------------------------------------------------------

    async def record_downloads(
        self,
        name: str,
        version_downloads: Optional[Mapping[str, int]],
        recent_downloads: Optional[Mapping[str, int]] = None
    ) -> bool:
        self._require_configured()
        return await self.downloads.record_downloads(name, version_downloads, recent_downloads)

    async def ingest_download_stats(self, stats: Mapping[str, Any]) -> List[str]:
        """
        Record a whole telemetry document.

        Expected shape:
            {"snippets-extension": {"downloads": {
                "versions": {"0.3.0": 6, "0.3.1": 276},
                "recent": {"20130805": 8, "20130806": 17}}}}

        Returns:
            Names of the packages that changed
        """
        self._require_configured()

        changed = []
        for name, data in stats.items():
            downloads = (data or {}).get("downloads") or {}
            updated = await self.downloads.record_downloads(
                name,
                downloads.get("versions") or {},
                downloads.get("recent") or {}
            )
            if updated:
                changed.append(name)

        logger.info(f"Ingested download stats for {len(stats)} packages, {len(changed)} changed")
        return changed
