# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Storage Backends

Single responsibility: durable storage of the registry map and package artifacts.

Storage structure (LocalFileStorage):
    {storage_path}/
    ├── registry.json                 name -> entry, flat object
    └── packages/
        └── {name}/
            └── {name}-{version}.zip
"""

import asyncio
import importlib
import json
from pathlib import Path
from typing import Any, Dict, Protocol

import aiofiles
import aiofiles.os

from extension_registry.core.config import Config
from extension_registry.core.errors import NotConfiguredError
from extension_registry.core.logging import get_service_logger
from extension_registry.models.registry_models import RegistryEntry

logger = get_service_logger("storage")

CHUNK_SIZE = 64 * 1024


class StorageBackend(Protocol):
    """Contract every storage backend implements"""

    async def get_registry(self) -> Dict[str, RegistryEntry]:
        ...

    async def save_package(self, entry: RegistryEntry, artifact_path: str) -> None:
        ...

    async def save_registry(self, registry: Dict[str, Dict[str, Any]]) -> None:
        ...


class LocalFileStorage:
    """
    File system storage for the registry and uploaded packages.

    Thread-safe with async file locking so overlapping registry saves
    never interleave their writes.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)
        self.registry_file = self.base_dir / "registry.json"
        self.packages_dir = self.base_dir / "packages"

        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.packages_dir.mkdir(parents=True, exist_ok=True)

        self._registry_lock = asyncio.Lock()

    async def get_registry(self) -> Dict[str, RegistryEntry]:
        """
        Load the whole registry from disk.

        Returns:
            Mapping of package name to entry (empty when no registry exists yet)
        """
        if not self.registry_file.exists():
            logger.info(f"No registry at {self.registry_file}, starting empty")
            return {}

        async with aiofiles.open(self.registry_file, "r") as f:
            data = json.loads(await f.read())

        return {name: RegistryEntry.from_dict(entry) for name, entry in data.items()}

    def package_path(self, name: str, version: str) -> Path:
        return self.packages_dir / name / f"{name}-{version}.zip"

    async def save_package(self, entry: RegistryEntry, artifact_path: str) -> None:
        """
        Copy the uploaded artifact next to the previously published versions.

        Args:
            entry: Entry being published; its latest version names the file
            artifact_path: Path of the uploaded zip
        """
        target = self.package_path(entry.name, entry.latest_version.version)
        await aiofiles.os.makedirs(target.parent, exist_ok=True)

        async with aiofiles.open(artifact_path, "rb") as src:
            async with aiofiles.open(target, "wb") as dst:
                while True:
                    chunk = await src.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    await dst.write(chunk)

        logger.info(f"Stored package {target.name}")

    async def save_registry(self, registry: Dict[str, Dict[str, Any]]) -> None:
        """
        Write the registry snapshot atomically.

        Args:
            registry: Serialized registry (name -> entry dict)
        """
        tmp_file = self.registry_file.with_suffix(".json.tmp")

        async with self._registry_lock:
            async with aiofiles.open(tmp_file, "w") as f:
                await f.write(json.dumps(registry, indent=2))
            await aiofiles.os.replace(tmp_file, self.registry_file)

        logger.debug(f"Saved registry with {len(registry)} entries")


def create_storage(config: Config) -> StorageBackend:
    """
    Build the storage backend named in the configuration.

    ``local`` selects LocalFileStorage rooted at ``storage_path``; any other
    value must be an import path ``package.module:ClassName`` whose class is
    constructed with the Config.

    Raises:
        NotConfiguredError: If no storage is configured or it cannot be loaded
    """
    storage_type = config.storage
    if not storage_type:
        raise NotConfiguredError("Storage not provided in config file")

    if storage_type == "local":
        return LocalFileStorage(Path(config.storage_path))

    module_name, _, class_name = storage_type.partition(":")
    if not class_name:
        raise NotConfiguredError(f"Unknown storage type: {storage_type}")

    try:
        module = importlib.import_module(module_name)
        storage_class = getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise NotConfiguredError(f"Cannot load storage {storage_type}: {e}") from e

    return storage_class(config)
