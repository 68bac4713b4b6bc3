# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
In-memory collaborators shared by the unit tests.
"""

import asyncio
from typing import Any, Dict, List, Optional

from extension_registry.models.registry_models import (
    PackageMetadata,
    RegistryEntry,
    ValidationProblem,
    ValidationResult,
    VersionRecord,
)
from extension_registry.services.registry.store import RegistryStore


class FakeStorage:
    """Storage backend keeping everything in memory"""

    def __init__(self, registry: Optional[Dict[str, RegistryEntry]] = None):
        self.registry = dict(registry or {})
        self.saved_packages: List[tuple] = []
        self.saved_registries: List[Dict[str, Any]] = []
        self.fail_load = False
        self.fail_save_package = False
        self.fail_save_registry = False

    async def get_registry(self) -> Dict[str, RegistryEntry]:
        if self.fail_load:
            raise OSError("registry unavailable")
        return {name: entry.model_copy(deep=True) for name, entry in self.registry.items()}

    async def save_package(self, entry: RegistryEntry, artifact_path: str) -> None:
        # Yield like a real upload would
        await asyncio.sleep(0)
        if self.fail_save_package:
            raise OSError("disk full")
        self.saved_packages.append((entry.name, entry.latest_version.version, artifact_path))

    async def save_registry(self, registry: Dict[str, Any]) -> None:
        if self.fail_save_registry:
            raise OSError("registry write failed")
        self.saved_registries.append(registry)


class ConfigurableStorage(FakeStorage):
    """Storage built from a Config, for import-path loading"""

    def __init__(self, config):
        super().__init__()
        self.config = config


class FakeValidator:
    """Validator returning canned results per artifact path"""

    def __init__(self):
        self.results: Dict[str, ValidationResult] = {}
        self.calls: List[str] = []

    def add(self, path: str, **metadata: Any) -> None:
        self.results[path] = ValidationResult(metadata=PackageMetadata(**metadata))

    def add_errors(self, path: str, *codes: str) -> None:
        self.results[path] = ValidationResult(
            errors=[ValidationProblem(code=code) for code in codes]
        )

    async def validate(self, path: str, options: Optional[Dict[str, Any]] = None) -> ValidationResult:
        self.calls.append(path)
        return self.results[path]


def make_entry(
    name: str,
    owner: str = "github:alice",
    versions: Optional[List[str]] = None,
    title: Optional[str] = None,
    **kwargs: Any
) -> RegistryEntry:
    versions = versions or ["1.0.0"]
    return RegistryEntry(
        metadata=PackageMetadata(name=name, version=versions[-1], title=title),
        owner=owner,
        versions=[
            VersionRecord(version=v, published=f"2024-01-0{i + 1}T10:00:00.000Z")
            for i, v in enumerate(versions)
        ],
        **kwargs
    )


async def loaded_store(*entries: RegistryEntry, storage: Optional[FakeStorage] = None) -> RegistryStore:
    """RegistryStore already loaded with the given entries"""
    if storage is None:
        storage = FakeStorage({entry.name: entry for entry in entries})
    store = RegistryStore(storage)
    await store.load()
    return store
