# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package Mutator

Single responsibility: add a new package or publish a new version of an
existing one.

Workflow:
    validate -> duplicate title -> lookup
        new name:      build entry owned by the submitter
        existing name: clone -> owner check -> version order -> append version
    -> save artifact -> commit to store -> persist registry

Every gate works on a clone of the stored entry, so a failure never
leaves a half-applied mutation in the registry. Publishing requires true
ownership: admins can reassign a package through the generic commands
but cannot publish versions of someone else's package.
"""

import logging
from typing import Any, Dict, Optional

from extension_registry.core.errors import (
    BadVersionError,
    NotAuthorizedError,
    RegistryError,
    StorageError,
    ValidationFailedError,
    sanitize_error_for_user,
)
from extension_registry.core.logging import get_service_logger, log_event
from extension_registry.models.registry_models import (
    PackageMetadata,
    ProblemCode,
    RegistryEntry,
    ValidationProblem,
    VersionRecord,
)
from .authorization import AuthorizationGuard
from .store import RegistryStore
from .validator import PackageValidator
from .versions import is_newer_version

logger = get_service_logger("packages")


class PackageMutator:
    """Implements the add/update workflow on top of RegistryStore"""

    def __init__(
        self,
        store: RegistryStore,
        validator: PackageValidator,
        guard: AuthorizationGuard,
        validator_options: Optional[Dict[str, Any]] = None,
        audit_logger: Optional[logging.Logger] = None
    ):
        """
        Initialize PackageMutator.

        Args:
            store: Registry store to commit into
            validator: Validator for uploaded artifacts
            guard: Authorization guard (ownership only is used here)
            validator_options: Options forwarded to the validator
            audit_logger: Logger for the publish audit trail
        """
        self.store = store
        self.validator = validator
        self.guard = guard
        self.validator_options = validator_options or {}
        self.audit_logger = audit_logger or logger

    async def add_package(self, artifact_path: str, identity: str) -> RegistryEntry:
        """
        Add or update a package from an uploaded artifact.

        Args:
            artifact_path: Path of the uploaded package
            identity: Identity of the submitting user

        Returns:
            The committed registry entry

        Raises:
            RegistryNotLoadedError: If the registry has not been loaded
            ValidationFailedError: If validation fails or the title is taken
            NotAuthorizedError: If the submitter does not own the package
            BadVersionError: If the version is not newer than the latest one
            StorageError: If the artifact cannot be stored
        """
        self.store.ensure_loaded()

        result = await self.validator.validate(artifact_path, self.validator_options)
        if result.errors:
            raise ValidationFailedError(result.errors)
        if result.metadata is None:
            raise ValidationFailedError([], message="Validator returned no metadata")

        metadata = result.metadata
        name = metadata.name

        async with self.store.locked(name):
            if self.store.title_in_use(name, metadata.title):
                raise ValidationFailedError([
                    ValidationProblem(code=ProblemCode.DUPLICATE_TITLE.value, detail=metadata.title)
                ])

            existing = self.store.get(name)
            if existing is None:
                entry = self._new_entry(metadata, identity)
            else:
                entry = self._next_version(existing, metadata, identity)

            await self._save_artifact(entry, artifact_path)

            self.store.set(name, entry)
            if metadata.host_compatibility:
                entry.versions[-1].brackets = metadata.host_compatibility
            self.store.persist()

        log_event(
            self.audit_logger,
            "package_published",
            package=name,
            version=metadata.version,
            owner=entry.owner,
            identity=identity,
            new_package=existing is None,
        )
        return entry

    @staticmethod
    def _new_entry(metadata: PackageMetadata, identity: str) -> RegistryEntry:
        return RegistryEntry(
            metadata=metadata,
            owner=identity,
            versions=[VersionRecord(version=metadata.version)],
        )

    def _next_version(
        self,
        existing: RegistryEntry,
        metadata: PackageMetadata,
        identity: str
    ) -> RegistryEntry:
        entry = existing.model_copy(deep=True)

        if not self.guard.is_authorized(entry, identity, allow_admin=False):
            raise NotAuthorizedError(metadata.name, identity)

        last = entry.latest_version
        if last is not None:
            try:
                newer = is_newer_version(metadata.version, last.version)
            except ValueError:
                newer = False
            if not newer:
                raise BadVersionError(metadata.name, metadata.version, last.version)

        entry.versions.append(VersionRecord(version=metadata.version))
        entry.metadata = metadata
        return entry

    async def _save_artifact(self, entry: RegistryEntry, artifact_path: str) -> None:
        try:
            await self.store.storage.save_package(entry, artifact_path)
        except RegistryError:
            raise
        except Exception as e:
            logger.error(f"Failed to store package {entry.name}: {e}", exc_info=True)
            raise StorageError(
                f"Failed to store package {entry.name}: {sanitize_error_for_user(e, include_type=False)}",
                details={"name": entry.name, "version": entry.latest_version.version}
            ) from e
