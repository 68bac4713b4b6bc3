# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package Manipulators

Single responsibility: run small administrative commands against an
existing entry.

Each command is a typed record naming its parameters. ManipulatorExecutor
looks the entry up, checks that the caller is the owner or an admin,
applies the command in place and schedules a registry save.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, Optional, Protocol

from extension_registry.core.errors import NotAuthorizedError, UnknownExtensionError
from extension_registry.core.logging import get_service_logger, log_event
from extension_registry.models.registry_models import RegistryEntry
from .authorization import AuthorizationGuard
from .store import RegistryStore

logger = get_service_logger("manipulators")


class PackageCommand(Protocol):
    """A mutation applied to one registry entry"""

    action: ClassVar[str]

    def apply(self, entry: RegistryEntry, store: RegistryStore) -> None:
        ...


@dataclass(frozen=True)
class DeletePackageMetadata:
    """
    Remove a package from the registry.

    Only the metadata goes away; stored package artifacts are kept.
    """
    action: ClassVar[str] = "delete_metadata"

    def apply(self, entry: RegistryEntry, store: RegistryStore) -> None:
        store.delete(entry.name)


@dataclass(frozen=True)
class ChangePackageOwner:
    """Hand a package over to another account"""
    new_owner: str
    action: ClassVar[str] = "change_owner"

    def apply(self, entry: RegistryEntry, store: RegistryStore) -> None:
        entry.owner = self.new_owner


@dataclass(frozen=True)
class ChangePackageRequirements:
    """Overwrite the host-compatibility range on every version"""
    requirements: str
    action: ClassVar[str] = "change_requirements"

    def apply(self, entry: RegistryEntry, store: RegistryStore) -> None:
        for version in entry.versions:
            version.brackets = self.requirements


class ManipulatorExecutor:
    """Authorize-then-apply-then-persist executor shared by all commands"""

    def __init__(
        self,
        store: RegistryStore,
        guard: AuthorizationGuard,
        audit_logger: Optional[logging.Logger] = None
    ):
        self.store = store
        self.guard = guard
        self.audit_logger = audit_logger or logger

    async def execute(self, name: str, identity: Optional[str], command: PackageCommand) -> None:
        """
        Apply ``command`` to the package ``name``.

        Args:
            name: Package name
            identity: Caller identity (owner or admin)
            command: Command to apply

        Raises:
            RegistryNotLoadedError: If the registry has not been loaded
            UnknownExtensionError: If no package has this name
            NotAuthorizedError: If the caller is neither owner nor admin
        """
        if self.store.get(name) is None:
            raise UnknownExtensionError(name)

        async with self.store.locked(name):
            # Re-read: the entry may have been deleted while we waited
            entry = self.store.get(name)
            if entry is None:
                raise UnknownExtensionError(name)

            if not self.guard.is_authorized(entry, identity):
                raise NotAuthorizedError(name, identity)

            command.apply(entry, self.store)
            self.store.persist()

        log_event(
            self.audit_logger,
            command.action,
            package=name,
            identity=identity,
            **vars(command)
        )
