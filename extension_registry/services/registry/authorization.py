# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Authorization for registry mutations.

Two policies exist on purpose:
- Publishing a new version requires true ownership (no admin bypass).
- Generic administrative commands (owner change, requirement change,
  metadata deletion) accept either the owner or a configured admin.
"""

from typing import Callable, Iterable, Optional

from extension_registry.models.registry_models import RegistryEntry

OwnershipResolver = Callable[[RegistryEntry, Optional[str]], bool]


def is_owner(entry: RegistryEntry, identity: Optional[str]) -> bool:
    """Whether ``identity`` is the entry's owning account"""
    return bool(identity) and entry.owner == identity


class AuthorizationGuard:
    """Decides whether a caller may mutate a registry entry"""

    def __init__(self, admins: Iterable[str] = (), ownership_resolver: OwnershipResolver = is_owner):
        """
        Args:
            admins: Identities allowed to run generic commands on any package
            ownership_resolver: Maps (entry, identity) to ownership
        """
        self.admins = frozenset(admins)
        self.ownership_resolver = ownership_resolver

    def is_admin(self, identity: Optional[str]) -> bool:
        return identity is not None and identity in self.admins

    def is_owner(self, entry: RegistryEntry, identity: Optional[str]) -> bool:
        return self.ownership_resolver(entry, identity)

    def is_authorized(self, entry: RegistryEntry, identity: Optional[str], allow_admin: bool = True) -> bool:
        """
        Check whether ``identity`` may modify ``entry``.

        Args:
            entry: Entry being modified
            identity: Caller identity
            allow_admin: Accept admins as well as the owner

        Returns:
            True if the caller is authorized
        """
        if allow_admin and self.is_admin(identity):
            return True
        return self.is_owner(entry, identity)
