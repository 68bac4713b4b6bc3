# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Registry Module - extension catalog and its mutation rules

Each module does one thing well; RegistryService composes them.
"""

from .authorization import AuthorizationGuard, is_owner
from .downloads import DownloadAggregator, merge_recent_downloads
from .manipulators import (
    ChangePackageOwner,
    ChangePackageRequirements,
    DeletePackageMetadata,
    ManipulatorExecutor,
)
from .packages import PackageMutator
from .service import RegistryService
from .storage import LocalFileStorage, StorageBackend, create_storage
from .store import RegistryStore
from .validator import PackageValidator, ZipPackageValidator
from .versions import compare_versions, is_newer_version

__all__ = [
    "AuthorizationGuard",
    "is_owner",
    "DownloadAggregator",
    "merge_recent_downloads",
    "ChangePackageOwner",
    "ChangePackageRequirements",
    "DeletePackageMetadata",
    "ManipulatorExecutor",
    "PackageMutator",
    "RegistryService",
    "LocalFileStorage",
    "StorageBackend",
    "create_storage",
    "RegistryStore",
    "PackageValidator",
    "ZipPackageValidator",
    "compare_versions",
    "is_newer_version",
]
