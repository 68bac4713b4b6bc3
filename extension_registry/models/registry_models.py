# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Registry Data Models

Defines data structures for the extension registry: package metadata,
registry entries with their version history and download statistics,
and validation results.

The persisted registry is a flat JSON object keyed by package name, each
value being ``RegistryEntry.to_dict()``. Keys use the wire names
(``totalDownloads``) so existing registry readers keep working.
"""

from typing import List, Dict, Optional, Any, Union
from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class StoreState(str, Enum):
    """Lifecycle of the in-memory registry"""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class ProblemCode(str, Enum):
    """Codes reported by the package validator and the publish workflow"""
    INVALID_ZIP_FILE = "INVALID_ZIP_FILE"
    MISSING_PACKAGE_JSON = "MISSING_PACKAGE_JSON"
    INVALID_PACKAGE_JSON = "INVALID_PACKAGE_JSON"
    MISSING_PACKAGE_NAME = "MISSING_PACKAGE_NAME"
    BAD_PACKAGE_NAME = "BAD_PACKAGE_NAME"
    MISSING_PACKAGE_VERSION = "MISSING_PACKAGE_VERSION"
    INVALID_VERSION_NUMBER = "INVALID_VERSION_NUMBER"
    DUPLICATE_TITLE = "DUPLICATE_TITLE"


# Engine key holding the declared host-compatibility range
HOST_ENGINE = "brackets"


def utc_timestamp() -> str:
    """Current time as an ISO 8601 string with millisecond precision"""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


class PackageMetadata(BaseModel):
    """
    Validated package descriptor (the contents of package.json).

    Unknown keys are kept so that the registry round-trips whatever the
    publisher declared.
    """
    model_config = ConfigDict(extra="allow")

    name: str
    version: str
    title: Optional[str] = None
    description: Optional[str] = None
    author: Optional[Union[str, Dict[str, Any]]] = None
    engines: Dict[str, str] = Field(default_factory=dict)

    @property
    def host_compatibility(self) -> Optional[str]:
        return self.engines.get(HOST_ENGINE)


class VersionRecord(BaseModel):
    """One published release of a package"""
    version: str
    published: str = Field(default_factory=utc_timestamp)
    brackets: Optional[str] = None  # Host-compatibility range at publish time
    downloads: Optional[int] = None


class RegistryEntry(BaseModel):
    """
    Full record for one published package.

    ``total_downloads`` is an incremental accumulator: it grows by every
    per-version increment recorded and is never recomputed from the
    version records.
    """
    model_config = ConfigDict(populate_by_name=True)

    metadata: PackageMetadata
    owner: str
    versions: List[VersionRecord] = Field(default_factory=list)
    total_downloads: Optional[int] = Field(default=None, alias="totalDownloads")
    recent: Optional[Dict[str, int]] = None

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def latest_version(self) -> Optional[VersionRecord]:
        return self.versions[-1] if self.versions else None

    def find_version(self, version: str) -> Optional[VersionRecord]:
        for record in self.versions:
            if record.version == version:
                return record
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted registry layout"""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryEntry":
        return cls.model_validate(data)


class ValidationProblem(BaseModel):
    """A single structured problem reported for a package"""
    code: str
    detail: Optional[Any] = None

    def __str__(self) -> str:
        if self.detail is None:
            return self.code
        return f"{self.code}: {self.detail}"


class ValidationResult(BaseModel):
    """Outcome of validating a package artifact"""
    metadata: Optional[PackageMetadata] = None
    errors: List[ValidationProblem] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors and self.metadata is not None
