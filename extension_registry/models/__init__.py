# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Data models for the extension registry."""

from .registry_models import (
    StoreState,
    ProblemCode,
    PackageMetadata,
    VersionRecord,
    RegistryEntry,
    ValidationProblem,
    ValidationResult,
)

__all__ = [
    "StoreState",
    "ProblemCode",
    "PackageMetadata",
    "VersionRecord",
    "RegistryEntry",
    "ValidationProblem",
    "ValidationResult",
]
