# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Core utilities and shared modules for the extension registry.

This package contains:
- config: Configuration management
- errors: Custom exceptions
- logging: Structured logging
"""

from extension_registry.core.config import get_config, Config
from extension_registry.core.errors import (
    RegistryError,
    NotConfiguredError,
    RegistryNotLoadedError,
    ValidationFailedError,
    BadVersionError,
    NotAuthorizedError,
    UnknownExtensionError,
    StorageError,
)
from extension_registry.core.logging import get_logger

__all__ = [
    "get_config",
    "Config",
    "RegistryError",
    "NotConfiguredError",
    "RegistryNotLoadedError",
    "ValidationFailedError",
    "BadVersionError",
    "NotAuthorizedError",
    "UnknownExtensionError",
    "StorageError",
    "get_logger",
]
