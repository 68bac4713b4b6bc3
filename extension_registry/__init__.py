# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Extension Registry Core

In-memory catalog of published extensions, the publish workflow with its
ownership and version-ordering rules, administrative commands, and
download statistics aggregation.
"""

__version__ = "1.0.0"

from extension_registry.services.registry import RegistryService

__all__ = ["RegistryService", "__version__"]
