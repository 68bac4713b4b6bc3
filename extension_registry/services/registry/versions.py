# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Version comparison for published packages.

Versions follow Semantic Versioning 2.0.0: ``1.0.0-1 < 1.0.0`` and
``1.0`` is not a valid version.
"""

import logging

import semver

logger = logging.getLogger(__name__)


def is_valid_version(value: str) -> bool:
    """Whether the string parses as a semantic version"""
    return isinstance(value, str) and semver.Version.is_valid(value)


def compare_versions(version1: str, version2: str) -> int:
    """
    Compare two semantic versions

    Args:
        version1: First version string
        version2: Second version string

    Returns:
        -1 if version1 < version2
         0 if version1 == version2
         1 if version1 > version2

    Raises:
        ValueError: If either version cannot be parsed
    """
    try:
        v1 = semver.Version.parse(version1)
        v2 = semver.Version.parse(version2)
    except (ValueError, TypeError) as e:
        # Fail fast - don't use broken string comparison fallback
        logger.error(f"Failed to parse versions ({version1}, {version2}): {e}")
        raise ValueError(
            f"Invalid version format. Expected semver (e.g., '1.2.3'), "
            f"got version1='{version1}', version2='{version2}'"
        ) from e

    return v1.compare(v2)


def is_newer_version(candidate: str, current: str) -> bool:
    """True only when candidate is strictly greater than current"""
    return compare_versions(candidate, current) > 0
