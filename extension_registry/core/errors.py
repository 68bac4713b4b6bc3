# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Custom exceptions for the extension registry.

All exceptions inherit from RegistryError for consistent error handling.
Each error carries a stable machine-readable ``code`` next to the
human-readable message.
"""

from typing import Optional, List, Any


class RegistryError(Exception):
    """Base exception for all registry errors."""

    code = "REGISTRY_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[dict] = None
    ):
        """
        Initialize registry error.

        Args:
            message: Human-readable error message
            status_code: HTTP-style status code
            details: Additional error details
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for API response."""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details
        }


class NotConfiguredError(RegistryError):
    """Registry service used before configure(). Only shown to operators."""

    code = "NOT_CONFIGURED"

    def __init__(self, message: str = "Repository not configured!", config_file: Optional[str] = None):
        super().__init__(message, status_code=500)
        self.config_file = config_file


class RegistryNotLoadedError(RegistryError):
    """Registry accessed before the initial load completed."""

    code = "REGISTRY_NOT_LOADED"

    def __init__(self, message: str = "Registry has not been loaded yet"):
        super().__init__(message, status_code=503)


class ValidationFailedError(RegistryError):
    """Package failed validation."""

    code = "VALIDATION_FAILED"

    def __init__(self, errors: List[Any], message: str = "Package validation failed"):
        """
        Initialize validation error.

        Args:
            errors: Validation problems reported for the package
            message: Validation error message
        """
        self.errors = list(errors)
        super().__init__(
            message,
            status_code=400,
            details={"errors": [_problem_to_dict(e) for e in self.errors]}
        )


class BadVersionError(RegistryError):
    """Submitted version is not strictly newer than the latest published one."""

    code = "BAD_VERSION"

    def __init__(self, name: str, new_version: str, last_version: str):
        message = f"Version {new_version} of {name} must be greater than {last_version}"
        super().__init__(
            message,
            status_code=409,
            details={"name": name, "version": new_version, "last_version": last_version}
        )
        self.new_version = new_version
        self.last_version = last_version


class NotAuthorizedError(RegistryError):
    """Caller may not modify the package."""

    code = "NOT_AUTHORIZED"

    def __init__(self, name: str, identity: Optional[str] = None):
        super().__init__(
            f"Not authorized to modify package: {name}",
            status_code=403,
            details={"name": name, "identity": identity}
        )
        self.name = name
        self.identity = identity


class UnknownExtensionError(RegistryError):
    """No registry entry exists for the given name."""

    code = "UNKNOWN_EXTENSION"

    def __init__(self, name: str):
        super().__init__(f"Extension not found: {name}", status_code=404, details={"name": name})
        self.name = name


class StorageError(RegistryError):
    """Storage backend failed to persist a package artifact."""

    code = "STORAGE_ERROR"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, status_code=500, details=details)


def _problem_to_dict(problem: Any) -> Any:
    if hasattr(problem, "model_dump"):
        return problem.model_dump()
    return problem


# Error Message Utilities

def sanitize_error_for_user(error: Exception, include_type: bool = True) -> str:
    """
    Sanitize error messages for user display.
    Removes stack traces and long storage paths.

    Args:
        error: The exception to sanitize
        include_type: Whether to include exception type

    Returns:
        User-friendly error message without stack trace
    """
    error_msg = str(error).strip()

    # Only the first line, tracebacks from storage backends can be long
    error_msg = error_msg.splitlines()[0] if error_msg else error_msg

    if len(error_msg) > 500:
        error_msg = error_msg[:500] + "..."

    if include_type:
        return f"{error.__class__.__name__}: {error_msg}"

    return error_msg
