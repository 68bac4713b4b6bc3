# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package Validator

Single responsibility: turn an uploaded zip artifact into validated metadata
or a list of structured problems.
"""

import asyncio
import json
import re
import zipfile
from typing import Any, Dict, List, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from extension_registry.models.registry_models import (
    PackageMetadata,
    ProblemCode,
    ValidationProblem,
    ValidationResult,
)
from .versions import is_valid_version

PACKAGE_JSON = "package.json"
MAX_PACKAGE_JSON_SIZE = 1024 * 1024  # 1MB

_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9._-]*$")


class PackageValidator(Protocol):
    """Contract for package validation"""

    async def validate(self, path: str, options: Optional[Dict[str, Any]] = None) -> ValidationResult:
        ...


class ZipPackageValidator:
    """
    Validates extension zip files.

    The package.json may sit at the zip root or inside a single top-level
    folder (the layout produced by zipping a checkout directory).
    """

    async def validate(self, path: str, options: Optional[Dict[str, Any]] = None) -> ValidationResult:
        """
        Validate the package at ``path``.

        Args:
            path: Path of the zip artifact
            options: Unused, accepted for compatibility with other validators

        Returns:
            ValidationResult with metadata or errors
        """
        return await asyncio.to_thread(self._validate_sync, path)

    def _validate_sync(self, path: str) -> ValidationResult:
        try:
            with zipfile.ZipFile(path) as archive:
                raw = self._read_package_json(archive)
        except (zipfile.BadZipFile, OSError) as e:
            return _failed(ProblemCode.INVALID_ZIP_FILE, str(e))

        if raw is None:
            return _failed(ProblemCode.MISSING_PACKAGE_JSON, path)

        try:
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            return _failed(ProblemCode.INVALID_PACKAGE_JSON, str(e))

        if not isinstance(data, dict):
            return _failed(ProblemCode.INVALID_PACKAGE_JSON, "package.json must contain an object")

        errors = _check_fields(data)
        if errors:
            return ValidationResult(errors=errors)

        try:
            metadata = PackageMetadata.model_validate(data)
        except PydanticValidationError as e:
            return _failed(ProblemCode.INVALID_PACKAGE_JSON, str(e))

        return ValidationResult(metadata=metadata)

    @staticmethod
    def _read_package_json(archive: zipfile.ZipFile) -> Optional[bytes]:
        names = archive.namelist()
        if PACKAGE_JSON in names:
            candidate = PACKAGE_JSON
        else:
            top_level = {n.split("/", 1)[0] for n in names if n and not n.startswith("__MACOSX")}
            if len(top_level) != 1:
                return None
            candidate = f"{top_level.pop()}/{PACKAGE_JSON}"
            if candidate not in names:
                return None

        info = archive.getinfo(candidate)
        if info.file_size > MAX_PACKAGE_JSON_SIZE:
            raise OSError("package.json too large (max 1MB)")
        return archive.read(candidate)


def _check_fields(data: Dict[str, Any]) -> List[ValidationProblem]:
    errors = []

    name = data.get("name")
    if not name:
        errors.append(ValidationProblem(code=ProblemCode.MISSING_PACKAGE_NAME.value))
    elif not isinstance(name, str) or not _NAME_PATTERN.match(name):
        errors.append(ValidationProblem(code=ProblemCode.BAD_PACKAGE_NAME.value, detail=name))

    version = data.get("version")
    if not version:
        errors.append(ValidationProblem(code=ProblemCode.MISSING_PACKAGE_VERSION.value))
    elif not isinstance(version, str) or not is_valid_version(version):
        errors.append(ValidationProblem(code=ProblemCode.INVALID_VERSION_NUMBER.value, detail=version))

    return errors


def _failed(code: ProblemCode, detail: Any = None) -> ValidationResult:
    return ValidationResult(errors=[ValidationProblem(code=code.value, detail=detail)])
