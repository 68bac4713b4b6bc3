# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit tests for ZipPackageValidator
"""

import json
import zipfile
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from extension_registry.models.registry_models import ProblemCode
from extension_registry.services.registry.validator import ZipPackageValidator


@pytest.fixture
def tmpdir_path():
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def validator():
    return ZipPackageValidator()


def write_zip(path: Path, files: dict) -> str:
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return str(path)


def package_json(**fields) -> str:
    data = {"name": "my-extension", "version": "1.0.0", "title": "My Extension"}
    data.update(fields)
    return json.dumps({k: v for k, v in data.items() if v is not None})


def codes(result):
    return [problem.code for problem in result.errors]


class TestValidPackages:

    @pytest.mark.asyncio
    async def test_package_json_at_root(self, validator, tmpdir_path):
        path = write_zip(tmpdir_path / "ext.zip", {
            "package.json": package_json(engines={"brackets": ">=0.24.0"}, homepage="https://example.org"),
            "main.js": "define();",
        })

        result = await validator.validate(path)

        assert result.passed
        assert result.metadata.name == "my-extension"
        assert result.metadata.host_compatibility == ">=0.24.0"
        # Undeclared keys survive
        assert result.metadata.model_dump()["homepage"] == "https://example.org"

    @pytest.mark.asyncio
    async def test_package_json_in_single_top_folder(self, validator, tmpdir_path):
        path = write_zip(tmpdir_path / "ext.zip", {
            "my-extension/package.json": package_json(),
            "my-extension/main.js": "define();",
        })

        result = await validator.validate(path)

        assert result.passed
        assert result.metadata.version == "1.0.0"


class TestInvalidPackages:

    @pytest.mark.asyncio
    async def test_not_a_zip(self, validator, tmpdir_path):
        path = tmpdir_path / "ext.zip"
        path.write_text("definitely not a zip")

        result = await validator.validate(str(path))
        assert codes(result) == [ProblemCode.INVALID_ZIP_FILE.value]

    @pytest.mark.asyncio
    async def test_missing_package_json(self, validator, tmpdir_path):
        path = write_zip(tmpdir_path / "ext.zip", {"main.js": "define();", "other/readme.md": "hi"})

        result = await validator.validate(path)
        assert codes(result) == [ProblemCode.MISSING_PACKAGE_JSON.value]

    @pytest.mark.asyncio
    async def test_invalid_json(self, validator, tmpdir_path):
        path = write_zip(tmpdir_path / "ext.zip", {"package.json": "{not json"})

        result = await validator.validate(path)
        assert codes(result) == [ProblemCode.INVALID_PACKAGE_JSON.value]

    @pytest.mark.asyncio
    async def test_missing_name_and_version(self, validator, tmpdir_path):
        path = write_zip(tmpdir_path / "ext.zip", {"package.json": json.dumps({"title": "No Name"})})

        result = await validator.validate(path)
        assert codes(result) == [
            ProblemCode.MISSING_PACKAGE_NAME.value,
            ProblemCode.MISSING_PACKAGE_VERSION.value,
        ]

    @pytest.mark.asyncio
    async def test_bad_name(self, validator, tmpdir_path):
        path = write_zip(tmpdir_path / "ext.zip", {"package.json": package_json(name="My Extension")})

        result = await validator.validate(path)
        assert codes(result) == [ProblemCode.BAD_PACKAGE_NAME.value]
        assert result.errors[0].detail == "My Extension"

    @pytest.mark.asyncio
    async def test_invalid_version(self, validator, tmpdir_path):
        path = write_zip(tmpdir_path / "ext.zip", {"package.json": package_json(version="one.two")})

        result = await validator.validate(path)
        assert codes(result) == [ProblemCode.INVALID_VERSION_NUMBER.value]
        assert not result.passed
