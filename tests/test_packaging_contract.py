#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for package layering and version management contracts.
"""

import sys
from pathlib import Path

import pytest

import daprlink
from daprlink import __version__ as public_version
from daprlink._version import __version__ as internal_version


PROJECT_ROOT = Path(__file__).resolve().parents[1]
PYPROJECT_PATH = PROJECT_ROOT / "pyproject.toml"


def _load_pyproject() -> dict:
    try:
        import tomllib  # Python 3.11+
    except ModuleNotFoundError:  # pragma: no cover
        tomllib = pytest.importorskip("tomli")

    return tomllib.loads(PYPROJECT_PATH.read_text(encoding="utf-8"))


def test_version_is_single_sourced_via_daprlink_version_module():
    pyproject = _load_pyproject()
    project = pyproject["project"]

    assert project.get("dynamic") == ["version"]
    assert (
        pyproject["tool"]["setuptools"]["dynamic"]["version"]["attr"]
        == "daprlink._version.__version__"
    )
    assert public_version == internal_version


def test_runtime_dependencies_exclude_code_generation_and_test_tools():
    deps = _load_pyproject()["project"]["dependencies"]
    joined = "\n".join(deps).lower()

    assert "grpcio" in joined
    assert "googleapis-common-protos" in joined
    assert "grpcio-tools" not in joined
    assert "pytest" not in joined


def test_uv_default_groups_cover_dev_and_test():
    pyproject = _load_pyproject()
    groups = pyproject["dependency-groups"]
    default_groups = pyproject["tool"]["uv"]["default-groups"]

    assert "dev" in groups
    assert "test" in groups
    assert "dev" in default_groups
    assert "test" in default_groups


def test_public_api_resolves_lazily():
    assert "DaprClient" in daprlink.__all__
    assert daprlink.CloudEventsMiddleware.__name__ == "CloudEventsMiddleware"
    assert daprlink.DaprClient.__module__ == "daprlink.core.nodes.client"
    assert "daprlink.core.nodes.client" in sys.modules

    with pytest.raises(AttributeError):
        getattr(daprlink, "NotAThing")
