"""Tests for ensuring project packaging metadata stays consistent."""

from __future__ import annotations

import re
import tomllib
from pathlib import Path

import parliament

ROOT = Path(__file__).resolve().parents[1]


def _load_pyproject() -> dict:
    with (ROOT / "pyproject.toml").open("rb") as handle:
        return tomllib.load(handle)


def test_pyproject_declares_expected_metadata() -> None:
    project = _load_pyproject()["project"]

    assert project["name"] == "parliament-sim"
    assert project["version"] == parliament.__version__
    assert project["scripts"]["parliament-sim"] == "parliament.__main__:main"

    declared = {re.split(r"[<>=!~ \[]", dependency, maxsplit=1)[0] for dependency in project["dependencies"]}
    for dependency in ("esper", "networkx", "numpy", "polars", "pydantic", "rich", "structlog", "typer"):
        assert dependency in declared, f"missing dependency declaration for {dependency}"


def test_pytest_is_a_test_extra() -> None:
    extras = _load_pyproject()["project"]["optional-dependencies"]
    assert any(requirement.startswith("pytest") for requirement in extras["test"])
