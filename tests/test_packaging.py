from __future__ import annotations

from fnmatch import fnmatch
from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(scope="module")
def pyproject() -> dict:
    with (ROOT / "pyproject.toml").open("rb") as handle:
        return tomllib.load(handle)


def test_readme_is_not_the_design_notes(pyproject: dict) -> None:
    readme = pyproject["project"].get("readme")

    assert readme != "DESIGN.md"
    if readme is not None:
        assert (ROOT / readme).is_file()


def test_migrations_ship_with_the_package(pyproject: dict) -> None:
    patterns = pyproject["tool"]["setuptools"]["package-data"]["userapi"]
    package = ROOT / "userapi"
    shipped = [
        path.relative_to(package).as_posix()
        for path in (package / "migrations").rglob("*")
        if path.is_file() and "__pycache__" not in path.parts
    ]

    assert shipped
    for name in shipped:
        assert any(fnmatch(name, pattern) for pattern in patterns), name


def test_alembic_is_a_runtime_dependency(pyproject: dict) -> None:
    names = [requirement.split(">")[0].split("=")[0].lower() for requirement in pyproject["project"]["dependencies"]]

    assert "alembic" in names
