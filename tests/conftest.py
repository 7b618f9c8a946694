"""Shared fixtures for evalgrid tests."""

import sys

import pytest

from evalgrid.models.scenario import ScenarioSpec


@pytest.fixture
def python_spec():
    """Factory for scenarios whose command is the running Python interpreter."""
    def _make(id: int, code: str, total: int = 1, name: str = None, env_vars: dict = None) -> ScenarioSpec:
        name = name or f"py-{id}"
        return ScenarioSpec(
            id=id,
            name=name,
            label=f"[{id}/{total}] {name}",
            command=(sys.executable, "-c", code),
            env_vars=env_vars or {},
        )

    return _make


@pytest.fixture
def labeled_matrix():
    """Factory for specs that are never launched."""
    def _make(*names: str):
        total = len(names)
        return [
            ScenarioSpec(
                id=i,
                name=name,
                label=f"[{i}/{total}] {name}",
                command=("true",),
            )
            for i, name in enumerate(names, 1)
        ]

    return _make


@pytest.fixture
def abcd_matrix(labeled_matrix):
    return labeled_matrix("A", "B", "C", "D")


@pytest.fixture
def entrypoint(tmp_path):
    """Write a docker/entrypoint file and return its path."""
    def _write(content: str):
        path = tmp_path / "docker" / "entrypoint"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write
