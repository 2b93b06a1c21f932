"""Shared fixtures: an isolated PATH/HOME and scripted package manager queries."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional, Union

import pytest

from update_bin import config, process

Response = Union[str, list, None]


class FakeQueries:
    """Stand-in for process.run_query keyed by argv.

    A list value yields its items one call at a time, the last one
    repeating, so before/after version queries can differ.
    """

    def __init__(self) -> None:
        self.responses: dict[tuple[str, ...], Response] = {}
        self.calls: list[tuple[str, ...]] = []

    def set(self, cmd: list[str], response: Response) -> None:
        self.responses[tuple(cmd)] = response

    def set_json(self, cmd: list[str], payload: object) -> None:
        self.set(cmd, json.dumps(payload))

    def __call__(self, cmd: list[str]) -> Optional[str]:
        key = tuple(cmd)
        self.calls.append(key)
        response = self.responses.get(key)
        if isinstance(response, list):
            return response.pop(0) if len(response) > 1 else response[0]
        return response


@pytest.fixture
def queries(monkeypatch: pytest.MonkeyPatch) -> FakeQueries:
    fake = FakeQueries()
    monkeypatch.setattr(process, "run_query", fake)
    return fake


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty HOME and PATH so no real package manager is visible"""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    empty_bin = tmp_path / "empty-bin"
    empty_bin.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("PATH", str(empty_bin))
    monkeypatch.delenv("CARGO_HOME", raising=False)
    monkeypatch.delenv(config.CONFIG_ENV, raising=False)
    monkeypatch.setattr(config, "DEFAULT_CONFIG", home_dir / ".config" / "update-bin.yaml")
    return home_dir


def make_executable(path: Path, script: str = "#!/bin/sh\nexit 0\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(script)
    path.chmod(0o755)
    return path


def add_to_path(monkeypatch: pytest.MonkeyPatch, *dirs: Path) -> None:
    current = os.environ.get("PATH", "")
    monkeypatch.setenv("PATH", os.pathsep.join([*(str(d) for d in dirs), current]))


def write_package_json(package_dir: Path, **fields: object) -> None:
    package_dir.mkdir(parents=True, exist_ok=True)
    (package_dir / "package.json").write_text(json.dumps(fields))
