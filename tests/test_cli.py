"""End-to-end tests for the update-bin command."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest
from conftest import FakeQueries, add_to_path, make_executable

from update_bin import process
from update_bin.cli import app

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="shell-script stubs")


def run_cli(*argv: str) -> int:
    """Invoke the app and return its exit code"""
    try:
        app(list(argv))
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1
    return 0


@pytest.fixture
def cargo_tool(home: Path, monkeypatch: pytest.MonkeyPatch, queries: FakeQueries) -> Path:
    """rg installed by cargo, plus a cargo stub that records its arguments"""
    bin_dir = home / ".cargo" / "bin"
    make_executable(bin_dir / "rg")
    make_executable(
        bin_dir / "cargo",
        '#!/bin/sh\necho "cargo $*" > "$HOME/cargo-args"\necho "  Installing $2"\nexit 0\n',
    )
    add_to_path(monkeypatch, bin_dir)
    before = "ripgrep v14.0.0:\n    rg\n"
    # read by resolve (crate lookup), then by dispatch before and after the update
    queries.set(["cargo", "install", "--list"], [before, before, "ripgrep v14.1.0:\n    rg\n"])
    return home


class TestUpdate:
    def test_cargo_installed_tool(
        self, cargo_tool: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run_cli("rg")

        assert code == 0
        assert (cargo_tool / "cargo-args").read_text().strip() == "cargo install ripgrep --force"
        out = capsys.readouterr().out
        assert "Installing ripgrep" in out
        assert "Successfully updated ripgrep from 14.0.0 to 14.1.0" in out

    def test_failure_exit_code_passes_through(
        self, cargo_tool: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr(process, "stream", lambda cmd, on_line: 101)

        assert run_cli("rg") == 101
        assert "Failed to update ripgrep" in capsys.readouterr().err

    def test_interrupted_update(
        self, cargo_tool: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        def interrupted(cmd: list[str], on_line: Callable[[str], None]) -> int:
            raise KeyboardInterrupt

        monkeypatch.setattr(process, "stream", interrupted)

        assert run_cli("rg") == 130
        assert "Error: Interrupted" in capsys.readouterr().err

    def test_dry_run(
        self, cargo_tool: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run_cli("rg", "--dry-run") == 0
        assert not (cargo_tool / "cargo-args").exists()
        assert "Would run: cargo install ripgrep --force" in capsys.readouterr().out

    def test_info(self, cargo_tool: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_cli("rg", "--info") == 0

        out = capsys.readouterr().out
        assert "Package name: ripgrep" in out
        assert "Package manager: cargo" in out
        assert not (cargo_tool / "cargo-args").exists()


class TestErrors:
    def test_unknown_tool(
        self,
        home: Path,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        queries: FakeQueries,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        tool = make_executable(tmp_path / "misc" / "unknown-tool")
        add_to_path(monkeypatch, tool.parent)

        assert run_cli("unknown-tool") == 4
        assert "Could not detect package manager" in capsys.readouterr().err

    def test_missing_tool(
        self, home: Path, queries: FakeQueries, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run_cli("no-such-tool-12345") == 3
        assert "not found" in capsys.readouterr().err

    def test_manager_unavailable(
        self,
        home: Path,
        monkeypatch: pytest.MonkeyPatch,
        queries: FakeQueries,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        tool = make_executable(home / ".bun" / "bin" / "acme")
        add_to_path(monkeypatch, tool.parent)

        assert run_cli("acme") == 5
        assert "'bun'" in capsys.readouterr().err

    def test_bad_config(
        self, home: Path, tmp_path: Path, queries: FakeQueries, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("priority: [apt]\n")

        assert run_cli("rg", "--config", str(path)) == 1
        assert "Unknown package manager 'apt'" in capsys.readouterr().err
