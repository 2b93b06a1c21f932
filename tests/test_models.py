"""Tests for update_bin.models and update_bin.errors."""

from __future__ import annotations

import pytest

from update_bin.errors import SubprocessFailureError
from update_bin.models import (
    DEFAULT_PRIORITY,
    PackageManagerKind,
    Resolution,
    UpdateCommand,
    UpdateOutcome,
    normalize_path,
)


class TestPackageManagerKind:
    def test_parse_is_case_insensitive(self) -> None:
        assert PackageManagerKind.parse(" Cargo ") is PackageManagerKind.CARGO

    def test_brew_alias(self) -> None:
        assert PackageManagerKind.parse("brew") is PackageManagerKind.HOMEBREW

    def test_parse_unknown(self) -> None:
        with pytest.raises(ValueError, match="valid: homebrew"):
            PackageManagerKind.parse("apt")

    def test_default_priority_is_total(self) -> None:
        assert set(DEFAULT_PRIORITY) == set(PackageManagerKind)
        assert len(set(DEFAULT_PRIORITY)) == len(DEFAULT_PRIORITY)


class TestUpdateCommand:
    def test_str_and_argv(self) -> None:
        command = UpdateCommand("yarn", ("global", "upgrade", "serve"))

        assert command.argv == ["yarn", "global", "upgrade", "serve"]
        assert str(command) == "yarn global upgrade serve"

    def test_frozen(self) -> None:
        command = UpdateCommand("brew", ("upgrade", "jq"))
        with pytest.raises(AttributeError):
            command.executable = "port"  # type: ignore[misc]


class TestUpdateOutcome:
    def test_changed(self) -> None:
        resolution = Resolution("jq", "/opt/homebrew/bin/jq", PackageManagerKind.HOMEBREW, "jq")
        command = UpdateCommand("brew", ("upgrade", "jq"))

        assert UpdateOutcome(resolution, command, "1.6", "1.7").changed
        assert not UpdateOutcome(resolution, command, "1.7", "1.7").changed


class TestSubprocessFailureError:
    def test_message_and_code(self) -> None:
        error = SubprocessFailureError(UpdateCommand("npm", ("update", "-g", "x")), 2, "x")

        assert error.exit_code == 2
        assert str(error) == "Failed to update x with npm (exit 2)"


def test_normalize_windows_path() -> None:
    assert (
        normalize_path("C:\\Users\\Test\\.cargo\\bin\\update-bin.exe")
        == "C:/Users/Test/.cargo/bin/update-bin.exe"
    )
    assert normalize_path("/home/user/.cargo/bin/update-bin") == "/home/user/.cargo/bin/update-bin"
