"""Errors raised while resolving or updating a binary.

Every error is terminal for the invocation. The CLI prints the message on
one line and exits with ``exit_code``.
"""

from update_bin.models import PackageManagerKind, UpdateCommand


class UpdateBinError(Exception):
    """Base class for update-bin failures"""

    exit_code: int = 1


class ConfigError(UpdateBinError):
    """The configuration file is missing, malformed or invalid"""

    exit_code = 1


class BinaryNotFoundError(UpdateBinError):
    """No executable with the requested name is on PATH"""

    exit_code = 3

    def __init__(self, bin_name: str):
        self.bin_name = bin_name
        super().__init__(f"Binary '{bin_name}' not found")


class UnknownOwnerError(UpdateBinError):
    """The binary exists but no supported package manager claims it"""

    exit_code = 4

    def __init__(self, bin_name: str, bin_path: str):
        self.bin_name = bin_name
        self.bin_path = bin_path
        super().__init__(f"Could not detect package manager for '{bin_name}' ({bin_path})")


class ManagerUnavailableError(UpdateBinError):
    """The owning package manager's executable is not on PATH"""

    exit_code = 5

    def __init__(self, kind: PackageManagerKind, tool: str):
        self.kind = kind
        self.tool = tool
        super().__init__(f"Required tool '{tool}' for {kind} not found in PATH")


class SubprocessFailureError(UpdateBinError):
    """The delegated update command exited non-zero"""

    def __init__(self, command: UpdateCommand, returncode: int, package_name: str):
        self.command = command
        self.returncode = returncode
        # killed by signal N shows up as -N
        self.exit_code = returncode if returncode > 0 else 128 - returncode
        super().__init__(
            f"Failed to update {package_name} with {command.executable} (exit {returncode})"
        )
