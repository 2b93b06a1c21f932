"""Data types shared by the resolver and the dispatcher"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PackageManagerKind(str, Enum):
    """Package managers update-bin knows how to drive"""

    HOMEBREW = "homebrew"
    BUN = "bun"
    NPM = "npm"
    PNPM = "pnpm"
    YARN = "yarn"
    CARGO = "cargo"

    @classmethod
    def parse(cls, text: str) -> "PackageManagerKind":
        """Map a user-supplied name (config file, CLI) to a kind"""
        value = text.strip().lower()
        if value == "brew":
            value = "homebrew"
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(k.value for k in cls)
            raise ValueError(f"Unknown package manager '{text}' (valid: {valid})") from None

    def __str__(self) -> str:
        return self.value


# Resolution order. A binary claimed by several managers goes to the first one here.
DEFAULT_PRIORITY: tuple[PackageManagerKind, ...] = (
    PackageManagerKind.HOMEBREW,
    PackageManagerKind.BUN,
    PackageManagerKind.CARGO,
    PackageManagerKind.PNPM,
    PackageManagerKind.NPM,
    PackageManagerKind.YARN,
)


@dataclass(frozen=True)
class UpdateCommand:
    """Executable plus arguments for a package manager's update invocation"""

    executable: str
    args: tuple[str, ...]

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    def __str__(self) -> str:
        return " ".join(self.argv)


@dataclass(frozen=True)
class Resolution:
    """A binary matched to the package manager (and package) that installed it"""

    bin_name: str
    bin_path: str
    kind: PackageManagerKind
    package_name: str


@dataclass(frozen=True)
class UpdateOutcome:
    """Result of a completed (or dry-run) update"""

    resolution: Resolution
    command: UpdateCommand
    old_version: str
    new_version: str
    returncode: int = 0
    dry_run: bool = False

    @property
    def changed(self) -> bool:
        return self.old_version != self.new_version


UNKNOWN_VERSION = "unknown"


def normalize_path(path: str) -> str:
    """Use forward slashes so ownership checks work on Windows paths too"""
    return path.replace("\\", "/")


def version_or_unknown(version: Optional[str]) -> str:
    return version if version else UNKNOWN_VERSION
