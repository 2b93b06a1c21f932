"""
Package manager backends.

Each supported package manager knows how to recognise binaries it
installed, which package provides a given binary, how to update that
package, and how to read its installed version.
"""

import json
import logging
import os
import re
import shutil
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from update_bin import process
from update_bin.config import Settings
from update_bin.models import (
    PackageManagerKind,
    Resolution,
    UpdateCommand,
    normalize_path,
)

log = logging.getLogger(__name__)

VERSION_FLAGS = ("--version", "-v", "-V", "version")


# =============================================================================
# Helpers
# =============================================================================


def _is_windows() -> bool:
    return sys.platform == "win32"


def _is_within(path: str, directory: str) -> bool:
    """Check whether a binary path lives inside a directory"""
    path = normalize_path(path)
    directory = normalize_path(directory).rstrip("/") + "/"
    if _is_windows():
        return path.lower().startswith(directory.lower())
    return path.startswith(directory)


def _read_json(path: Path) -> Optional[object]:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        return None


def _parse_json(text: Optional[str]) -> Optional[object]:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        log.debug("ignoring unparsable JSON output")
        return None


def _declared_bins(package_name: str, package_json: object) -> set[str]:
    """Binary names a package.json declares.

    A string ``bin`` installs one command named after the package (scope
    dropped); an object ``bin`` maps command names to scripts.
    """
    if not isinstance(package_json, dict):
        return set()
    bin_field = package_json.get("bin")
    if isinstance(bin_field, str):
        return {package_name.rsplit("/", 1)[-1]}
    if isinstance(bin_field, dict):
        return set(bin_field)
    return set()


def _find_js_package(bin_name: str, candidates: dict[str, Path]) -> Optional[str]:
    """Find which package directory (name -> dir) declares ``bin_name``"""
    for package_name, package_dir in candidates.items():
        package_json = _read_json(package_dir / "package.json")
        if bin_name in _declared_bins(package_name, package_json):
            return package_name
    return None


def _js_dependencies(package_json: object) -> list[str]:
    if not isinstance(package_json, dict):
        return []
    deps = package_json.get("dependencies")
    return list(deps) if isinstance(deps, dict) else []


def _installed_js_version(package_dir: Path) -> Optional[str]:
    package_json = _read_json(package_dir / "package.json")
    if isinstance(package_json, dict) and isinstance(package_json.get("version"), str):
        return package_json["version"]
    return None


def probe_binary_version(bin_path: str) -> Optional[str]:
    """Ask the binary itself for its version, trying common flags"""
    for flag in VERSION_FLAGS:
        output = process.run_query([bin_path, flag])
        if output:
            return output.splitlines()[0].strip()
    return None


# =============================================================================
# Package Manager Abstraction
# =============================================================================


class PackageManager(ABC):
    """Abstract base class for package managers"""

    kind: PackageManagerKind
    color: str
    tool: str

    @property
    def name(self) -> str:
        return self.kind.value

    def is_available(self) -> bool:
        """Check if the package manager's executable is on PATH"""
        return shutil.which(self.tool) is not None

    @abstractmethod
    def owns(self, bin_path: str, settings: Settings) -> bool:
        """Check whether this manager installed the binary at ``bin_path``"""
        pass

    def package_name(self, bin_name: str, bin_path: str) -> str:
        """Name of the package that provides the binary"""
        return bin_name

    @abstractmethod
    def update_args(self, package: str) -> list[str]:
        pass

    def update_command(self, package: str) -> UpdateCommand:
        return UpdateCommand(self.tool, tuple(self.update_args(package)))

    def installed_version(self, resolution: Resolution) -> Optional[str]:
        """Installed version of the resolved package, if it can be determined"""
        return probe_binary_version(resolution.bin_path)


class HomebrewManager(PackageManager):
    """Homebrew package manager (formulae)"""

    kind = PackageManagerKind.HOMEBREW
    color = "bright_yellow"
    tool = "brew"

    def owns(self, bin_path: str, settings: Settings) -> bool:
        if _is_windows():
            return False
        # Only linked kegs and casks count; a prefix like /usr/local/ also
        # holds cargo homes, JS globals and hand-installed tools.
        target = os.path.realpath(bin_path)
        for prefix in settings.homebrew_prefixes:
            if not _is_within(bin_path, prefix):
                continue
            real_prefix = os.path.realpath(prefix)
            if any(
                _is_within(target, os.path.join(real_prefix, keg_dir))
                for keg_dir in ("Cellar", "Caskroom")
            ):
                return True
        return False

    def package_name(self, bin_name: str, bin_path: str) -> str:
        # Linked binaries point into Cellar/<formula>/<version>/
        target = normalize_path(os.path.realpath(bin_path))
        match = re.search(r"/Cellar/([^/]+)/", target)
        if match:
            return match.group(1)

        installed = process.run_query(["brew", "list", "--formula"])
        if installed is None:
            return bin_name
        installed_set = {line.strip() for line in installed.splitlines() if line.strip()}

        candidates = process.run_query(["brew", "which-formula", bin_name])
        if candidates and "Error" not in candidates:
            for candidate in candidates.splitlines():
                candidate = candidate.strip()
                if candidate in installed_set:
                    return candidate
        return bin_name

    def update_args(self, package: str) -> list[str]:
        return ["upgrade", package]

    def installed_version(self, resolution: Resolution) -> Optional[str]:
        output = process.run_query(["brew", "list", "--versions", resolution.package_name])
        if output:
            parts = output.splitlines()[0].split()
            if len(parts) >= 2:
                return parts[-1]  # Last version if multiple
        return probe_binary_version(resolution.bin_path)


class BunManager(PackageManager):
    """Bun package manager (global packages via bun add -g)"""

    kind = PackageManagerKind.BUN
    color = "bright_magenta"
    tool = "bun"

    def owns(self, bin_path: str, settings: Settings) -> bool:
        path = normalize_path(bin_path)
        if "/.bun/" in path:
            return True
        return _is_windows() and "/appdata/roaming/bun/" in path.lower()

    @staticmethod
    def global_dir() -> Path:
        """Bun's global install directory"""
        if _is_windows():
            appdata = os.environ.get("APPDATA")
            if appdata:
                return Path(appdata) / "bun"
            return Path.home() / "AppData" / "Roaming" / "bun"
        return Path.home() / ".bun" / "install" / "global"

    def package_name(self, bin_name: str, bin_path: str) -> str:
        global_dir = self.global_dir()
        deps = _js_dependencies(_read_json(global_dir / "package.json"))
        found = _find_js_package(
            bin_name, {name: global_dir / "node_modules" / name for name in deps}
        )
        return found or bin_name

    def update_args(self, package: str) -> list[str]:
        return ["update", "-g", package]

    def installed_version(self, resolution: Resolution) -> Optional[str]:
        output = process.run_query(["bun", "pm", "ls", "-g"])
        if output:
            # bun pm ls -g format: "├── package@version" or "└── @scope/package@version"
            marker = f"{resolution.package_name}@"
            for line in output.splitlines():
                entry = line.strip(" ├└─│").strip()
                if entry.startswith(marker):
                    return entry[len(marker):].split()[0]
        return probe_binary_version(resolution.bin_path)


class NpmManager(PackageManager):
    """npm (global packages)"""

    kind = PackageManagerKind.NPM
    color = "bright_red"
    tool = "npm"

    def owns(self, bin_path: str, settings: Settings) -> bool:
        npm_path = shutil.which("npm")
        if not npm_path or not _is_within(bin_path, os.path.dirname(npm_path)):
            return False
        # npm's bin dir may be /usr/bin, shared with everything else installed there
        if "/node_modules/" in normalize_path(os.path.realpath(bin_path)):
            return True
        bin_name = os.path.basename(bin_path)
        if _is_windows():
            bin_name = os.path.splitext(bin_name)[0]
        return self._declaring_package(bin_name) is not None

    def global_root(self) -> Optional[Path]:
        """Global node_modules directory"""
        root = process.run_query(["npm", "root", "-g"])
        if root:
            return Path(root)
        npm_path = shutil.which("npm")
        if not npm_path:
            return None
        bin_dir = Path(npm_path).parent
        if _is_windows():
            return bin_dir / "node_modules"
        return bin_dir.parent / "lib" / "node_modules"

    def _global_listing(self) -> dict:
        listing = _parse_json(process.run_query(["npm", "list", "-g", "--json", "--depth=0"]))
        if isinstance(listing, dict) and isinstance(listing.get("dependencies"), dict):
            return listing["dependencies"]
        return {}

    def _declaring_package(self, bin_name: str) -> Optional[str]:
        # A package may install commands named differently from itself, so
        # scan every global package's "bin" field.
        root = self.global_root()
        if root is None:
            return None
        packages = self._global_listing()
        return _find_js_package(bin_name, {name: root / name for name in packages})

    def package_name(self, bin_name: str, bin_path: str) -> str:
        return self._declaring_package(bin_name) or bin_name

    def update_args(self, package: str) -> list[str]:
        return ["update", "-g", package]

    def installed_version(self, resolution: Resolution) -> Optional[str]:
        info = self._global_listing().get(resolution.package_name)
        if isinstance(info, dict) and info.get("version"):
            return str(info["version"])
        return probe_binary_version(resolution.bin_path)


class PnpmManager(PackageManager):
    """pnpm (global packages)"""

    kind = PackageManagerKind.PNPM
    color = "yellow"
    tool = "pnpm"

    def owns(self, bin_path: str, settings: Settings) -> bool:
        global_bin = process.run_query(["pnpm", "bin", "-g"])
        return bool(global_bin) and _is_within(bin_path, global_bin)

    def _global_listing(self) -> dict:
        """Merged dependencies of every pnpm global project"""
        listing = _parse_json(process.run_query(["pnpm", "list", "-g", "--json"]))
        merged: dict = {}
        if isinstance(listing, list):
            for project in listing:
                if isinstance(project, dict) and isinstance(project.get("dependencies"), dict):
                    merged.update(project["dependencies"])
        return merged

    def package_name(self, bin_name: str, bin_path: str) -> str:
        candidates = {
            name: Path(info["path"])
            for name, info in self._global_listing().items()
            if isinstance(info, dict) and info.get("path")
        }
        return _find_js_package(bin_name, candidates) or bin_name

    def update_args(self, package: str) -> list[str]:
        return ["update", "-g", package]

    def installed_version(self, resolution: Resolution) -> Optional[str]:
        info = self._global_listing().get(resolution.package_name)
        if isinstance(info, dict) and info.get("version"):
            return str(info["version"])
        return probe_binary_version(resolution.bin_path)


class YarnManager(PackageManager):
    """Yarn classic (global packages)"""

    kind = PackageManagerKind.YARN
    color = "cyan"
    tool = "yarn"

    def owns(self, bin_path: str, settings: Settings) -> bool:
        global_bin = process.run_query(["yarn", "global", "bin"])
        return bool(global_bin) and _is_within(bin_path, global_bin)

    def _global_dir(self) -> Optional[Path]:
        global_dir = process.run_query(["yarn", "global", "dir"])
        return Path(global_dir) if global_dir else None

    def package_name(self, bin_name: str, bin_path: str) -> str:
        global_dir = self._global_dir()
        if global_dir is None:
            return bin_name
        deps = _js_dependencies(_read_json(global_dir / "package.json"))
        found = _find_js_package(
            bin_name, {name: global_dir / "node_modules" / name for name in deps}
        )
        return found or bin_name

    def update_args(self, package: str) -> list[str]:
        return ["global", "upgrade", package]

    def installed_version(self, resolution: Resolution) -> Optional[str]:
        global_dir = self._global_dir()
        if global_dir is not None:
            version = _installed_js_version(global_dir / "node_modules" / resolution.package_name)
            if version:
                return version
        return probe_binary_version(resolution.bin_path)


class CargoManager(PackageManager):
    """Rust package manager (via cargo install)"""

    kind = PackageManagerKind.CARGO
    color = "red"
    tool = "cargo"

    def owns(self, bin_path: str, settings: Settings) -> bool:
        if "/.cargo/bin/" in normalize_path(bin_path):
            return True
        cargo_home = os.environ.get("CARGO_HOME")
        return bool(cargo_home) and _is_within(bin_path, os.path.join(cargo_home, "bin"))

    def installed_crates(self) -> dict[str, tuple[str, list[str]]]:
        """Parse ``cargo install --list`` into crate -> (version, binaries)"""
        output = process.run_query(["cargo", "install", "--list"])
        crates: dict[str, tuple[str, list[str]]] = {}
        if not output:
            return crates
        # cargo install --list format:
        # package-name v1.2.3:
        #     binary1
        #     binary2
        current = None
        for line in output.splitlines():
            match = re.match(r"^(\S+)\s+v(\S+?)(?:\s+\(.*\))?:$", line)
            if match:
                current = match.group(1)
                crates[current] = (match.group(2), [])
            elif current and line.strip():
                crates[current][1].append(line.strip())
        return crates

    def package_name(self, bin_name: str, bin_path: str) -> str:
        exe_name = f"{bin_name}.exe"
        for crate, (_, binaries) in self.installed_crates().items():
            if bin_name in binaries or exe_name in binaries:
                return crate
        return bin_name

    def update_args(self, package: str) -> list[str]:
        return ["install", package, "--force"]

    def installed_version(self, resolution: Resolution) -> Optional[str]:
        crate = self.installed_crates().get(resolution.package_name)
        if crate:
            return crate[0]
        return probe_binary_version(resolution.bin_path)


MANAGERS: dict[PackageManagerKind, PackageManager] = {
    m.kind: m
    for m in (
        HomebrewManager(),
        BunManager(),
        NpmManager(),
        PnpmManager(),
        YarnManager(),
        CargoManager(),
    )
}


def get_manager(kind: PackageManagerKind) -> PackageManager:
    return MANAGERS[kind]
