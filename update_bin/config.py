"""Settings loading.

Bundled ``defaults.yaml`` is read first; an optional user YAML file is
merged over it key by key.
"""

import logging
import os
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Optional

import yaml

from update_bin.errors import ConfigError
from update_bin.models import DEFAULT_PRIORITY, PackageManagerKind

log = logging.getLogger(__name__)

CONFIG_ENV = "UPDATE_BIN_CONFIG"
DEFAULT_CONFIG = Path.home() / ".config" / "update-bin.yaml"


@dataclass(frozen=True)
class Settings:
    priority: tuple[PackageManagerKind, ...] = DEFAULT_PRIORITY
    homebrew_prefixes: tuple[str, ...] = (
        "/opt/homebrew/",
        "/usr/local/",
        "/home/linuxbrew/.linuxbrew/",
    )
    packages: dict[str, str] = field(default_factory=dict)


def _reorder_kinds(names: list) -> tuple[PackageManagerKind, ...]:
    """Listed managers first, then any missing ones in default order"""
    ordered: list[PackageManagerKind] = []
    for name in names:
        try:
            kind = PackageManagerKind.parse(str(name))
        except ValueError as e:
            raise ConfigError(str(e)) from None
        if kind not in ordered:
            ordered.append(kind)
    ordered.extend(k for k in DEFAULT_PRIORITY if k not in ordered)
    return tuple(ordered)


def _read_yaml(path: Path) -> dict:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _load_defaults() -> dict:
    """Load the defaults.yaml bundled with the package"""
    defaults_file = resources.files("update_bin").joinpath("defaults.yaml")
    return yaml.safe_load(defaults_file.read_text()) or {}


def config_path(explicit: Optional[str] = None) -> Optional[Path]:
    """Pick the user config file: explicit path, then $UPDATE_BIN_CONFIG, then the default.

    The default location is optional; None is returned when it does not exist.
    """
    if not explicit:
        explicit = os.environ.get(CONFIG_ENV)
    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return path
    return DEFAULT_CONFIG if DEFAULT_CONFIG.is_file() else None


def build_settings(data: dict) -> Settings:
    """Validate a merged config mapping into Settings"""
    priority = data.get("priority") or []
    if not isinstance(priority, list):
        raise ConfigError("'priority' must be a list of package manager names")

    prefixes = data.get("homebrew_prefixes") or []
    if not isinstance(prefixes, list):
        raise ConfigError("'homebrew_prefixes' must be a list of paths")
    # compare as directories: /usr/local must not match /usr/localbin
    prefixes = tuple(str(p).replace("\\", "/").rstrip("/") + "/" for p in prefixes)

    packages = data.get("packages") or {}
    if not isinstance(packages, dict):
        raise ConfigError("'packages' must map binary names to package names")
    for bin_name, package in packages.items():
        if not isinstance(package, str) or not package.strip():
            raise ConfigError(f"'packages.{bin_name}' must be a package name, got {package!r}")

    return Settings(
        priority=_reorder_kinds(priority),
        homebrew_prefixes=prefixes,
        packages={str(k): str(v) for k, v in packages.items()},
    )


def load_settings(explicit: Optional[str] = None) -> Settings:
    data = _load_defaults()
    path = config_path(explicit)
    if path is not None:
        log.debug("loading config from %s", path)
        data.update(_read_yaml(path))
    return build_settings(data)
