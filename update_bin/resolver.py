"""Map an installed binary to the package manager that owns it."""

import logging
import shutil
from typing import Optional

from update_bin.config import Settings
from update_bin.errors import BinaryNotFoundError, UnknownOwnerError
from update_bin.managers import get_manager
from update_bin.models import Resolution

log = logging.getLogger(__name__)


def find_binary_path(bin_name: str, path: Optional[str] = None) -> str:
    """Locate ``bin_name`` on PATH (or the given search path)"""
    found = shutil.which(bin_name, path=path)
    if not found:
        raise BinaryNotFoundError(bin_name)
    return found


def resolve(bin_name: str, settings: Optional[Settings] = None) -> Resolution:
    """Find which package manager installed ``bin_name``.

    Managers are asked in ``settings.priority`` order and the first one
    claiming the binary wins, so overlapping signals (a brew-installed
    node sharing /opt/homebrew/bin with npm globals, say) resolve the same
    way every time.

    Raises:
        BinaryNotFoundError: nothing named ``bin_name`` is on PATH.
        UnknownOwnerError: the binary exists but no manager claims it.
    """
    settings = settings or Settings()
    bin_path = find_binary_path(bin_name)
    log.debug("%s found at %s", bin_name, bin_path)

    for kind in settings.priority:
        manager = get_manager(kind)
        if not manager.owns(bin_path, settings):
            log.debug("%s does not claim %s", kind, bin_path)
            continue

        package_name = settings.packages.get(bin_name)
        if package_name:
            log.debug("using configured package name %s", package_name)
        else:
            package_name = manager.package_name(bin_name, bin_path)
        log.debug("%s claims %s (package %s)", kind, bin_path, package_name)
        return Resolution(
            bin_name=bin_name,
            bin_path=bin_path,
            kind=kind,
            package_name=package_name,
        )

    raise UnknownOwnerError(bin_name, bin_path)
