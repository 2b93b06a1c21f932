"""Run the owning package manager's update command for a resolved binary."""

import logging

from rich.markup import escape

from update_bin import process
from update_bin.errors import ManagerUnavailableError, SubprocessFailureError
from update_bin.managers import get_manager
from update_bin.models import (
    PackageManagerKind,
    Resolution,
    UpdateCommand,
    UpdateOutcome,
    version_or_unknown,
)
from update_bin.output import console, print_child_line, print_success

log = logging.getLogger(__name__)


def build_update_command(kind: PackageManagerKind, package: str) -> UpdateCommand:
    """The update invocation for ``package`` under ``kind``"""
    return get_manager(kind).update_command(package)


def installed_version(resolution: Resolution) -> str:
    return version_or_unknown(get_manager(resolution.kind).installed_version(resolution))


def show_info(resolution: Resolution):
    """Print what update-bin would act on, without updating"""
    manager = get_manager(resolution.kind)
    console.print(f"Package name: [bold]{escape(resolution.package_name)}[/]")
    console.print(f"Package manager: [{manager.color}]{manager.name}[/]")
    console.print(f"Binary: [dim]{escape(resolution.bin_path)}[/]")
    console.print(f"Installed version: {escape(installed_version(resolution))}")
    command = build_update_command(resolution.kind, resolution.package_name)
    console.print(f"Update command: [dim]{escape(str(command))}[/]")


def dispatch(resolution: Resolution, dry_run: bool = False) -> UpdateOutcome:
    """Update the package that provides a resolved binary.

    The child's stdout and stderr are streamed to the console as they
    arrive. Nothing is retried.

    Raises:
        ManagerUnavailableError: the manager's executable is not on PATH.
        SubprocessFailureError: the update command exited non-zero.
    """
    manager = get_manager(resolution.kind)
    if not manager.is_available():
        raise ManagerUnavailableError(resolution.kind, manager.tool)

    command = manager.update_command(resolution.package_name)
    package = resolution.package_name
    shown = escape(package)

    old_version = installed_version(resolution)
    console.print(f"Current version: {escape(old_version)}")
    console.print(
        f"Updating [bold]{shown}[/] with [{manager.color}]{manager.name}[/]"
    )

    if dry_run:
        console.print(f"  [dim]Would run:[/] {escape(str(command))}")
        return UpdateOutcome(resolution, command, old_version, old_version, dry_run=True)

    console.print(f"  [dim]$[/] {escape(str(command))}")
    try:
        returncode = process.stream(command.argv, print_child_line)
    except FileNotFoundError:
        # vanished between the PATH check and spawning
        raise ManagerUnavailableError(resolution.kind, manager.tool) from None
    log.debug("%s exited %d", command.executable, returncode)

    if returncode != 0:
        raise SubprocessFailureError(command, returncode, package)

    new_version = installed_version(resolution)
    outcome = UpdateOutcome(resolution, command, old_version, new_version, returncode)
    if outcome.changed:
        console.print(f"Updated to version: {escape(new_version)}")
        print_success(
            escape(f"Successfully updated {package} from {old_version} to {new_version}")
        )
    else:
        console.print(f"[blue]ℹ[/] {escape(f'{package} is already up to date ({old_version})')}")
    return outcome
