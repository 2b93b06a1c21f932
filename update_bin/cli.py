"""
update-bin - Update a binary with the package manager that installed it

Detects whether a binary came from homebrew, bun, npm, pnpm, yarn or cargo
and runs that package manager's own update command for it.
"""

import logging
from typing import Annotated, Optional

from cyclopts import App, Parameter

from update_bin import __version__
from update_bin.config import load_settings
from update_bin.dispatcher import dispatch, show_info
from update_bin.errors import UpdateBinError
from update_bin.logging_utils import configure_logging
from update_bin.output import console, print_error
from update_bin.resolver import resolve

log = logging.getLogger(__name__)

app = App(
    name="update-bin",
    help="""
[bold cyan]update-bin[/] - Update a binary to its latest version by using the original package manager

Supports [bright_yellow]homebrew[/], [bright_magenta]bun[/], [bright_red]npm[/], [yellow]pnpm[/], [cyan]yarn[/] and [red]cargo[/].

[dim]Examples:[/]
  update-bin ripgrep              Update ripgrep with whatever installed it
  update-bin tsc --info           Show which package and manager own tsc
  update-bin eza --dry-run        Show the update command without running it
""",
    version=__version__,
)


@app.default
def update_bin(
    bin_name: Annotated[str, Parameter(help="Name of the installed binary to update")],
    *,
    info: Annotated[
        bool,
        Parameter(
            name=["--info", "-i"],
            help="Display package name and package manager instead of updating",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        Parameter(
            name=["--dry-run", "-n"],
            help="Show what would be done without executing",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        Parameter(name=["--verbose", "-v"], help="Log detection steps and queries"),
    ] = False,
    config: Annotated[
        Optional[str],
        Parameter(
            name=["--config", "-c"],
            help="Path to YAML config file (default: ~/.config/update-bin.yaml)",
        ),
    ] = None,
):
    """
    Update a binary using the package manager that installed it.

    [dim]Exit codes:[/]
      the package manager's own exit code when its update fails,
      3 binary not found, 4 no package manager owns it,
      5 package manager not on PATH, 130 interrupted
    """
    configure_logging(verbose)

    try:
        settings = load_settings(config)
        resolution = resolve(bin_name, settings)
        if info:
            show_info(resolution)
            return
        if dry_run:
            console.print("[yellow]DRY RUN[/] - No changes will be made")
        dispatch(resolution, dry_run=dry_run)
    except UpdateBinError as e:
        log.debug("%s: exit code %d", type(e).__name__, e.exit_code)
        print_error(str(e))
        raise SystemExit(e.exit_code)
    except KeyboardInterrupt:
        print_error("Interrupted")
        raise SystemExit(130)


def main():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    main()
