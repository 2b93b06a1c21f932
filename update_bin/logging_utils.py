"""Logging setup for the CLI.

Diagnostics go through stdlib logging rendered by rich on stderr, so they
never mix with a package manager's streamed output on stdout.
"""

import logging

from rich.logging import RichHandler

from update_bin.output import err_console


def configure_logging(verbose: bool = False) -> None:
    """Configure the package logger. Safe to call more than once."""
    logger = logging.getLogger("update_bin")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # Remove handlers added by earlier calls (tests call this repeatedly)
    for handler in list(logger.handlers):
        if getattr(handler, "_update_bin_handler", False):
            logger.removeHandler(handler)
            handler.close()

    handler = RichHandler(
        console=err_console,
        show_time=False,
        show_path=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    setattr(handler, "_update_bin_handler", True)
    logger.addHandler(handler)
    logger.propagate = False
