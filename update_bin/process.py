"""Subprocess helpers.

Two shapes of invocation exist: read-only queries whose output is
captured (``run_query``), and the update itself whose merged output is
streamed line by line (``stream``).
"""

import logging
import subprocess
from typing import Callable, Optional

log = logging.getLogger(__name__)


def run_query(cmd: list[str]) -> Optional[str]:
    """Run a read-only command and return its stripped stdout.

    Returns None when the tool is missing or exits non-zero; callers treat
    that as "no signal".
    """
    log.debug("query: %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
            text=True,
            check=False,
        )
    except OSError as e:
        log.debug("query failed to start: %s", e)
        return None
    if result.returncode != 0:
        log.debug("query exited %d", result.returncode)
        return None
    return result.stdout.strip()


def stream(cmd: list[str], on_line: Callable[[str], None]) -> int:
    """Run a command, feeding each output line to ``on_line``; return its exit code.

    stderr is merged into stdout so lines keep their original order.
    Raises FileNotFoundError when the executable does not exist.
    """
    log.debug("run: %s", " ".join(cmd))
    with subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        errors="replace",
        bufsize=1,
    ) as proc:
        assert proc.stdout is not None
        try:
            for line in proc.stdout:
                on_line(line.rstrip("\r\n"))
        except KeyboardInterrupt:
            # the child got the same SIGINT; let it finish dying
            proc.wait()
            raise
        return proc.wait()
