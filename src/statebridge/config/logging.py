"""Logging setup for the statebridge CLI.

Reports are printed to stdout, so log records always go to stderr and a
report can be piped or redirected without log noise mixed in.
"""

from __future__ import annotations

import logging
import sys


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Configure the root logger for one CLI run.

    ``level`` comes from ``-v`` or ``STATEBRIDGE_LOG_LEVEL``; ``force=True``
    replaces handlers installed by an earlier call.
    """

    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
