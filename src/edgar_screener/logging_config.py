"""Logging setup shared by the CLI and any embedding application.

Every module logs through `logging.getLogger(__name__)`; this module only
decides where those records go and how they look.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# urllib3 debug lines carry full request URLs, api keys included
QUIET_LOGGERS = ("urllib3",)


def configure_logging(log_path: Path | None = None, level: int = logging.INFO) -> None:
    """Send pipeline logs to stdout and, optionally, to a file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_path: File that receives a copy of every record; its parent
            directory is created if needed.
        level: Root logging level.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
