"""Root logging configuration for embedding applications and scripts."""
from __future__ import annotations

import logging
import sys


def setup_logging(*, level: str | int = logging.INFO, fmt: str | None = None) -> None:
    """
    Configure a single stderr handler on the root logger.

    Call this once, before the first log record is emitted. Library code only
    uses module loggers and never calls this itself.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt=fmt or "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)

    logging.captureWarnings(True)
