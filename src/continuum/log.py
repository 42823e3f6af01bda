"""Logging setup for command-line and hook entry points."""

from __future__ import annotations

import logging


def setup_logging(level: str) -> None:
    # Handlers write to stderr; stdout is reserved for reports
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
