"""API location and logging setup for the CLI."""

from __future__ import annotations

import logging
import os
import sys

DEFAULT_API_URL = "http://twooter.example"
API_URL_ENV = "TWOOTER_API_URL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_api_url(explicit: str | None = None) -> str:
    """Pick the API base URL: explicit value, then environment, then default."""

    for candidate in (explicit, os.environ.get(API_URL_ENV)):
        if candidate and candidate.strip():
            return candidate.strip().rstrip("/")
    return DEFAULT_API_URL


def configure_logging(verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger("twooter_cli")
    level = logging.DEBUG if verbose else logging.WARNING
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setLevel(level)
    return logger
