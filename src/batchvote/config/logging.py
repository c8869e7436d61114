"""Logging setup for the batchvote command line."""

from __future__ import annotations

import logging

# Libraries that log every HTTP request at INFO; indexer polling makes them noisy.
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Initialise the root logger with a terse CLI format.

    ``verbose`` switches the root logger to DEBUG and lets HTTP client logs
    through; otherwise those are capped at WARNING.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if verbose else logging.WARNING)
