from __future__ import annotations

import logging

from .config import VERBOSE


def setup_logging(verbose: bool = VERBOSE) -> None:
    """Turn on debug logging for the library modules when asked to."""
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)sZ [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
