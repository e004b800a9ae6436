"""Loggers for the audit phases and the handlers the command line installs.

Library code only calls get_logger(); nothing is printed until the CLI (or
an embedding application) calls setup_logging(). Handlers are attached to
the "auditscope" logger, not the root logger, so an application that runs
audits through run_audit() keeps its own logging setup.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "auditscope"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _level(verbose: bool, quiet: bool) -> int:
    # quiet wins over verbose
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """
    Route audit logs to stderr, and optionally to a file.

    Phase progress is logged at INFO and degraded capabilities (no build
    artifacts or load metrics) at DEBUG, so only --verbose shows
    them. Calling this again replaces the handlers from the previous call.

    Args:
        verbose: DEBUG level, with source paths and traceback locals
        quiet: ERROR level only; takes precedence over verbose
        log_file: Append plain-text records to this file as well

    Returns:
        The "auditscope" logger
    """
    level = _level(verbose, quiet)
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_path=verbose,
        )
    )
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.setLevel(level)
    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the "auditscope" namespace; module names are prefixed if needed."""
    if name is None:
        return logging.getLogger(ROOT_LOGGER)
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
