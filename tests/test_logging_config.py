"""Tests for the auditscope logger setup."""

import logging

import pytest
from rich.logging import RichHandler

from auditscope.logging_config import ROOT_LOGGER, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


class TestSetupLogging:
    """Levels and handlers on the auditscope logger."""

    @pytest.mark.parametrize(
        "verbose,quiet,level",
        [
            (False, False, logging.WARNING),
            (True, False, logging.DEBUG),
            (False, True, logging.ERROR),
            (True, True, logging.ERROR),
        ],
    )
    def test_levels(self, verbose, quiet, level):
        assert setup_logging(verbose=verbose, quiet=quiet).level == level

    def test_root_logger_untouched(self):
        root_handlers = list(logging.getLogger().handlers)
        logger = setup_logging()
        assert logger.name == ROOT_LOGGER
        assert not logger.propagate
        assert logging.getLogger().handlers == root_handlers

    def test_repeated_setup_replaces_handlers(self):
        setup_logging()
        logger = setup_logging(verbose=True)
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)

    def test_log_file(self, tmp_path):
        path = tmp_path / "audit.log"
        logger = setup_logging(log_file=str(path))
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)

        get_logger("analyzers.security").warning("Exposed key in src/wallet.js")
        for handler in logger.handlers:
            handler.flush()
        assert "auditscope.analyzers.security - WARNING - Exposed key in src/wallet.js" in path.read_text()


class TestGetLogger:
    """Namespacing of module loggers."""

    def test_prefixes_bare_names(self):
        assert get_logger("scoring").name == "auditscope.scoring"

    def test_keeps_package_names(self):
        assert get_logger("auditscope.scoring.engine").name == "auditscope.scoring.engine"
        assert get_logger(ROOT_LOGGER).name == ROOT_LOGGER

    def test_default_is_package_logger(self):
        assert get_logger().name == ROOT_LOGGER

    def test_lookalike_names_are_prefixed(self):
        assert get_logger("auditscoped").name == "auditscope.auditscoped"
