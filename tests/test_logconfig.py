"""Unit tests for logging setup."""

import logging

import pytest

from src.pathtracer.utilities.logconfig import PACKAGE_LOGGER, setup_logging


@pytest.fixture
def scratch_logger():
    """A throwaway logger name, cleaned up after the test."""
    name = "src.pathtracer.tests.scratch"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_defaults_to_package_logger():
    """Test that the package logger name matches the module hierarchy."""
    assert PACKAGE_LOGGER == "src.pathtracer"
    assert logging.getLogger("src.pathtracer.core.integrator").name.startswith(PACKAGE_LOGGER)


def test_level_and_single_handler(scratch_logger):
    """Test that repeated setup replaces handlers instead of stacking them."""
    setup_logging(scratch_logger, level=logging.DEBUG)
    logger = setup_logging(scratch_logger, level=logging.INFO)

    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_log_file(scratch_logger, tmp_path):
    """Test that messages also go to the log file when one is given."""
    log_file = tmp_path / "render.log"
    logger = setup_logging(
        scratch_logger, level=logging.INFO, log_format="%(levelname)s %(message)s", log_file=str(log_file)
    )

    logger.info("rendered %d samples", 8)
    for handler in logger.handlers:
        handler.flush()

    assert len(logger.handlers) == 2
    assert log_file.read_text().strip() == "INFO rendered 8 samples"
