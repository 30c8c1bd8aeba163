import logging

import pytest

from dynamicmass.logging_config import setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("dynamicmass")
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def test_repeated_setup_does_not_stack_handlers(package_logger):
    setup_logging()
    logger = setup_logging()
    assert logger is package_logger
    assert len(logger.handlers) == 1


def test_level_by_name_and_file(package_logger, tmp_path):
    path = tmp_path / "dm.log"
    logger = setup_logging("debug", log_file=str(path))
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    logging.getLogger("dynamicmass.session").info("built network")
    for handler in logger.handlers:
        handler.flush()
    text = path.read_text(encoding="utf-8")
    assert "dynamicmass.session: built network" in text
    assert "[INFO]" in text


def test_unknown_level_name(package_logger):
    with pytest.raises(ValueError):
        setup_logging("loud")
