import logging

import pytest

from maxwelldg.logging_config import LIBRARY_LOGGERS, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("maxwelldg")
    library_levels = {name: logging.getLogger(name).level for name in LIBRARY_LOGGERS}
    yield logger
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    for name, level in library_levels.items():
        logging.getLogger(name).setLevel(level)


def test_repeated_setup_keeps_a_single_handler(package_logger):
    setup_logging()
    assert setup_logging(logging.DEBUG) is package_logger
    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.DEBUG


def test_level_names_are_accepted(package_logger):
    setup_logging("debug")
    assert package_logger.level == logging.DEBUG
    with pytest.raises(ValueError):
        setup_logging("LOUD")


def test_library_loggers_stay_quiet_in_debug_runs(package_logger):
    setup_logging(logging.DEBUG)
    assert logging.getLogger("numba").level == logging.WARNING
    assert not logging.getLogger("numba").isEnabledFor(logging.DEBUG)

    setup_logging(logging.DEBUG, library_level="INFO")
    assert logging.getLogger("matplotlib").level == logging.INFO


def test_log_file(package_logger, tmp_path):
    path = tmp_path / "run.log"
    setup_logging(log_file=str(path))
    logging.getLogger("maxwelldg.fea.solvers.solver").info("Cycle 0")
    logging.getLogger("maxwelldg.fea.solvers.solver").debug("hidden")
    for handler in package_logger.handlers:
        handler.flush()
    text = path.read_text(encoding="utf-8")
    assert "Logging initialized at level INFO." in text
    assert "maxwelldg.fea.solvers.solver - INFO - Cycle 0" in text
    assert "hidden" not in text
