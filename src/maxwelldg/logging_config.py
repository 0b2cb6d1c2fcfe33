"""
Logging Configuration
=====================
Routes the 'maxwelldg' logger hierarchy to stdout and, optionally, a run log.

Operator assembly, solver progress (cycle, time, energy) and exporter writes
are logged by the package modules through ``logging.getLogger(__name__)``.
This module only decides where those records go.

Third-party libraries of the numerical stack log a lot at DEBUG level (numba
reports every compilation pass, matplotlib every font lookup). Their loggers
are capped separately so a DEBUG run of the solver stays readable.
"""
import logging
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "maxwelldg"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'

# Loggers of the numerical stack that are quieted independently of the package level
LIBRARY_LOGGERS = ("numba", "matplotlib", "h5py")


def _as_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown logging level '{level}'.")
    return value


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    library_level: Union[int, str] = logging.WARNING,
) -> logging.Logger:
    """
    Configures the logger for the 'maxwelldg' namespace.

    Calling it again replaces the previous handlers, so notebooks and test
    sessions can switch level or log file without duplicated records.

    Args:
        level: Level of the package loggers, as a number or a name ("DEBUG").
        log_file: Optional path of a run log, overwritten on every call.
        library_level: Minimum level of the numba, matplotlib and h5py loggers.

    Returns:
        The configured package logger.

    Raises:
        ValueError: If a level name is unknown.
    """
    level = _as_level(level)
    library_level = _as_level(library_level)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    logger.info(f"Logging initialized at level {logging.getLevelName(level)}.")
    return logger
