"""
Opt-in log output for the fitting engine.

The library only attaches a NullHandler to the ``pcafit`` logger. Call
``setup_logging`` from a script or notebook to see solver fallbacks,
isotropic-fit warnings and (at DEBUG) per-fit summaries.
"""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "pcafit"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Route ``pcafit`` diagnostics to stdout and, optionally, a file.

    Handlers installed by an earlier call are replaced, so repeated calls
    never duplicate output. The package NullHandler is left in place.

    Parameters
    ----------
    level : int
        Threshold for the package logger and its handlers. Default INFO.
    log_file : str, optional
        Path of a log file, truncated on each call.

    Returns
    -------
    logging.Logger
        The ``pcafit`` logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in [h for h in logger.handlers if not isinstance(h, logging.NullHandler)]:
        logger.removeHandler(handler)
        handler.close()

    _attach(logger, logging.StreamHandler(sys.stdout), level)
    if log_file:
        _attach(logger, logging.FileHandler(log_file, mode='w', encoding='utf-8'), level)

    logger.debug("pcafit logging configured at level %s", logging.getLevelName(level))
    return logger
