"""Module that contains relevant functions for logging in seirsvbh.

use_logging is the primary function that sets up and configures the global
seirsvbh logger. Warnings raised by the inverse solvers, integrators and the
grid sweep all flow through this logger.
"""

import datetime
import logging
import os
import sys
from typing import Literal, Optional

from .custom_log_formatter import CustomLogFormatter

LOGGER_NAME = "seirsvbh"
logger = logging.getLogger(LOGGER_NAME)

_LEVELS = {
    "none": (logging.CRITICAL + 1, "NONE"),
    "debug": (logging.DEBUG, "DEBUG"),
    "info": (logging.INFO, "INFO"),
    "warn": (logging.WARN, "WARN"),
    "warning": (logging.WARN, "WARN"),
    "error": (logging.ERROR, "ERROR"),
    "critical": (logging.CRITICAL, "CRITICAL"),
}


def use_logging(
    level: Literal[
        "none", "debug", "info", "warn", "error", "critical"
    ] = "info",
    output: Literal["file", "console", "both"] = "console",
    log_path: Optional[str] = "./logs",
) -> None:
    """Set or disable logging within the seirsvbh package.

    Uses standard python logging library to set up and customize a logger
    for seirsvbh. Logger instance can be retrieved from anywhere using
    logging.getLogger("seirsvbh").

    Parameters
    ----------
    level : str, optional
        Log level desired. Choices from "none", "debug", "info", "warn",
        "error" and "critical". Defaults to "info".
    output : str, optional
        Output for logs. Choices from "console", "file", and "both".
        Defaults to "console".
    log_path : str, optional
        folder path to store log files, only used when `output` writes to a
        file. Defaults to "./logs".

    Notes
    -----
    Log level of NONE is considered CRITICAL + 1 which you may see in
    various places such as in this function as logging.CRITICAL + 1
    """
    # clear logger handlers to avoid duplication in outputs
    logger.handlers.clear()
    if level.lower() in _LEVELS:
        log_level, level_name = _LEVELS[level.lower()]
    else:
        log_level, level_name = logging.INFO, "INFO"
        logger.warning(
            "Did not recognize %s as a valid log level. Using INFO.", level
        )
    logger.setLevel(log_level)
    formatter = CustomLogFormatter(
        "[%(levelname)s] %(asctime)s - %(filename)s - %(funcName)s: %(message)s",
        datefmt="%Y-%m-%d_%H:%M:%S",
    )

    handlers: list[logging.Handler] = []
    destination = output.lower()
    if destination.startswith(("file", "both")):
        if log_path is None:
            raise ValueError(
                f"output={output!r} writes to a file, log_path can not be None"
            )
        os.makedirs(log_path, exist_ok=True)
        now_string = f"{datetime.datetime.now():%Y-%m-%d_%Hh-%Mm-%Ss}"
        logfile = os.path.join(log_path, f"{now_string}.log")
        handlers.append(logging.FileHandler(logfile))
    if destination.startswith(("console", "both")) or not handlers:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        logger.addHandler(handler)
    logger.debug("Setting log level %s.", level_name)


def logging_level_name() -> Optional[str]:
    """Level name `use_logging` was last configured with.

    Returns None while the seirsvbh logger has no handler other than a
    NullHandler, i.e. when logging was never switched on. Worker processes
    use this to repeat the parent's configuration.
    """
    if all(isinstance(h, logging.NullHandler) for h in logger.handlers):
        return None
    for name in ("none", "debug", "info", "warn", "error", "critical"):
        if _LEVELS[name][0] == logger.level:
            return name
    return "info"
