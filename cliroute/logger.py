"""
Session loggers.

Each context gets its own logging.Logger, created outside the global logging
manager, with a rich handler bound to the session console. Two sessions (e.g.,
two socket REPL clients) therefore never share handlers or levels.

Level names follow the command line: silent, warn, info, verbose, debug, trace.
"""
import logging

from rich.logging import RichHandler

VERBOSE = 15
TRACE = 5
SILENT = logging.CRITICAL + 10

logging.addLevelName(VERBOSE, "VERBOSE")
logging.addLevelName(TRACE, "TRACE")

LEVELS = {
    "silent": SILENT,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "verbose": VERBOSE,
    "debug": logging.DEBUG,
    "trace": TRACE,
}

DEFAULT_LEVEL = "info"


def make_logger(name, console, level=DEFAULT_LEVEL):
    """
    Return a new logger writing to `console` through a RichHandler.
    """
    logger = logging.Logger(name)
    handler = RichHandler(console=console, show_time=False, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    set_level(logger, level)
    return logger


def set_level(logger, level, /):
    """
    Switch `logger` to a level name (see LEVELS).
    """
    try:
        logger.setLevel(LEVELS[level])
    except KeyError:
        raise ValueError(f"unknown log level {level!r}") from None
    return logger


def level_name(logger, /):
    """
    The command-line name of the current level of `logger`.
    """
    for name, value in LEVELS.items():
        if logger.level == value:
            return name
    return logging.getLevelName(logger.level).lower()


__all__ = (
    "VERBOSE",
    "TRACE",
    "SILENT",
    "LEVELS",
    "DEFAULT_LEVEL",
    "make_logger",
    "set_level",
    "level_name",
)
