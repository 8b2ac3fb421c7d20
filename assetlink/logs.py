"""Logging configuration for the command-line tool."""

import logging
import sys
from logging import Formatter, LogRecord, StreamHandler
from typing import Dict, NoReturn, Optional, TextIO


class ColorFormatter(Formatter):

    """Log formatter that prints bold, colorized level names."""

    COLORS = {
        logging.FATAL: 31,  # red
        logging.ERROR: 31,  # red
        logging.WARNING: 33,  # yellow
        logging.INFO: 36,  # cyan
        logging.DEBUG: 35,  # magenta
    }

    FORMAT = "%(message)s"

    def __init__(self, use_color: bool):  # pylint: disable=super-init-not-called
        self.plain = Formatter(f"assetlink: %(levelname)s: {self.FORMAT}")
        self.by_level: Dict[int, Formatter] = {}
        if use_color:
            for level, code in self.COLORS.items():
                label = f"\x1b[{code};1m%(levelname)s:\x1b[0m"
                self.by_level[level] = Formatter(f"assetlink: {label} {self.FORMAT}")

    def format(self, record: LogRecord) -> str:
        return self.by_level.get(record.levelno, self.plain).format(record)


class ExitStreamHandler(StreamHandler):

    """Stream handler that exits with status 1 after severe records.

    Records at exit_level or above end the program once they are written.
    """

    def __init__(self, stream: Optional[TextIO] = None, exit_level: int = logging.FATAL):
        super().__init__(stream)
        self.exit_level = exit_level

    def emit(self, record: LogRecord):
        super().emit(record)
        if record.levelno >= self.exit_level:
            self.flush()
            sys.exit(1)


def verbosity_level(verbose: Optional[int]) -> int:
    """Map the number of -v flags to a log level."""
    if not verbose:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(stream: TextIO, log_level: int, exit_level: int):
    """Set up the root logger to write to stream.

    Uses color if the stream is a TTY. The log_level must not be higher than
    exit_level, and the exit_level must not be higher than FATAL.
    """
    assert log_level <= exit_level
    assert exit_level <= logging.FATAL
    logger = logging.getLogger()
    logger.setLevel(log_level)
    handler = ExitStreamHandler(stream, exit_level)
    handler.setFormatter(ColorFormatter(use_color=stream.isatty()))
    logger.addHandler(handler)
    logging.addLevelName(logging.FATAL, "FATAL")


def fatal(msg: str, *args, **kwargs) -> NoReturn:
    """Log at the FATAL level, which always exits.

    Declared NoReturn so that type checkers treat the code after it as
    unreachable.
    """
    logging.fatal(msg, *args, **kwargs)
    sys.exit(1)
