"""
Logging setup for the arborlight command line and preview window.

Library modules only create `logging.getLogger(__name__)` loggers; handlers
are attached here, once, to the package logger.
"""
import logging
import sys

FORMATS = {
    "short": "%(asctime)s %(levelname)-7s %(message)s",
    "full": "%(asctime)s %(threadName)s %(name)s %(levelname)s: %(message)s",
}


def setup_logging(
    level: int = logging.INFO,
    log_file: str | None = None,
    fmt: str = "short",
) -> logging.Logger:
    """
    Attach console (stderr) and optional file handlers to the 'arborlight' logger.

    Calling it again replaces the previous handlers.

    Args:
        level: Threshold for the package logger and its handlers.
        log_file: Also append records to this file.
        fmt: Key into FORMATS.
    """
    formatter = logging.Formatter(FORMATS[fmt], datefmt="%H:%M:%S")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    logger = logging.getLogger("arborlight")
    logger.setLevel(level)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging to stderr%s", f" and {log_file}" if log_file else "")
    return logger
