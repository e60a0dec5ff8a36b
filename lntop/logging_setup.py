"""Logging bootstrap for the lntop logger hierarchy.

The dashboard owns the terminal, so records go to a rotating file. Commands
that print to the terminal may add a stderr handler.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "lntop"

_configured = False


def parse_level(raw: str | None, verbose: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    normalized = str(raw or "INFO").strip().upper()
    level = getattr(logging, normalized, None)
    return level if isinstance(level, int) else logging.INFO


def _make_file_handler(level: int, file_path: str) -> logging.Handler:
    handler = RotatingFileHandler(
        file_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def _make_stream_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
    return handler


def configure(level: int, file_path: str | None = None, stream: bool = False) -> logging.Logger:
    """Install handlers on the lntop logger. Repeated calls are no-ops."""
    global _configured
    logger = logging.getLogger(ROOT_LOGGER)
    if _configured:
        return logger

    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()
    if file_path:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_make_file_handler(level, file_path))
    if stream:
        logger.addHandler(_make_stream_handler(level))
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logging.captureWarnings(True)
    _configured = True
    return logger
