from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "selectorgen"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    if not name:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def build_logger(log_dir: Path | None = None, level: int = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    logger.propagate = False
    try:
        directory = log_dir or (Path.home() / ".selectorgen")
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(directory / "selectorgen.log", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(file_handler)
    except OSError:
        # Fallback to stderr logging if file logger cannot be initialized.
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(stream_handler)
    return logger


def trace(logger: logging.Logger, enabled: bool, message: str, *args: object) -> None:
    """Emit a diagnostic step: INFO when the debug trace is on, DEBUG otherwise."""
    logger.log(logging.INFO if enabled else logging.DEBUG, message, *args)
