"""
Logging configuration using Loguru.

Modules log through get_logger(__name__). Structured fields go in ``extra``
and are bound onto the record, so messages are never run through
str.format and may safely contain braces (JSON, dict reprs, model output).
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[module]}:{function}:{line} - {message}"


def setup_logging(
    level: str = "INFO",
    log_to_file: bool = True,
    log_dir: str = "logs",
    file_rotation: str = "10 MB",
    file_retention: str = "7 days",
    compression: str = "zip",
    serialize: bool = True,
) -> None:
    """
    Configure Loguru sinks.

    Console output is colorized text. With log_to_file, every record also
    goes to a rotating daily file (JSON when serialize is set) and errors are
    additionally kept in a separate file.
    """
    logger.remove()
    logger.configure(extra={"module": "context_memory"})

    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if not log_to_file:
        return

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    file_options = {
        "format": FILE_FORMAT,
        "rotation": file_rotation,
        "retention": file_retention,
        "compression": compression,
        "serialize": serialize,
        "enqueue": True,
    }
    logger.add(log_path / "context_memory_{time:YYYY-MM-DD}.log", level=level, **file_options)
    logger.add(log_path / "errors_{time:YYYY-MM-DD}.log", level="ERROR", **file_options)


class ModuleLogger:
    """Module-scoped logger; ``extra`` fields are bound onto the record."""

    def __init__(self, name: str):
        self.name = name
        self._logger = logger.bind(module=name)

    def _log(self, level: str, message: str, extra: dict[str, Any] | None) -> None:
        # depth=2 attributes the record to the caller of debug/info/...
        self._logger.bind(**(extra or {})).opt(depth=2).log(level, message)

    def debug(self, message: str, extra: dict[str, Any] | None = None) -> None:
        self._log("DEBUG", message, extra)

    def info(self, message: str, extra: dict[str, Any] | None = None) -> None:
        self._log("INFO", message, extra)

    def warning(self, message: str, extra: dict[str, Any] | None = None) -> None:
        self._log("WARNING", message, extra)

    def error(self, message: str, extra: dict[str, Any] | None = None) -> None:
        self._log("ERROR", message, extra)


def get_logger(name: str) -> ModuleLogger:
    """Get a logger instance for a module."""
    return ModuleLogger(name)
