"""Centralized logging configuration for the connectivity watchdog."""

import logging
import logging.handlers
import os
import sys
from datetime import datetime
from typing import Optional, Dict, Any
from pathlib import Path

from .config.defaults import SYSTEM_CONSTANTS

LOGGER_PREFIX = "watchdog"


class StructuredFormatter(logging.Formatter):
    """Pipe-separated log lines, with ``extra={"context": {...}}`` appended as key=value pairs."""

    LINE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-32s | %(message)s"

    def __init__(self, include_context: bool = True):
        super().__init__(self.LINE_FORMAT)
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)

        context = getattr(record, "context", None)
        if self.include_context and context:
            pairs = " | ".join(f"{k}={v}" for k, v in context.items())
            # Keep the traceback, if any, after the context
            head, sep, tail = line.partition("\n")
            line = f"{head} | Context: {pairs}{sep}{tail}"

        return line


class ContextFilter(logging.Filter):
    """Filter that adds process and component context to log records."""

    def __init__(self, component_name: Optional[str] = None):
        super().__init__()
        self.component_name = component_name
        self.process_id = os.getpid()

    def filter(self, record: logging.LogRecord) -> bool:
        record.process_id = self.process_id
        if self.component_name:
            record.component = self.component_name
        return True


class LoggingManager:
    """Owns the root handlers: console always, rotating files when a log dir is given."""

    def __init__(self, log_dir: Optional[str] = None, log_level: int = logging.INFO):
        self.log_dir = Path(log_dir) if log_dir else None
        self.log_level = log_level
        self.max_log_size = SYSTEM_CONSTANTS["LOG_ROTATION_SIZE_MB"] * 1024 * 1024
        self.backup_count = SYSTEM_CONSTANTS["LOG_BACKUP_COUNT"]

        self.main_log_file: Optional[Path] = None
        self.error_log_file: Optional[Path] = None
        self.status_log_file: Optional[Path] = None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.main_log_file = self.log_dir / "watchdog.log"
            self.error_log_file = self.log_dir / "errors.log"
            self.status_log_file = self.log_dir / "status.log"

        self._status_handler: Optional[logging.Handler] = None
        self._setup_root_logger()

    def _rotating_handler(self, path: Path, level: int) -> logging.Handler:
        handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=self.max_log_size,
            backupCount=self.backup_count
        )
        handler.setLevel(level)
        return handler

    def _setup_root_logger(self) -> None:
        """Setup the root logger configuration."""
        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level)
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(StructuredFormatter(include_context=False))
        root_logger.addHandler(console_handler)

        if self.log_dir is not None:
            main_file_handler = self._rotating_handler(self.main_log_file, logging.DEBUG)
            main_file_handler.setFormatter(StructuredFormatter(include_context=True))
            root_logger.addHandler(main_file_handler)

            error_file_handler = self._rotating_handler(self.error_log_file, logging.ERROR)
            error_file_handler.setFormatter(StructuredFormatter(include_context=True))
            root_logger.addHandler(error_file_handler)

            # Status lines also get their own plain file
            status_logger = logging.getLogger(f"{LOGGER_PREFIX}.status")
            self._status_handler = self._rotating_handler(self.status_log_file, logging.INFO)
            self._status_handler.setFormatter(logging.Formatter("%(asctime)s | %(message)s"))
            status_logger.addHandler(self._status_handler)

        logging.getLogger(LOGGER_PREFIX).debug("Logging system initialized")

    def set_log_level(self, level: int) -> None:
        """Set the global log level."""
        self.log_level = level
        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            if isinstance(handler, logging.StreamHandler) and \
                    not isinstance(handler, logging.FileHandler):
                handler.setLevel(level)

    def get_log_stats(self) -> Dict[str, Any]:
        """Get logging statistics."""
        stats = {
            "log_directory": str(self.log_dir) if self.log_dir else None,
            "log_files": {},
            "log_level": logging.getLevelName(self.log_level)
        }

        for log_file in (self.main_log_file, self.error_log_file, self.status_log_file):
            if log_file is not None and log_file.exists():
                stats["log_files"][log_file.name] = {
                    "size_mb": log_file.stat().st_size / (1024 * 1024),
                    "modified": datetime.fromtimestamp(log_file.stat().st_mtime).isoformat()
                }

        return stats

    def close(self) -> None:
        """Detach the status file handler and close file handlers."""
        if self._status_handler is not None:
            logging.getLogger(f"{LOGGER_PREFIX}.status").removeHandler(self._status_handler)
            self._status_handler.close()
            self._status_handler = None
        for handler in list(logging.getLogger().handlers):
            if isinstance(handler, logging.FileHandler):
                logging.getLogger().removeHandler(handler)
                handler.close()


def get_logger(component_name: str) -> logging.Logger:
    """Get a component logger under the watchdog namespace."""
    logger = logging.getLogger(f"{LOGGER_PREFIX}.{component_name}")
    if not any(isinstance(f, ContextFilter) for f in logger.filters):
        logger.addFilter(ContextFilter(component_name))
    return logger


def log_with_context(logger: logging.Logger, level: int,
                     message: str, context: Optional[Dict[str, Any]] = None) -> None:
    """Log message with additional context information."""
    if context:
        logger.log(level, message, extra={"context": context})
    else:
        logger.log(level, message)


def log_status(message: str, fields: Optional[Dict[str, Any]] = None) -> None:
    """Write a status line to the status logger."""
    status_logger = logging.getLogger(f"{LOGGER_PREFIX}.status")

    if fields:
        field_str = " | ".join([f"{k}={v}" for k, v in fields.items()])
        message = f"{message} | {field_str}"

    status_logger.info(message)


def parse_log_level(log_level: str) -> int:
    """Map a level name such as "debug" to its numeric value, defaulting to INFO."""
    level = getattr(logging, str(log_level).upper(), None)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = None) -> LoggingManager:
    """Setup centralized logging system."""
    return LoggingManager(log_dir, parse_log_level(log_level))
