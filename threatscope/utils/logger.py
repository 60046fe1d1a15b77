"""
Structured logging for ThreatScope.

All loggers live under the ``threatscope`` namespace. Console output is
either colorized (``pretty``) or one JSON object per line (``json``); an
optional log file always receives JSON and is rotated by size.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional, Tuple

ROOT_LOGGER_NAME = "threatscope"


class StructuredFormatter(logging.Formatter):
    """JSON formatter for machine-readable log output."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data.update(extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class PrettyFormatter(logging.Formatter):
    """Colorized single-line formatter for terminals."""

    COLORS: Dict[str, str] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"
    GREY = "\033[90m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]

        # threatscope.dll_analyzer -> t.dll_analyzer
        logger_name = record.name
        if len(logger_name) > 20:
            parts = logger_name.split(".")
            if len(parts) > 1:
                logger_name = ".".join(p[0] for p in parts[:-1]) + "." + parts[-1]
            if len(logger_name) > 20:
                logger_name = logger_name[:17] + "..."

        extra = ""
        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            extra = " | " + ", ".join(f"{k}={v}" for k, v in extra_data.items())

        formatted = (
            f"{self.BOLD}[{timestamp}]{self.RESET} "
            f"{color}{record.levelname:8}{self.RESET} "
            f"{self.GREY}{logger_name:20}{self.RESET} "
            f"{record.getMessage()}{extra}"
        )

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that merges bound context with per-call ``extra_data``.

    Usage::

        logger = get_logger("dll_analyzer", {"file": "sample.exe"})
        logger.info("Stage complete", extra_data={"stage": "extract"})
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        call_data = kwargs.pop("extra_data", None)
        call_extra = kwargs.get("extra") or {}

        merged = {**(self.extra or {}), **call_extra}
        if call_data:
            merged.update(call_data)

        kwargs["extra"] = {"extra_data": merged}
        return msg, kwargs


class LoggerManager:
    """Thread-safe singleton owning handler setup and logger instances."""

    _instance: Optional[LoggerManager] = None
    _lock: threading.Lock = threading.Lock()

    def __new__(cls) -> LoggerManager:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._loggers = {}
                    instance._initialized = False
                    cls._instance = instance
        return cls._instance

    def setup(
        self,
        level: str = "INFO",
        log_file: Optional[str] = None,
        format_type: str = "pretty",
        max_size_mb: int = 10,
        backup_count: int = 3,
    ) -> None:
        """
        Configure handlers on the ``threatscope`` root logger.

        Only the first call has an effect until reset() is called.

        Args:
            level: Logging level name
            log_file: Optional path of a rotating JSON log file
            format_type: "json" or "pretty" for the console handler
            max_size_mb: Log file size that triggers rotation
            backup_count: Number of rotated files kept
        """
        if self._initialized:
            return

        with self._lock:
            if self._initialized:
                return

            root_logger = logging.getLogger(ROOT_LOGGER_NAME)
            root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
            root_logger.handlers.clear()

            # Console goes to stderr so reports on stdout stay parseable
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(logging.DEBUG)
            if format_type == "json":
                console_handler.setFormatter(StructuredFormatter())
            else:
                console_handler.setFormatter(PrettyFormatter())
            root_logger.addHandler(console_handler)

            if log_file:
                try:
                    log_path = Path(log_file)
                    log_path.parent.mkdir(parents=True, exist_ok=True)
                    file_handler = RotatingFileHandler(
                        log_path,
                        maxBytes=max_size_mb * 1024 * 1024,
                        backupCount=backup_count,
                        encoding="utf-8",
                    )
                    file_handler.setLevel(logging.DEBUG)
                    file_handler.setFormatter(StructuredFormatter())
                    root_logger.addHandler(file_handler)
                except OSError as e:
                    root_logger.warning(f"Failed to create log file handler: {e}")

            self._initialized = True

    def get_logger(
        self,
        name: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> ContextLogger:
        if name not in self._loggers:
            with self._lock:
                if name not in self._loggers:
                    self._loggers[name] = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

        return ContextLogger(self._loggers[name], context or {})

    def reset(self) -> None:
        """Drop handlers and cached loggers so setup() can run again."""
        with self._lock:
            self._initialized = False
            self._loggers.clear()
            root_logger = logging.getLogger(ROOT_LOGGER_NAME)
            root_logger.handlers.clear()
            root_logger.setLevel(logging.NOTSET)


_manager = LoggerManager()


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_type: str = "pretty",
) -> None:
    """Configure the global logging system."""
    _manager.setup(level=level, log_file=log_file, format_type=format_type)


def get_logger(
    name: str,
    context: Optional[Dict[str, Any]] = None,
) -> ContextLogger:
    """Get a namespaced logger, optionally bound to a context dict."""
    return _manager.get_logger(name, context)


def reset_logging() -> None:
    """Reset the logging system (used by tests and the CLI)."""
    _manager.reset()
