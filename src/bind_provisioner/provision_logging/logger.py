"""
Structured Logging Framework

Status lines go to stdout through structlog's console renderer. Every event
can also be appended to a rotating JSON log file. Both outputs come from the
same structlog chain; each handler renders it with its own formatter.

Facts about the run that are known only part-way through, such as the
resolved role, are bound once with :func:`bind_run_context` and then appear
on every later event.
"""

import logging
import logging.handlers
import sys
import traceback
from pathlib import Path
from typing import Any, List, Optional

import structlog

from ..config.schema import LoggingConfig

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _shared_processors() -> List[Any]:
    """Processors run for structlog events and foreign stdlib records alike."""
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt=TIMESTAMP_FORMAT, utc=False),
    ]


class StructuredLogger:
    """Owns the logging setup of one provisioner process."""

    def __init__(self, config: LoggingConfig):
        self.config = config
        self._configured = False
        self._console_handler: Optional[logging.Handler] = None
        self._file_handler: Optional[logging.Handler] = None
        self.logger = None

    def configure(self) -> None:
        """Install the console handler, the optional run log and structlog."""
        if self._configured:
            return

        level = self.config.level.upper()

        root = logging.getLogger()
        for old in list(root.handlers):
            root.removeHandler(old)
            # Release run log files left by an earlier setup
            if isinstance(old, logging.FileHandler):
                old.close()
        root.setLevel(level)

        self._console_handler = self._make_console_handler()
        root.addHandler(self._console_handler)

        if self.config.file:
            self._file_handler = self._make_file_handler()
            root.addHandler(self._file_handler)

        structlog.contextvars.clear_contextvars()
        structlog.configure(
            processors=self._get_processors(),
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=False,
        )

        self._configured = True
        self.logger = structlog.get_logger("bind_provisioner")

    def _get_processors(self) -> list:
        return [
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            *_shared_processors(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ]

    def _make_console_handler(self) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(self.config.level.upper())
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=_shared_processors(),
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.dev.ConsoleRenderer(
                        colors=self.config.colors and sys.stdout.isatty(),
                        pad_level=False,
                    ),
                ],
            )
        )
        return handler

    def _make_file_handler(self) -> logging.Handler:
        """Rotating JSON run log, one object per event."""
        Path(self.config.file).parent.mkdir(parents=True, exist_ok=True)

        handler = logging.handlers.RotatingFileHandler(
            filename=self.config.file,
            maxBytes=self.config.max_size_mb * 1024 * 1024,
            backupCount=self.config.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(self.config.level.upper())
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=_shared_processors(),
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.EventRenamer("message"),
                    structlog.processors.JSONRenderer(),
                ],
            )
        )
        return handler

    def get_logger(self, name: str = "bind_provisioner") -> structlog.BoundLogger:
        if not self._configured:
            self.configure()
        return structlog.get_logger(name)


_logger_instance: Optional[StructuredLogger] = None


def setup_logging(config: LoggingConfig) -> None:
    """Configure logging for the process; replaces any earlier setup."""
    global _logger_instance
    _logger_instance = StructuredLogger(config)
    _logger_instance.configure()


def get_logger(name: str = "bind_provisioner") -> structlog.BoundLogger:
    """Return a named logger.

    Raises:
        RuntimeError: If setup_logging() has not run yet
    """
    if _logger_instance is None:
        raise RuntimeError("Logging not configured. Call setup_logging() first.")

    return _logger_instance.get_logger(name)


def bind_run_context(**values: Any) -> None:
    """Attach ``values`` to every event logged from here on in this run."""
    structlog.contextvars.bind_contextvars(**values)


def clear_run_context() -> None:
    structlog.contextvars.clear_contextvars()


def log_exception(
    logger: structlog.BoundLogger, message: str, exc: Exception = None
) -> None:
    """Log a failure with its type and text; the traceback goes to DEBUG.

    Args:
        logger: Logger to write to
        message: Summary line
        exc: Exception to describe, defaults to the one being handled
    """
    if exc is None:
        exc = sys.exc_info()[1]

    if exc is None:
        logger.error(message)
        return

    logger.error(
        message,
        exception_type=type(exc).__name__,
        exception_message=str(exc),
    )
    logger.debug(
        "Exception traceback",
        traceback="".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ),
    )
