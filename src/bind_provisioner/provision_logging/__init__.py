"""
Provisioner Logging Module

This module provides structured logging for the provisioning run: status
lines on the console and an optional JSON log file.
"""

from .logger import (
    StructuredLogger,
    bind_run_context,
    clear_run_context,
    get_logger,
    log_exception,
    setup_logging,
)

__all__ = [
    "StructuredLogger",
    "setup_logging",
    "get_logger",
    "bind_run_context",
    "clear_run_context",
    "log_exception",
]
