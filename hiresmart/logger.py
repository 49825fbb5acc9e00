"""
Structured logging system for HireSmart.

Provides centralized logging with console and file outputs, keyword
context, and metrics tracking for selection and persistence health.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for selection changes and persistence failures.
    """

    def __init__(
        self,
        name: str = "hiresmart",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers

        self.metrics = {
            "selection_changes": 0,
            "selection_rejections": {},
            "persistence_reads": 0,
            "persistence_writes": 0,
            "persistence_failures": {},
        }

        if enable_console:
            # stdout is reserved for command output
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"hiresmart_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_selection_change(self):
        """Increment committed selection mutation counter."""
        self.metrics["selection_changes"] += 1

    def record_selection_rejection(self, code: str):
        """Record a refused selection mutation by outcome code."""
        rejections = self.metrics["selection_rejections"]
        rejections[code] = rejections.get(code, 0) + 1

    def record_persistence_read(self):
        self.metrics["persistence_reads"] += 1

    def record_persistence_write(self):
        self.metrics["persistence_writes"] += 1

    def record_persistence_failure(self, kind: str):
        """Record a recovered persistence failure (read or write)."""
        failures = self.metrics["persistence_failures"]
        failures[kind] = failures.get(kind, 0) + 1

    def get_metrics(self) -> dict:
        """Return a snapshot of current metrics."""
        metrics_copy = self.metrics.copy()
        metrics_copy["selection_rejections"] = dict(self.metrics["selection_rejections"])
        metrics_copy["persistence_failures"] = dict(self.metrics["persistence_failures"])
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Session Metrics ===")
        self.info(f"Selection changes: {metrics['selection_changes']}")
        self.info(
            f"Persistence: {metrics['persistence_reads']} reads, "
            f"{metrics['persistence_writes']} writes"
        )

        if metrics["selection_rejections"]:
            self.info("Rejected selections:")
            for code, count in metrics["selection_rejections"].items():
                self.info(f"  {code}: {count}")

        if metrics["persistence_failures"]:
            self.info("Persistence failures:")
            for kind, count in metrics["persistence_failures"].items():
                self.info(f"  {kind}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "hiresmart",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
