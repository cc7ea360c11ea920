"""
Logging utilities for the deadlock detector.

Console output goes to stderr: stdout carries only the remediation statement.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "gp_deadlock_system"


class DeadlockLogger:
    """
    Logger for the deadlock detector with structured helpers.

    Handlers live on the package root logger only; named loggers are its
    children and propagate to it.
    """

    def __init__(self, name: Optional[str] = None, level: int = logging.INFO):
        full_name = ROOT_LOGGER_NAME if not name else f"{ROOT_LOGGER_NAME}.{name}"
        self.logger = logging.getLogger(full_name)

        if full_name == ROOT_LOGGER_NAME:
            self.logger.setLevel(level)
            # Prevent duplicate handlers
            if not self.logger.handlers:
                self._setup_handlers()

    def _setup_handlers(self):
        """Set up the stderr console handler; it passes warnings and errors only until made verbose."""
        self.console_handler = logging.StreamHandler(sys.stderr)
        self.console_handler.setLevel(logging.WARNING)
        self.console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        ))
        self.logger.addHandler(self.console_handler)

    def add_file_handler(self, log_file: str):
        """Write detailed DEBUG logs to ``log_file`` as well."""
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        ))
        logging.getLogger(ROOT_LOGGER_NAME).addHandler(file_handler)
        return file_handler

    def log_detection_start(self, source: str, config: Dict[str, Any]):
        """Log the start of a detection run."""
        self.logger.info(f"Starting deadlock detection from {source}")
        self.logger.debug(f"Detection configuration: {json.dumps(config, indent=2, default=str)}")

    def log_stage(self, stage: str, execution_time: float, **counts: int):
        """Log one pipeline stage with its timing and counters."""
        details = ", ".join(f"{key}={value}" for key, value in counts.items())
        self.logger.debug(f"{stage} completed in {execution_time:.3f}s ({details})")

    def log_detection_result(self, result: 'DeadlockResult'):
        """Log detection results with structured information."""
        if not result.deadlock_found:
            self.logger.info(
                f"No deadlock among {result.stats.get('sessions', 0)} sessions in the wait-for graph"
            )
            return

        self.logger.info(
            f"Deadlock detected: {result.stats.get('deadlocked_sessions', 0)} sessions, "
            f"{len(result.edges)} wait-for edges"
        )
        for cycle in result.cycles:
            self.logger.info(f"Cycle: {' -> '.join(str(s) for s in cycle + cycle[:1])}")
        self.logger.debug(f"Detection stats: {json.dumps(result.stats, default=str)}")

    def log_error(self, error: Exception, context: Optional[str] = None):
        """Log errors with context information."""
        context_msg = f" in {context}" if context else ""
        self.logger.error(f"Error occurred{context_msg}: {str(error)}",
                          exc_info=self.logger.isEnabledFor(logging.DEBUG))

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Log warnings with optional details."""
        self.logger.warning(message)
        if details:
            self.logger.debug(f"Warning details: {json.dumps(details, indent=2, default=str)}")

    def set_level(self, level: int):
        """Set logging level."""
        self.logger.setLevel(level)

    def set_console_level(self, level: int):
        """Set the level of the stderr console handler."""
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            if type(handler) is logging.StreamHandler:
                handler.setLevel(level)


# Global logger instance
logger = DeadlockLogger()


def get_logger(name: Optional[str] = None) -> DeadlockLogger:
    """
    Get a logger instance for the deadlock detector.

    Args:
        name: Optional name for the logger. If None, returns the global logger.

    Returns:
        DeadlockLogger instance
    """
    if name:
        return DeadlockLogger(name)
    return logger


def set_log_level(level: str):
    """
    Set the global log level.

    Args:
        level: Log level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
    """
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    logger.set_level(numeric_level)


def set_console_level(level: str):
    """Set the level of stderr log output ('DEBUG' ... 'CRITICAL')."""
    logger.set_console_level(getattr(logging, str(level).upper(), logging.WARNING))


def log_system_info():
    """Log system information for debugging purposes."""
    import platform
    import psutil

    logger.logger.debug("=== System Information ===")
    logger.logger.debug(f"Platform: {platform.platform()}")
    logger.logger.debug(f"Python: {platform.python_version()}")
    logger.logger.debug(f"CPU cores: {psutil.cpu_count()}")
    logger.logger.debug(f"Memory: {psutil.virtual_memory().total // (1024**3)} GB")
    logger.logger.debug("==========================")
