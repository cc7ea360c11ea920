"""Utility modules for the deadlock detector."""

from .logger import DeadlockLogger, get_logger, set_console_level, set_log_level, log_system_info
from .validator import SnapshotValidator, ConfigValidator

__all__ = [
    # Logging utilities
    'DeadlockLogger',
    'get_logger',
    'set_log_level',
    'set_console_level',
    'log_system_info',

    # Validation utilities
    'SnapshotValidator',
    'ConfigValidator',
]
