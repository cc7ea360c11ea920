"""
Validation utilities for snapshot files and configuration.
"""

from typing import Any, Dict, List

from ..core.exceptions import ConfigurationError, MalformedRow, ValidationError


class SnapshotValidator:
    """
    Validates the shape of snapshots loaded from outside the database.
    Column level checks happen when rows are partitioned.
    """

    @staticmethod
    def validate_rows_container(data: Any) -> List[Dict[str, Any]]:
        """
        Accept either a bare list of rows or ``{"rows": [...]}``.

        Args:
            data: Decoded JSON document

        Returns:
            The list of row dictionaries

        Raises:
            ValidationError: If the document holds no row list
            MalformedRow: If an entry is not an object
        """
        if isinstance(data, dict):
            if 'rows' not in data:
                raise ValidationError("Snapshot document must contain a 'rows' list")
            data = data['rows']

        if not isinstance(data, list):
            raise ValidationError("Snapshot rows must be a list")

        for index, row in enumerate(data):
            if not isinstance(row, dict):
                raise MalformedRow('row', index, row)
        return data


class ConfigValidator:
    """Type checks for configuration values read from files or the environment."""

    EXPECTED_TYPES = {
        'conn_str': str,
        'dotfile': str,
        'log_level': str,
        'snapshot_query': str,
        'remediation_template': str,
        'connect_timeout': int,
    }

    LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

    @classmethod
    def validate_config(cls, config: Dict[str, Any]) -> bool:
        """
        Raises:
            ConfigurationError: If a known key has the wrong type or value
        """
        for key, expected in cls.EXPECTED_TYPES.items():
            value = config.get(key)
            if value is None:
                continue
            if not isinstance(value, expected) or isinstance(value, bool):
                raise ConfigurationError(
                    f"Configuration key '{key}' must be {expected.__name__}, got {type(value).__name__}"
                )

        if str(config.get('log_level', 'INFO')).upper() not in cls.LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level: {config.get('log_level')}")

        template = config.get('remediation_template')
        if template is not None:
            if '{sessions}' not in template:
                raise ConfigurationError("remediation_template must contain '{sessions}'")
            try:
                template.format(sessions="1")
            except (KeyError, IndexError, ValueError) as e:
                raise ConfigurationError(f"Invalid remediation_template {template!r}: {e}") from e

        timeout = config.get('connect_timeout')
        if timeout is not None and timeout <= 0:
            raise ConfigurationError("connect_timeout must be positive")

        return True
