import json
import os
from typing import Any, Dict, Optional

from ..core.detector import DEFAULT_REMEDIATION_TEMPLATE
from ..core.exceptions import ConfigurationError
from ..utils.validator import ConfigValidator

DEFAULT_SNAPSHOT_QUERY = """
    SELECT gp_segment_id, locktype, database, relation, page, tuple, virtualxid, transactionid,
           classid, objid, objsubid, mode, granted, mppsessionid
    FROM pg_locks
"""

# Environment variable -> configuration key
ENV_OVERRIDES = {
    'GP_DEADLOCK_CONN': 'conn_str',
    'GP_DEADLOCK_DOTFILE': 'dotfile',
    'GP_DEADLOCK_LOG_LEVEL': 'log_level',
    'GP_DEADLOCK_LOG_FILE': 'log_file',
}


class DetectionConfig:
    """Configuration for deadlock detection"""

    def __init__(self, config_dict: Dict = None):
        self.config = dict(config_dict or {})
        self._load_default_config()

    def _load_default_config(self):
        """Load default configuration values"""
        defaults = {
            # Snapshot source
            'conn_str': 'sslmode=disable',
            'snapshot_query': DEFAULT_SNAPSHOT_QUERY,
            'connect_timeout': 10,

            # Logging
            'log_level': 'INFO',
            'log_file': None,

            # Output settings
            'dotfile': '',
            'output_file': None,
            'remediation_template': DEFAULT_REMEDIATION_TEMPLATE,
        }

        # Merge with provided config
        for key, value in defaults.items():
            if key not in self.config:
                self.config[key] = value

    def get(self, key: str, default=None):
        """Get configuration value"""
        return self.config.get(key, default)

    def update(self, config_dict: Dict):
        """Update configuration with new values, ignoring unset (None) entries"""
        self.config.update({key: value for key, value in config_dict.items() if value is not None})

    def apply_environment(self, environ: Optional[Dict[str, str]] = None):
        """Override values from GP_DEADLOCK_* environment variables"""
        environ = os.environ if environ is None else environ
        for variable, key in ENV_OVERRIDES.items():
            if variable in environ:
                self.config[key] = environ[variable]

    def validate(self) -> bool:
        return ConfigValidator.validate_config(self.config)

    def to_dict(self) -> Dict:
        """Export configuration as dictionary"""
        return self.config.copy()

    def to_safe_dict(self) -> Dict:
        """Export configuration with the connection string masked, for logging"""
        safe = self.to_dict()
        if 'password=' in safe.get('conn_str', ''):
            safe['conn_str'] = ' '.join(
                'password=***' if part.startswith('password=') else part
                for part in safe['conn_str'].split()
            )
        return safe

    def save_to_file(self, file_path: str):
        """Save configuration to JSON file"""
        with open(file_path, 'w') as f:
            json.dump(self.config, f, indent=2)

    def load_from_file(self, file_path: str):
        """
        Merge configuration from a JSON file.

        Raises:
            ConfigurationError: If the file is missing or is not a JSON object
        """
        try:
            with open(file_path, 'r') as f:
                config_dict = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file {file_path} not found") from None
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Error parsing configuration file {file_path}: {e}") from e

        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"Configuration file {file_path} must contain a JSON object")
        self.config.update(config_dict)

    @classmethod
    def load(cls, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None,
             environ: Optional[Dict[str, str]] = None) -> "DetectionConfig":
        """
        Build the effective configuration.

        Layers, lowest first: defaults, JSON file, environment, ``overrides``
        (command line flags; None values are skipped).
        """
        config = cls()
        if config_path:
            config.load_from_file(config_path)
        config.apply_environment(environ)
        if overrides:
            config.update(overrides)
        config.validate()
        return config
