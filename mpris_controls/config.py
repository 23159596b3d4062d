"""Configuration management using XDG Base Directory Specification.

This module provides centralized configuration management following Linux
standards for config and data directories.
"""

import configparser
import os
from pathlib import Path
from typing import Optional

from mpris_controls.exceptions import ConfigurationError

# Reference poll cadence of the original dock widget
DEFAULT_UPDATE_INTERVAL_MS = 1000
DEFAULT_DBUS_TIMEOUT = 2.0


class Config:
    """
    Configuration manager using XDG Base Directory Specification.

    Follows Linux standards:
    - Config: ~/.config/mpris-controls/ (or XDG_CONFIG_HOME)
    - Data: ~/.local/share/mpris-controls/ (or XDG_DATA_HOME)
    """

    _instance: Optional['Config'] = None

    def __init__(self) -> None:
        """
        Initialize configuration manager.

        Sets up XDG Base Directory paths and loads or creates configuration.
        """
        self.config_home = Path(os.getenv('XDG_CONFIG_HOME', Path.home() / '.config'))
        self.data_home = Path(os.getenv('XDG_DATA_HOME', Path.home() / '.local' / 'share'))

        self.app_name = 'mpris-controls'
        self.config_dir = self.config_home / self.app_name
        self.data_dir = self.data_home / self.app_name

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self.config_file = self.config_dir / 'config.ini'
        self.config = configparser.ConfigParser()

        self._load_config()

    @classmethod
    def get_instance(cls) -> 'Config':
        """Get the singleton config instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the singleton so the next access re-reads the environment."""
        cls._instance = None

    def _load_config(self) -> None:
        """Load configuration from file or create defaults."""
        if self.config_file.exists():
            self.config.read(self.config_file)
        else:
            self._create_default_config()

    def _create_default_config(self) -> None:
        """Create default configuration with sensible defaults."""
        self.config['controller'] = {
            'update_interval': str(DEFAULT_UPDATE_INTERVAL_MS),
            'auto_switch': 'true',
        }

        self.config['dbus'] = {
            'timeout': str(DEFAULT_DBUS_TIMEOUT),
        }

        self.save()

    def save(self) -> None:
        """
        Save configuration to file.

        Writes current configuration state to the config file.
        """
        try:
            with open(self.config_file, 'w') as f:
                self.config.write(f)
        except OSError as e:
            from mpris_controls.logging import get_logger
            logger = get_logger(__name__)
            logger.error("Failed to save config: %s", e, exc_info=True)

    def get(self, section: str, key: str, fallback: Optional[str] = None) -> Optional[str]:
        """Get a configuration value."""
        return self.config.get(section, key, fallback=fallback)

    def set(self, section: str, key: str, value: str) -> None:
        """
        Set a configuration value.

        Args:
            section: Configuration section name
            key: Configuration key name
            value: Value to set
        """
        if section not in self.config:
            self.config.add_section(section)
        self.config.set(section, key, value)
        self.save()

    def get_bool(self, section: str, key: str, fallback: bool = False) -> bool:
        """Get a boolean configuration value."""
        try:
            return self.config.getboolean(section, key, fallback=fallback)
        except ValueError as e:
            raise ConfigurationError(f"[{section}] {key}: {e}") from e

    def get_int(self, section: str, key: str, fallback: int = 0) -> int:
        """Get an integer configuration value."""
        try:
            return self.config.getint(section, key, fallback=fallback)
        except ValueError as e:
            raise ConfigurationError(f"[{section}] {key}: {e}") from e

    def get_float(self, section: str, key: str, fallback: float = 0.0) -> float:
        """Get a float configuration value."""
        try:
            return self.config.getfloat(section, key, fallback=fallback)
        except ValueError as e:
            raise ConfigurationError(f"[{section}] {key}: {e}") from e

    # Convenience properties
    @property
    def update_interval_ms(self) -> int:
        """Poll interval for the active player, in milliseconds."""
        interval = self.get_int('controller', 'update_interval', DEFAULT_UPDATE_INTERVAL_MS)
        if interval <= 0:
            raise ConfigurationError(f"update_interval must be positive, got {interval}")
        return interval

    @property
    def auto_switch(self) -> bool:
        """Whether a player that starts playing may take over the active session."""
        return self.get_bool('controller', 'auto_switch', True)

    @property
    def dbus_timeout(self) -> float:
        """Timeout for a single blocking bus call, in seconds."""
        timeout = self.get_float('dbus', 'timeout', DEFAULT_DBUS_TIMEOUT)
        if timeout <= 0:
            raise ConfigurationError(f"dbus timeout must be positive, got {timeout}")
        return timeout

    @property
    def log_dir(self) -> Path:
        """Get log directory."""
        log_dir = self.data_dir / 'logs'
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir


def get_config() -> Config:
    """Get the configuration instance."""
    return Config.get_instance()
