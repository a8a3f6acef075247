"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: get_config(), ConfigModule.get(), get_config_schema()
Hidden: Config sources, validation logic, environment parsing

Can be replaced with different config systems (Consul, etcd, AWS Parameter Store).
"""

import os
from typing import Any, Dict, List


# Configuration Contract: Required and Optional Keys
# This defines the black box interface - what the config module guarantees to provide

REQUIRED_CONFIG_KEYS = {
    "redis_host": "Redis server hostname",
    "redis_port": "Redis server port number",
    "redis_db": "Redis database number",
    "session_channels": "Ordered pool of IRC channels used for support sessions",
    "user_support_channel": "Public channel where users wait for help",
    "staff_support_channel": "Channel where staff issue commands",
    "support_log_channel": "Channel that mirrors every session log line",
    "logs_dir": "Directory where ended session logs are written",
    "host": "HTTP server bind address",
    "port": "HTTP server port",
    "log_level": "Logging level (DEBUG, INFO, WARNING, ERROR)",
    "paste_timeout": "Paste upload timeout in seconds",
}

OPTIONAL_CONFIG_KEYS = {
    "redis_password": {
        "description": "Redis authentication password",
        "default": None,
    },
    "paste_url": {
        "description": "Paste service endpoint; uploads are skipped when unset",
        "default": None,
    },
    "paste_api_key": {
        "description": "API key sent to the paste service",
        "default": None,
    },
}


def _parse_channels(value: str) -> List[str]:
    return [chan.strip() for chan in value.split(",") if chan.strip()]


class ConfigModule:
    """Configuration management module."""

    def __init__(self):
        """Initialize with environment variables."""
        self._config = self._load_from_env()
        self._validate_required_keys()

    def _validate_required_keys(self) -> None:
        """
        Validate that all required configuration keys are present.

        Raises:
            ValueError: If required keys are missing
        """
        missing_keys = []
        for key in REQUIRED_CONFIG_KEYS:
            if key not in self._config or self._config[key] in (None, []):
                missing_keys.append(key)

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}. "
                f"Check environment variables and deployment configuration."
            )

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment."""
        # Parse Redis port (might be in tcp://host:port format from K8s)
        redis_port_env = os.getenv("REDIS_PORT", "6379")
        if redis_port_env.startswith("tcp://"):
            redis_port = int(redis_port_env.split(":")[-1])
        else:
            redis_port = int(redis_port_env)

        return {
            # Redis settings
            "redis_host": os.getenv("REDIS_HOST", "localhost"),
            "redis_port": redis_port,
            "redis_db": int(os.getenv("REDIS_DB", "0")),
            "redis_password": os.getenv("REDIS_PASSWORD"),
            # IRC channels
            "session_channels": _parse_channels(os.getenv("SUPPORT_SESSION_CHANNELS", "")),
            "user_support_channel": os.getenv("USER_SUPPORT_CHANNEL", "#support"),
            "staff_support_channel": os.getenv("STAFF_SUPPORT_CHANNEL", "#support-staff"),
            "support_log_channel": os.getenv("SUPPORT_LOG_CHANNEL", "#support-logs"),
            # Session logs
            "logs_dir": os.getenv("LOGS_DIR", "logs"),
            "paste_url": os.getenv("PASTE_URL"),
            "paste_api_key": os.getenv("PASTE_API_KEY"),
            "paste_timeout": float(os.getenv("PASTE_TIMEOUT", "10")),
            # HTTP settings
            "host": os.getenv("API_HOST", "0.0.0.0"),
            "port": int(os.getenv("API_PORT", "8080")),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Get the configuration schema (contract) for this module.

        Returns:
            Dictionary with 'required' and 'optional' key specifications

        Example:
            >>> schema = ConfigModule.get_config_schema()
            >>> print(schema['required']['logs_dir'])
            'Directory where ended session logs are written'
        """
        return {
            "required": REQUIRED_CONFIG_KEYS.copy(),
            "optional": OPTIONAL_CONFIG_KEYS.copy(),
        }


# Singleton instance
_instance = None


def get_config() -> ConfigModule:
    """Get the configuration module singleton."""
    global _instance
    if _instance is None:
        _instance = ConfigModule()
    return _instance


__all__ = ["get_config", "ConfigModule", "REQUIRED_CONFIG_KEYS", "OPTIONAL_CONFIG_KEYS"]
