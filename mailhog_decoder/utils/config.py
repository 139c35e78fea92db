"""
Configuration Management Module
Handles loading and validation of environment variables and settings
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple
from dotenv import load_dotenv


LOG_FORMATS = ("text", "json")


class ConfigurationError(ValueError):
    """Raised when the configuration is invalid"""


@dataclass
class MailHogConfig:
    """Connection settings for the MailHog API"""
    protocol: str = "http"
    host: str = "localhost"
    port: int = 8025
    auth: Optional[str] = None
    base_path: str = "/api"
    timeout: int = 10

    @property
    def base_url(self) -> str:
        """API root URL, e.g. http://localhost:8025/api"""
        protocol = self.protocol.rstrip(":/")
        base_path = "/" + self.base_path.strip("/") if self.base_path.strip("/") else ""
        return f"{protocol}://{self.host}:{self.port}{base_path}"

    @property
    def basic_auth(self) -> Optional[Tuple[str, str]]:
        """(username, password) tuple parsed from ``user:pass``, if set"""
        if not self.auth:
            return None
        username, _, password = self.auth.partition(":")
        return username, password


@dataclass
class SystemConfig:
    """Configuration for system settings"""
    log_level: str = "INFO"
    log_file: str = ""
    log_format: str = "text"


class Config:
    """Main configuration class"""

    def __init__(self, env_file: str = ".env"):
        """
        Initialize configuration from environment file

        Args:
            env_file: Path to environment file (default: .env)
        """
        load_dotenv(env_file)

        self.mailhog = self._load_mailhog_config()
        self.system = self._load_system_config()

    def _load_mailhog_config(self) -> MailHogConfig:
        """Load MailHog API configuration"""
        return MailHogConfig(
            protocol=os.getenv("MAILHOG_PROTOCOL", "http"),
            host=os.getenv("MAILHOG_HOST", "localhost"),
            port=self._get_int("MAILHOG_PORT", 8025),
            auth=os.getenv("MAILHOG_AUTH") or None,
            base_path=os.getenv("MAILHOG_BASE_PATH", "/api"),
            timeout=self._get_int("MAILHOG_TIMEOUT", 10)
        )

    def _load_system_config(self) -> SystemConfig:
        """Load system configuration"""
        return SystemConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", ""),
            log_format=os.getenv("LOG_FORMAT", "text").strip().lower()
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Read an integer environment variable"""
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be an integer, got '{value}'")

    def validate(self) -> bool:
        """
        Validate configuration

        Returns:
            True if configuration is valid

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.mailhog.protocol.rstrip(":/").lower() not in ("http", "https"):
            raise ConfigurationError(
                f"Unsupported MailHog protocol: {self.mailhog.protocol}"
            )

        if not self.mailhog.host:
            raise ConfigurationError("MAILHOG_HOST must not be empty")

        if not 1 <= self.mailhog.port <= 65535:
            raise ConfigurationError(f"Invalid MailHog port: {self.mailhog.port}")

        if self.mailhog.timeout <= 0:
            raise ConfigurationError("MAILHOG_TIMEOUT must be positive")

        if self.mailhog.auth and ":" not in self.mailhog.auth:
            raise ConfigurationError("MAILHOG_AUTH must have the form user:password")

        if self.system.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}"
            )

        return True
