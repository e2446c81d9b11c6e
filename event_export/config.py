"""
Settings for the event export service.

Values come from the process environment, optionally seeded from a `.env`
file in the project root:

    DHIS2_URL=https://play.dhis2.org/40
    DHIS2_USERNAME=admin
    DHIS2_PASSWORD=district
    DHIS2_TIMEOUT=30
    EVENT_EXPORT_LOG_FILE=event_export.log
    EVENT_EXPORT_LOG_LEVEL=INFO
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os

from dotenv import load_dotenv

from .clients.connection import Dhis2Connection


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration.

    Attributes:
        dhis2_url: Base URL of the DHIS2 instance (without the /api suffix)
        dhis2_username: Basic auth user
        dhis2_password: Basic auth password
        timeout_s: Request timeout in seconds for every API call
        log_file: Path of the rotating JSON log file
        log_level: Console log level name
    """
    dhis2_url: str = ""
    dhis2_username: Optional[str] = None
    dhis2_password: Optional[str] = None
    timeout_s: float = 30.0
    log_file: str = "event_export.log"
    log_level: str = "INFO"

    def connection(self) -> Dhis2Connection:
        """
        Build the API connection described by these settings.

        Raises:
            ValueError: If no DHIS2 base URL is configured
        """
        if not self.dhis2_url:
            raise ValueError("DHIS2_URL is not configured")

        return Dhis2Connection(
            base_url=self.dhis2_url,
            username=self.dhis2_username,
            password=self.dhis2_password,
            timeout_s=self.timeout_s,
        )


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Read settings from the environment.

    Args:
        env_file: Optional .env file to load first (default: project root .env)

    Returns:
        A fresh Settings instance
    """
    env_path = env_file or Path(__file__).parent.parent / ".env"
    load_dotenv(env_path)

    return Settings(
        dhis2_url=os.getenv("DHIS2_URL", ""),
        dhis2_username=os.getenv("DHIS2_USERNAME"),
        dhis2_password=os.getenv("DHIS2_PASSWORD"),
        timeout_s=float(os.getenv("DHIS2_TIMEOUT", "30")),
        log_file=os.getenv("EVENT_EXPORT_LOG_FILE", "event_export.log"),
        log_level=os.getenv("EVENT_EXPORT_LOG_LEVEL", "INFO"),
    )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings (tests, reconfiguration)."""
    global _settings
    _settings = None
