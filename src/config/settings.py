"""Application settings management for Pedido FTP.

Provides AppSettings dataclass, SettingsManager for persistence and
load_settings() which layers environment overrides on top of the file.
"""

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from src.config.paths import get_history_db_path, get_settings_path
from src.ftp.connection import ConnectionConfig
from src.utils.validators import (
    validate_ftp_path,
    validate_host,
    validate_port,
    validate_timeout,
)

logger = logging.getLogger("pedido_ftp.settings")


# Environment variable -> (settings field, type)
ENV_OVERRIDES = {
    "PEDIDO_FTP_HOST": ("ftp_host", str),
    "PEDIDO_FTP_PORT": ("ftp_port", int),
    "PEDIDO_FTP_USER": ("ftp_user", str),
    "PEDIDO_FTP_FOLDER": ("ftp_folder", str),
    "PEDIDO_FTP_TIMEOUT": ("timeout", int),
    "PEDIDO_FTP_SERVER_HOST": ("server_host", str),
    "PEDIDO_FTP_SERVER_PORT": ("server_port", int),
    "PEDIDO_FTP_ALLOWED_ORIGIN": ("allowed_origin", str),
    "PEDIDO_FTP_HISTORY_DB": ("history_db_path", str),
    "PEDIDO_FTP_LOG_LEVEL": ("log_level", str),
}

# Settings field -> validator returning (is_valid, error_message)
FIELD_VALIDATORS = {
    "ftp_port": validate_port,
    "timeout": validate_timeout,
    "ftp_folder": validate_ftp_path,
    "server_port": validate_port,
}


def field_error(field_name: str, value: Any) -> Optional[str]:
    """
    Check one settings value against its type and validator.

    Returns:
        Error message, or None if the value is acceptable
    """
    default = AppSettings.__dataclass_fields__[field_name].default
    if isinstance(value, bool) or not isinstance(value, type(default)):
        return f"expected {type(default).__name__}, got {value!r}"

    if field_name == "ftp_host" and value:
        _, error = validate_host(value)
        return error

    validator = FIELD_VALIDATORS.get(field_name)
    if validator is None:
        return None
    _, error = validator(value)
    return error


@dataclass
class AppSettings:
    """Application settings that persist between sessions."""

    # Default FTP target (password lives in the keyring)
    ftp_host: str = ""
    ftp_port: int = 21
    ftp_user: str = ""
    ftp_folder: str = "/"
    timeout: int = 30

    # HTTP server
    server_host: str = "0.0.0.0"
    server_port: int = 5000
    allowed_origin: str = "*"

    # Upload history
    history_db_path: str = ""
    history_limit: int = 10

    log_level: str = "INFO"

    def to_dict(self) -> dict:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Create settings from dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)

    @property
    def has_default_ftp(self) -> bool:
        """True if a default FTP target was saved."""
        return bool(self.ftp_host and self.ftp_user)

    def default_ftp_config(self, password: str = "") -> Optional[ConnectionConfig]:
        """
        Build a ConnectionConfig from the saved defaults.

        Args:
            password: Password retrieved from the keyring

        Returns:
            ConnectionConfig, or None if no usable default target is saved
        """
        if not self.has_default_ftp:
            return None
        try:
            return ConnectionConfig(
                host=self.ftp_host,
                port=self.ftp_port,
                user=self.ftp_user,
                password=password,
                remote_folder=self.ftp_folder or "/",
                timeout=self.timeout
            )
        except ValueError as e:
            logger.warning(f"Saved FTP target is unusable: {e}")
            return None

    def resolved_history_db_path(self) -> Path:
        """History database path, defaulting to the app data directory."""
        if self.history_db_path:
            return Path(self.history_db_path)
        return get_history_db_path()


def sanitize_settings(settings: AppSettings, source: str) -> AppSettings:
    """
    Reset fields that fail their type or validator check to the defaults.

    Args:
        settings: Settings read from disk
        source: Where the settings came from, for the log message

    Returns:
        The same settings instance, updated in place
    """
    for field in fields(AppSettings):
        value = getattr(settings, field.name)
        error = field_error(field.name, value)
        if error:
            logger.warning(
                f"Invalid {field.name} in {source} ({error}), using {field.default!r}"
            )
            setattr(settings, field.name, field.default)
    return settings


class SettingsManager:
    """Manages application settings persistence."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            config_path: Optional custom path, defaults to platform standard
        """
        self._config_path = config_path or get_settings_path()

    @property
    def config_path(self) -> Path:
        """Path to settings file."""
        return self._config_path

    def load(self) -> AppSettings:
        """
        Load settings from disk.

        Returns:
            AppSettings instance (defaults if file not found)
        """
        if self._config_path.exists():
            try:
                with open(self._config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                return sanitize_settings(AppSettings.from_dict(data), str(self._config_path))
            except (json.JSONDecodeError, IOError):
                # Invalid or unreadable file, use defaults
                logger.warning(f"Ignoring unreadable settings file {self._config_path}")
        return AppSettings()

    def save(self, settings: AppSettings) -> None:
        """
        Persist settings to disk.

        Args:
            settings: Settings to save
        """
        # Ensure parent directory exists
        self._config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self._config_path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)

    def save_default_ftp(self, settings: AppSettings, config: ConnectionConfig) -> None:
        """
        Make a tested FTP target the default and persist it.

        The password is not part of the file; store it with CredentialManager.
        """
        settings.ftp_host = config.host
        settings.ftp_port = config.port
        settings.ftp_user = config.user
        settings.ftp_folder = config.remote_folder
        self.save(settings)
        logger.info(f"Saved default FTP target {config.user}@{config.location}")

    def clear_default_ftp(self, settings: AppSettings) -> None:
        """Forget the default FTP target and persist the change."""
        for name in ("ftp_host", "ftp_port", "ftp_user", "ftp_folder"):
            setattr(settings, name, AppSettings.__dataclass_fields__[name].default)
        self.save(settings)
        logger.info("Cleared default FTP target")


def apply_env_overrides(
    settings: AppSettings,
    environ: Optional[Mapping[str, str]] = None
) -> AppSettings:
    """
    Override settings fields from environment variables.

    Empty values are ignored. Values that are not integers where one is
    expected, or that fail validation, keep the current value.

    Args:
        settings: Settings loaded from file
        environ: Mapping to read, defaults to os.environ

    Returns:
        The same settings instance, updated in place
    """
    environ = os.environ if environ is None else environ

    for name, (field_name, field_type) in ENV_OVERRIDES.items():
        raw = environ.get(name)
        if raw is None or not raw.strip():
            continue

        value = raw.strip()
        if field_type is int:
            try:
                value = int(value)
            except ValueError:
                logger.warning(f"Ignoring {name}: not an integer")
                continue

        error = field_error(field_name, value)
        if error:
            logger.warning(f"Ignoring {name}: {error}")
            continue

        setattr(settings, field_name, value)

    return settings


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None
) -> AppSettings:
    """
    Load the settings file, then apply .env and environment overrides.

    Args:
        config_path: Optional custom settings path
        environ: Optional mapping used instead of os.environ

    Returns:
        Effective AppSettings
    """
    if environ is None:
        load_dotenv()

    settings = SettingsManager(config_path).load()
    return apply_env_overrides(settings, environ)
