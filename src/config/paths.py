"""Where Pedido FTP keeps its files.

Settings, logs and the upload history live in one per-user data
directory, which PEDIDO_FTP_HOME can replace (useful for containers
and tests).
"""

import os
import sys
from pathlib import Path


APP_NAME = "PedidoFTP"
HOME_ENV_VAR = "PEDIDO_FTP_HOME"

SETTINGS_FILE = "settings.json"
HISTORY_DB_FILE = "ftp_history.db"
LOG_FILE = "pedido_ftp.log"


def _platform_data_dir() -> Path:
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming")) / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / APP_NAME


def get_app_data_dir() -> Path:
    """
    Application data directory, created on first use.

    Platform-specific locations:
        - Windows: %APPDATA%/PedidoFTP
        - Linux: ~/.config/PedidoFTP
        - macOS: ~/Library/Application Support/PedidoFTP
    """
    override = os.environ.get(HOME_ENV_VAR, "").strip()
    app_dir = Path(override) if override else _platform_data_dir()
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_settings_path() -> Path:
    return get_app_data_dir() / SETTINGS_FILE


def get_history_db_path() -> Path:
    return get_app_data_dir() / HISTORY_DB_FILE


def get_log_file_path() -> Path:
    """Main log file; its folder is created by setup_logging."""
    return get_app_data_dir() / "logs" / LOG_FILE
