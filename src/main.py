"""Main application entry point for Pedido FTP.

Initializes logging and settings, wires up components, and starts the
HTTP server (or runs a one-off connection test).
"""

import argparse
import sys
from typing import List, Optional

from .api.app import create_app
from .config.credentials import CredentialManager
from .config.paths import get_log_file_path
from .config.settings import SettingsManager, load_settings
from .ftp.uploader import FtpUploadService
from .history.store import FTPHistoryStore
from .utils.logging import setup_logging


class Application:
    """
    Main application controller.

    Builds the shared components once and hands them to the HTTP layer.
    """

    def __init__(self):
        """Initialize the application."""
        self._settings_manager = SettingsManager()
        self._settings = load_settings(self._settings_manager.config_path)

        # Set up logging before anything talks to the network
        self._logger = setup_logging(
            level=self._settings.log_level,
            log_file=get_log_file_path()
        )
        self._logger.info("Application starting")

        self._credential_manager = CredentialManager()
        self._service = FtpUploadService()
        self._history = FTPHistoryStore(self._settings.resolved_history_db_path())

    def run(self) -> None:
        """Serve HTTP requests until interrupted."""
        app = create_app(
            settings=self._settings,
            service=self._service,
            history=self._history,
            credentials=self._credential_manager,
            settings_manager=self._settings_manager,
        )
        self._logger.info(
            f"Listening on {self._settings.server_host}:{self._settings.server_port}"
        )
        app.run(host=self._settings.server_host, port=self._settings.server_port)

    def test_saved_connection(self) -> int:
        """
        Run test mode against the saved default FTP configuration.

        Returns:
            Exit code (0 if the connection works)
        """
        password = self._credential_manager.password_for(self._settings)
        config = self._settings.default_ftp_config(password)
        if config is None:
            print("Nenhuma configuração FTP salva", file=sys.stderr)
            return 2

        result = self._service.test_connection(config)
        if result.success:
            print(result.message)
            return 0

        print(result.error, file=sys.stderr)
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Application entry point.

    Returns:
        Exit code (0 for success)
    """
    parser = argparse.ArgumentParser(prog="pedido-ftp")
    parser.add_argument(
        "command",
        nargs="?",
        default="serve",
        choices=["serve", "test"],
        help="serve: run the HTTP server; test: check the saved FTP configuration"
    )
    args = parser.parse_args(argv)

    try:
        app = Application()
        if args.command == "test":
            return app.test_saved_connection()
        app.run()
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
