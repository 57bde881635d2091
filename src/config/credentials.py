"""Keyring storage for the saved FTP password.

The default FTP target lives in the settings file; its password is kept
in the system keyring (Windows Credential Manager, macOS Keychain, Linux
Secret Service) under one account per host and user.
"""

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger("pedido_ftp.credentials")


class CredentialManager:
    """Reads and writes FTP passwords in the system keyring."""

    SERVICE_NAME = "pedido-ftp"

    def _make_key(self, host: str, username: str) -> str:
        """Keyring account name for a host and user."""
        return f"{host}:{username}"

    def save_password(self, host: str, username: str, password: str) -> bool:
        """
        Store the password for an FTP account.

        Returns:
            True if the keyring accepted it
        """
        try:
            keyring.set_password(self.SERVICE_NAME, self._make_key(host, username), password)
            return True
        except KeyringError as e:
            logger.warning(f"Keyring rejected password for {username}@{host}: {e}")
            return False

    def get_password(self, host: str, username: str) -> Optional[str]:
        """
        Look up the password for an FTP account.

        Returns:
            Password, or None if missing or the keyring is unavailable
        """
        try:
            return keyring.get_password(self.SERVICE_NAME, self._make_key(host, username))
        except KeyringError as e:
            logger.warning(f"Keyring lookup failed for {username}@{host}: {e}")
            return None

    def delete_password(self, host: str, username: str) -> bool:
        try:
            keyring.delete_password(self.SERVICE_NAME, self._make_key(host, username))
            return True
        except KeyringError as e:
            logger.warning(f"Keyring delete failed for {username}@{host}: {e}")
            return False

    def has_password(self, host: str, username: str) -> bool:
        return self.get_password(host, username) is not None

    def password_for(self, settings) -> str:
        """
        Password of the saved default FTP target.

        Args:
            settings: AppSettings holding ftp_host and ftp_user

        Returns:
            Stored password, or "" when nothing is saved
        """
        if not settings.has_default_ftp:
            return ""
        return self.get_password(settings.ftp_host, settings.ftp_user) or ""
