"""Pytest configuration and shared fixtures for Pedido FTP tests."""

import pytest
from pathlib import Path
from typing import Generator, List
from unittest.mock import MagicMock, patch

from src.ftp.connection import ConnectionConfig
from src.history.store import FTPHistoryStore


# Test constants
TEST_FTP_HOST = "ftp.example.com"
TEST_FTP_PORT = 21
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "testpass"
TEST_FTP_FOLDER = "/pedidos"


def sent_commands(mock_ftp: MagicMock) -> List[str]:
    """Command lines written to a mocked control channel, in order."""
    return [c.args[0] for c in mock_ftp.putcmd.call_args_list]


@pytest.fixture
def ftp_config() -> ConnectionConfig:
    """Provide an FTP configuration for tests."""
    return ConnectionConfig(
        host=TEST_FTP_HOST,
        port=TEST_FTP_PORT,
        user=TEST_FTP_USER,
        password=TEST_FTP_PASS,
        remote_folder=TEST_FTP_FOLDER,
    )


@pytest.fixture
def mock_ftp() -> Generator[MagicMock, None, None]:
    """
    Patch the ftplib client class inside the connection module.

    Script replies with ``mock_ftp.getmultiline.side_effect = [...]``.
    """
    with patch("src.ftp.connection.TolerantFTP") as mock_ftp_class:
        ftp = MagicMock()
        ftp.connect.return_value = "220 Service ready"
        mock_ftp_class.return_value = ftp
        yield ftp


@pytest.fixture
def mock_create_connection() -> Generator[MagicMock, None, None]:
    """Patch the data connection factory; return_value is the data socket."""
    with patch("src.ftp.connection.socket.create_connection") as create:
        create.return_value = MagicMock()
        yield create


@pytest.fixture
def history_store(tmp_path: Path) -> FTPHistoryStore:
    """Provide an upload history store in a temporary database."""
    return FTPHistoryStore(tmp_path / "history.db")


@pytest.fixture
def temp_settings_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Provide a temporary settings file path for testing."""
    settings_file = tmp_path / "settings.json"
    yield settings_file
    # Cleanup handled by tmp_path fixture


@pytest.fixture
def sample_order_data() -> dict:
    """Order JSON as sent by the front end."""
    return {
        "number": 123,
        "date": "2024-01-15T10:30:00",
        "vendorId": "7",
        "vendorName": "Ana & Cia",
        "items": [
            {"code": "P001", "description": "Caneta <azul>", "quantity": 2, "unitPrice": 1.5},
            {"code": "P002", "description": "Caderno", "quantity": 1, "unitPrice": 12.9},
        ],
    }
