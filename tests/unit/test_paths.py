"""Unit tests for application data paths."""

from unittest.mock import patch

from src.config.paths import (
    get_app_data_dir,
    get_history_db_path,
    get_log_file_path,
    get_settings_path,
)


class TestPaths:
    """Tests for path discovery."""

    def test_home_override(self, tmp_path):
        """Test PEDIDO_FTP_HOME replaces the platform directory."""
        home = tmp_path / "pedido"
        with patch.dict("os.environ", {"PEDIDO_FTP_HOME": str(home)}):
            assert get_app_data_dir() == home
            assert get_settings_path() == home / "settings.json"
            assert get_history_db_path() == home / "ftp_history.db"
            assert get_log_file_path() == home / "logs" / "pedido_ftp.log"

        assert home.is_dir()

    def test_linux_default(self, tmp_path):
        """Test the XDG location on Linux."""
        env = {"PEDIDO_FTP_HOME": "", "XDG_CONFIG_HOME": str(tmp_path)}
        with patch.dict("os.environ", env), patch("src.config.paths.sys.platform", "linux"):
            assert get_app_data_dir() == tmp_path / "PedidoFTP"
