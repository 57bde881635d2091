"""Unit tests for UploadFunctionClient.

Tests request bodies, headers and response handling with a mocked
requests session.
"""

import pytest
import requests
from unittest.mock import Mock, patch

from src.api.client import (
    FunctionClientError,
    FunctionConnectionError,
    FunctionRequestError,
    UploadFunctionClient,
)
from src.ftp.connection import ConnectionConfig


@pytest.fixture
def client():
    return UploadFunctionClient("https://functions.example.com/", api_key="anon-key")


@pytest.fixture
def config():
    return ConnectionConfig(
        host="ftp.example.com",
        user="loja",
        password="segredo",
        remote_folder="/pedidos"
    )


def make_response(status_code=200, json_data=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    if json_data is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = json_data
    return response


class TestUploadFunctionClient:
    """Tests for UploadFunctionClient."""

    def test_headers(self, client):
        """Test the api key is sent both ways."""
        headers = client._session.headers
        assert headers["apikey"] == "anon-key"
        assert headers["Authorization"] == "Bearer anon-key"
        assert headers["Content-Type"] == "application/json"

    def test_no_api_key(self):
        """Test that no auth headers are sent without a key."""
        client = UploadFunctionClient("https://functions.example.com")
        assert "apikey" not in client._session.headers

    def test_test_connection_body(self, client, config):
        """Test the testOnly request body."""
        with patch.object(client._session, "post") as mock_post:
            mock_post.return_value = make_response(
                json_data={"success": True, "message": "ok"}
            )

            result = client.test_connection(config)

        assert result == {"success": True, "message": "ok"}
        url = mock_post.call_args.args[0]
        body = mock_post.call_args.kwargs["json"]
        assert url == "https://functions.example.com/upload-ftp"
        assert body["testOnly"] is True
        assert body["ftpConfig"]["folder"] == "/pedidos"
        assert "filename" not in body

    def test_upload_body(self, client, config):
        """Test the upload request body."""
        with patch.object(client._session, "post") as mock_post:
            mock_post.return_value = make_response(
                json_data={"success": True, "message": "ok"}
            )

            client.upload(config, "pedido_000001.xml", "<pedido/>")

        body = mock_post.call_args.kwargs["json"]
        assert body["filename"] == "pedido_000001.xml"
        assert body["content"] == "<pedido/>"
        assert body["ftpConfig"]["password"] == "segredo"

    def test_failure_body_is_returned(self, client, config):
        """Test that a 500 with a failure body is a normal result."""
        with patch.object(client._session, "post") as mock_post:
            mock_post.return_value = make_response(
                status_code=500,
                json_data={"success": False, "error": "Login falhou", "errorKind": "authentication_failure"}
            )

            result = client.test_connection(config)

        assert result["success"] is False
        assert result["errorKind"] == "authentication_failure"

    def test_timeout(self, client, config):
        """Test request timeout handling."""
        with patch.object(client._session, "post") as mock_post:
            mock_post.side_effect = requests.exceptions.Timeout()

            with pytest.raises(FunctionConnectionError):
                client.test_connection(config)

    def test_connection_error(self, client, config):
        """Test unreachable endpoint handling."""
        with patch.object(client._session, "post") as mock_post:
            mock_post.side_effect = requests.exceptions.ConnectionError()

            with pytest.raises(FunctionConnectionError):
                client.test_connection(config)

    def test_unexpected_status(self, client, config):
        """Test statuses other than 200 and 500."""
        with patch.object(client._session, "post") as mock_post:
            mock_post.return_value = make_response(status_code=404, text="Not Found")

            with pytest.raises(FunctionClientError, match="404"):
                client.test_connection(config)

    def test_rejected_request(self, client, config):
        """Test a 400 body surfaces the function's error message."""
        with patch.object(client._session, "post") as mock_post:
            mock_post.return_value = make_response(status_code=400, json_data={
                "success": False,
                "error": "Porta deve estar entre 1 e 65535, recebido 0",
                "errorKind": "invalid_request",
            })

            with pytest.raises(FunctionRequestError) as exc_info:
                client.test_connection(config)

        assert str(exc_info.value) == "Porta deve estar entre 1 e 65535, recebido 0"
        assert exc_info.value.error_kind == "invalid_request"

    def test_rejected_request_without_body(self, client, config):
        """Test a 400 without a JSON error body."""
        with patch.object(client._session, "post") as mock_post:
            mock_post.return_value = make_response(status_code=400, text="Bad Request")

            with pytest.raises(FunctionClientError, match="400") as exc_info:
                client.test_connection(config)

        assert not isinstance(exc_info.value, FunctionRequestError)

    def test_invalid_json(self, client, config):
        """Test a body that is not JSON."""
        with patch.object(client._session, "post") as mock_post:
            mock_post.return_value = make_response(text="<html>")

            with pytest.raises(FunctionClientError):
                client.test_connection(config)

    def test_missing_success_field(self, client, config):
        """Test a JSON body without the success flag."""
        with patch.object(client._session, "post") as mock_post:
            mock_post.return_value = make_response(json_data={"ok": True})

            with pytest.raises(FunctionClientError):
                client.test_connection(config)

    def test_context_manager_closes_session(self):
        """Test the session is closed on exit."""
        client = UploadFunctionClient("https://functions.example.com")
        with patch.object(client._session, "close") as mock_close:
            with client:
                pass
        mock_close.assert_called_once()
