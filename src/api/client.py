"""Client for a deployed upload-ftp function.

Lets other services (or the command line) run test mode and uploads
against a remote Pedido FTP instance.
"""

import logging
from typing import Optional

import requests

from src.api.schema import config_to_payload
from src.ftp.connection import ConnectionConfig

logger = logging.getLogger("pedido_ftp.client")


# Request timeout in seconds; the function itself may wait up to the
# FTP timeout on each protocol step
REQUEST_TIMEOUT = 60


class FunctionClientError(Exception):
    """Base exception for upload-ftp client errors."""
    pass


class FunctionConnectionError(FunctionClientError):
    """Raised when the function endpoint cannot be reached."""
    pass


class FunctionRequestError(FunctionClientError):
    """Raised when the function rejects the request body (HTTP 400)."""

    def __init__(self, message: str, error_kind: Optional[str] = None):
        super().__init__(message)
        self.error_kind = error_kind


class UploadFunctionClient:
    """Calls the upload-ftp HTTP function."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: int = REQUEST_TIMEOUT
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the function host
            api_key: Optional key sent as apikey and bearer token
            timeout: Request timeout in seconds
        """
        self._url = f"{base_url.rstrip('/')}/upload-ftp"
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "User-Agent": "PedidoFTP/1.0",
        })
        if api_key:
            self._session.headers.update({
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            })

    def _post(self, body: dict) -> dict:
        """
        POST a request body to the function.

        Returns:
            Decoded {success, message|error} response

        Raises:
            FunctionConnectionError: If unable to connect
            FunctionRequestError: If the function rejected the request
            FunctionClientError: For unexpected responses
        """
        try:
            response = self._session.post(self._url, json=body, timeout=self._timeout)
        except requests.exceptions.Timeout:
            logger.error("upload-ftp request timed out")
            raise FunctionConnectionError("Tempo esgotado ao chamar a função de envio FTP")
        except requests.exceptions.ConnectionError as e:
            logger.error(f"upload-ftp connection error: {e}")
            raise FunctionConnectionError("Não foi possível conectar à função de envio FTP")
        except requests.exceptions.RequestException as e:
            logger.error(f"upload-ftp request error: {e}")
            raise FunctionClientError(f"Falha na requisição: {e}")

        if response.status_code == 400:
            self._raise_rejected(response)

        # 200 and 500 both carry a {success, ...} body
        if response.status_code not in (200, 500):
            raise FunctionClientError(
                f"Resposta inesperada {response.status_code}: {response.text}"
            )

        try:
            data = response.json()
        except ValueError:
            raise FunctionClientError(f"Resposta inválida: {response.text[:200]}")

        if not isinstance(data, dict) or "success" not in data:
            raise FunctionClientError(f"Resposta inválida: {data!r}")

        return data

    def _raise_rejected(self, response) -> None:
        """Turn a 400 {success: false, error} body into FunctionRequestError."""
        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and data.get("error"):
            logger.warning(f"upload-ftp rejected the request: {data['error']}")
            raise FunctionRequestError(data["error"], data.get("errorKind"))

        raise FunctionClientError(f"Resposta inesperada 400: {response.text}")

    def test_connection(self, config: ConnectionConfig) -> dict:
        """Run test mode against the given server."""
        return self._post({
            "ftpConfig": config_to_payload(config),
            "testOnly": True,
        })

    def upload(self, config: ConnectionConfig, filename: str, content: str) -> dict:
        """Upload one text file."""
        return self._post({
            "ftpConfig": config_to_payload(config),
            "filename": filename,
            "content": content,
        })

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self) -> "UploadFunctionClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
