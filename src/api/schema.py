"""Request validation for the upload-ftp function.

Turns the untyped JSON body into a ConnectionTestRequest or an
UploadRequest before anything reaches the FTP engine.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from src.ftp.connection import ConnectionConfig
from src.ftp.uploader import TransferRequest
from src.utils.validators import (
    validate_filename,
    validate_ftp_path,
    validate_host,
    validate_no_line_breaks,
    validate_port,
)


INVALID_REQUEST = "invalid_request"

DEFAULT_FTP_PORT = 21


class RequestValidationError(ValueError):
    """The request body is malformed or incomplete."""

    kind = INVALID_REQUEST


@dataclass(frozen=True)
class ConnectionTestRequest:
    """Verify host, credentials and folder without transferring a file."""
    config: ConnectionConfig

    @property
    def transfer(self) -> None:
        return None


@dataclass(frozen=True)
class UploadRequest:
    """Upload one file to the configured folder."""
    config: ConnectionConfig
    transfer: TransferRequest


FunctionRequest = Union[ConnectionTestRequest, UploadRequest]


def _check(result: Tuple[bool, Optional[str]]) -> None:
    is_valid, error = result
    if not is_valid:
        raise RequestValidationError(error)


def parse_ftp_config(data: Any, timeout: int = 30) -> ConnectionConfig:
    """
    Validate an ftpConfig object.

    Args:
        data: Decoded JSON value of ftpConfig
        timeout: Socket timeout to apply to the connection

    Returns:
        ConnectionConfig

    Raises:
        RequestValidationError: If any field is invalid
    """
    if not isinstance(data, dict):
        raise RequestValidationError("Configuração FTP ausente ou inválida")

    host = data.get("host")
    _check(validate_host(host))
    host = host.strip()

    port = data.get("port", DEFAULT_FTP_PORT)
    if port is None or port == "":
        port = DEFAULT_FTP_PORT
    _check(validate_port(port))
    port = int(port)

    user = data.get("user")
    if not isinstance(user, str) or not user.strip():
        raise RequestValidationError("Usuário é obrigatório")
    _check(validate_no_line_breaks(user, "Usuário"))

    password = data.get("password", "")
    if password is None:
        password = ""
    if not isinstance(password, str):
        raise RequestValidationError("Senha inválida")
    _check(validate_no_line_breaks(password, "Senha"))

    folder = data.get("folder") or "/"
    if not isinstance(folder, str):
        raise RequestValidationError("Pasta destino inválida")
    _check(validate_ftp_path(folder))
    folder = folder.strip() or "/"
    if len(folder) > 1:
        folder = folder.rstrip("/")

    try:
        return ConnectionConfig(
            host=host,
            port=port,
            user=user.strip(),
            password=password,
            remote_folder=folder,
            timeout=timeout
        )
    except ValueError as e:
        raise RequestValidationError(str(e))


def parse_request(body: Any, timeout: int = 30) -> FunctionRequest:
    """
    Validate a full upload-ftp request body.

    Args:
        body: Decoded JSON body
        timeout: Socket timeout to apply to the connection

    Returns:
        ConnectionTestRequest when testOnly is true, otherwise UploadRequest

    Raises:
        RequestValidationError: If the body is invalid
    """
    if not isinstance(body, dict):
        raise RequestValidationError("Corpo da requisição deve ser um objeto JSON")

    config = parse_ftp_config(body.get("ftpConfig"), timeout=timeout)

    if body.get("testOnly") is True:
        return ConnectionTestRequest(config=config)

    filename = body.get("filename")
    _check(validate_filename(filename))

    content = body.get("content", "")
    if content is None:
        content = ""
    if not isinstance(content, str):
        raise RequestValidationError("Conteúdo do arquivo deve ser texto")

    transfer = TransferRequest(
        filename=filename.strip(),
        payload=content.encode("utf-8")
    )
    return UploadRequest(config=config, transfer=transfer)


def config_to_payload(config: ConnectionConfig) -> dict:
    """Inverse of parse_ftp_config: the ftpConfig JSON object."""
    return {
        "host": config.host,
        "user": config.user,
        "password": config.password,
        "port": config.port,
        "folder": config.remote_folder,
    }
