"""FTP-specific exceptions for Pedido FTP.

Custom exception hierarchy for FTP operations to provide
clear error handling and user-friendly messages.
"""

from enum import Enum


class ErrorKind(Enum):
    """Stable, machine-readable failure classification."""
    CONNECTION = "connection_failure"
    AUTHENTICATION = "authentication_failure"
    DIRECTORY = "directory_failure"
    PASSIVE_NEGOTIATION = "passive_negotiation_failure"
    DATA_CONNECTION = "data_connection_failure"
    TRANSFER_INITIATION = "transfer_initiation_failure"
    TRANSPORT = "transport_error"


class FTPError(Exception):
    """Base exception for all FTP-related errors."""

    kind = ErrorKind.TRANSPORT

    # True when the control channel is still in sync after the failure,
    # so a closing QUIT can be attempted.
    channel_intact = False

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        detail = str(self.original_error) if self.original_error else ""
        if detail:
            return f"{self.message}: {detail}"
        return self.message


class FTPConnectionError(FTPError):
    """Failed to establish FTP connection."""

    kind = ErrorKind.CONNECTION

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        message = f"Não foi possível conectar a {host}:{port}"
        super().__init__(message, original_error)


class FTPReplyError(FTPError):
    """The server answered a command with an unacceptable reply."""

    channel_intact = True

    def __init__(self, message: str, reply=None):
        super().__init__(message)
        self.reply = reply

    def __str__(self) -> str:
        if self.reply is not None:
            return f"{self.message} ({self.reply})"
        return self.message


class FTPAuthenticationError(FTPReplyError):
    """FTP authentication (login) failed."""

    kind = ErrorKind.AUTHENTICATION

    def __init__(self, username: str, reply=None):
        self.username = username
        message = "Login falhou: usuário ou senha incorretos"
        super().__init__(message, reply)


class FTPDirectoryError(FTPReplyError):
    """Remote folder could not be entered."""

    kind = ErrorKind.DIRECTORY

    def __init__(self, path: str, reply=None):
        self.path = path
        message = f"Pasta '{path}' não encontrada no servidor"
        super().__init__(message, reply)


class FTPPassiveModeError(FTPReplyError):
    """Neither EPSV nor PASV yielded a usable data port."""

    kind = ErrorKind.PASSIVE_NEGOTIATION

    def __init__(self, reply=None):
        message = "O servidor não abriu o modo passivo (EPSV/PASV)"
        super().__init__(message, reply)


class FTPTransferError(FTPReplyError):
    """Server refused to start the STOR transfer."""

    kind = ErrorKind.TRANSFER_INITIATION

    def __init__(self, file_name: str, remote_path: str, reply=None):
        self.file_name = file_name
        self.remote_path = remote_path
        message = f"O servidor recusou o envio de '{file_name}'"
        super().__init__(message, reply)


class FTPDataConnectionError(FTPError):
    """Failed to open the passive data connection."""

    kind = ErrorKind.DATA_CONNECTION
    channel_intact = True

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        message = f"Não foi possível abrir a conexão de dados em {host}:{port}"
        super().__init__(message, original_error)


class FTPTransportError(FTPError):
    """I/O failure on an already established connection."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, operation: str, original_error: Exception = None):
        self.operation = operation
        message = f"Erro de comunicação durante {operation}"
        super().__init__(message, original_error)


class FTPTimeoutError(FTPTransportError):
    """FTP operation timed out."""

    def __init__(self, operation: str = "Operação", timeout: int = 30):
        self.timeout = timeout
        super().__init__(operation)
        self.message = f"{operation}: tempo esgotado após {timeout} segundos"


class FTPNotConnectedError(FTPError):
    """Operation attempted without active FTP connection."""

    def __init__(self, operation: str = "Operação"):
        message = f"{operation} requer uma conexão FTP ativa"
        super().__init__(message)
