"""FTP connection management for Pedido FTP.

Provides ConnectionConfig dataclass, SessionState enum, and the
ControlSession / DataSession classes that own the control and data
sockets for the lifetime of a single request.
"""

from dataclasses import dataclass
from enum import Enum
from ftplib import CRLF, FTP, Error as FTPLibError
from typing import Optional
import logging
import socket

from src.ftp.exceptions import (
    FTPConnectionError,
    FTPDataConnectionError,
    FTPError,
    FTPNotConnectedError,
    FTPTimeoutError,
    FTPTransportError,
)
from src.ftp.reply import FtpReply

logger = logging.getLogger("pedido_ftp.ftp")


class SessionState(Enum):
    """Protocol state of one upload or test invocation."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    DIRECTORY_CHANGED = "directory_changed"
    TEST_DONE = "test_done"
    PASSIVE_NEGOTIATED = "passive_negotiated"
    DATA_CONNECTED = "data_connected"
    UPLOADED = "uploaded"
    CLOSED = "closed"


@dataclass
class ConnectionConfig:
    """FTP connection configuration."""
    host: str
    port: int = 21
    user: str = "anonymous"
    password: str = ""
    remote_folder: str = "/"
    timeout: int = 30

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.host:
            raise ValueError("Host is required")
        if not self.user:
            raise ValueError("User is required")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {self.port}")
        if not 5 <= self.timeout <= 300:
            raise ValueError(f"Timeout must be between 5 and 300, got {self.timeout}")
        if not self.remote_folder:
            self.remote_folder = "/"
        if not self.remote_folder.startswith("/"):
            raise ValueError(f"Remote folder must be absolute, got {self.remote_folder!r}")
        for name in ("host", "user", "password", "remote_folder"):
            value = getattr(self, name)
            if "\r" in value or "\n" in value:
                raise ValueError(f"{name} must not contain line breaks")

    @property
    def changes_directory(self) -> bool:
        """True if a CWD is needed to reach the remote folder."""
        return self.remote_folder != "/"

    @property
    def location(self) -> str:
        """Human-readable HOST/FOLDER target."""
        return f"{self.host}{self.remote_folder}"


def decode_reply_line(line: str) -> str:
    """
    Re-decode a reply line read as Latin-1.

    UTF-8 is preferred; lines that are not valid UTF-8 (common on
    Latin-1 servers) keep their Latin-1 reading.
    """
    raw = line.encode("latin-1")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return line


class TolerantFTP(FTP):
    """
    ftplib.FTP that never fails to decode a server reply.

    The control file is read as Latin-1, which accepts any byte, and each
    line is then re-decoded by decode_reply_line. Commands go out as UTF-8.
    """

    def __init__(self):
        super().__init__(encoding="latin-1")

    def getline(self) -> str:
        return decode_reply_line(super().getline())

    def putline(self, line: str) -> None:
        if "\r" in line or "\n" in line:
            raise ValueError("an illegal newline character should not be contained")
        self.sock.sendall((line + CRLF).encode("utf-8"))


def mask_command(line: str) -> str:
    """Hide the password of a PASS command before it reaches a log."""
    if line[:5].upper() == "PASS ":
        return "PASS ****"
    return line


class ControlSession:
    """
    Control connection scoped to one invocation.

    Each command is followed by a blocking read of its reply; commands
    are never pipelined. Use as a context manager so the socket is
    released on every exit path.
    """

    def __init__(self, config: ConnectionConfig):
        """
        Initialize the session.

        Args:
            config: Target server configuration
        """
        self._config = config
        self._ftp: Optional[TolerantFTP] = None
        self._state = SessionState.DISCONNECTED
        self._quit_sent = False

    @property
    def state(self) -> SessionState:
        """Current protocol state."""
        return self._state

    @property
    def is_open(self) -> bool:
        """True while the control socket is held."""
        return self._ftp is not None

    def advance(self, state: SessionState) -> None:
        """Record a protocol state transition."""
        logger.debug(f"Session state: {self._state.value} -> {state.value}")
        self._state = state

    def open(self) -> FtpReply:
        """
        Connect to the server and read its greeting.

        Returns:
            The unsolicited greeting reply

        Raises:
            FTPConnectionError: If the TCP connection fails or the server
                refuses service in its greeting
        """
        config = self._config
        self._ftp = TolerantFTP()
        self._ftp.set_debuglevel(0)

        try:
            welcome = self._ftp.connect(
                host=config.host,
                port=config.port,
                timeout=config.timeout
            )
        except (OSError, EOFError, FTPLibError) as e:
            raise FTPConnectionError(config.host, config.port, e)

        greeting = FtpReply.parse(welcome)
        logger.debug(f"< {greeting}")
        self.advance(SessionState.CONNECTED)
        return greeting

    def _require(self, operation: str) -> TolerantFTP:
        if self._ftp is None:
            raise FTPNotConnectedError(operation)
        return self._ftp

    def command(self, line: str) -> FtpReply:
        """
        Send one command and read its complete reply.

        Args:
            line: Command line without the trailing CRLF

        Returns:
            Parsed reply; negative replies are returned, not raised

        Raises:
            FTPTimeoutError: If the server does not answer in time
            FTPTransportError: On any socket failure
        """
        verb = line.split(" ", 1)[0].upper()
        ftp = self._require(verb)

        logger.debug(f"> {mask_command(line)}")
        try:
            ftp.putcmd(line)
            raw = ftp.getmultiline()
        except socket.timeout:
            raise FTPTimeoutError(verb, self._config.timeout)
        except (OSError, EOFError, FTPLibError) as e:
            raise FTPTransportError(verb, e)

        reply = FtpReply.parse(raw)
        logger.debug(f"< {reply}")
        return reply

    def read_reply(self, operation: str = "leitura da resposta") -> FtpReply:
        """
        Read a reply that was not solicited by a new command.

        Used for the transfer-complete notification after STOR.
        """
        ftp = self._require(operation)

        try:
            raw = ftp.getmultiline()
        except socket.timeout:
            raise FTPTimeoutError(operation, self._config.timeout)
        except (OSError, EOFError, FTPLibError) as e:
            raise FTPTransportError(operation, e)

        reply = FtpReply.parse(raw)
        logger.debug(f"< {reply}")
        return reply

    def quit(self) -> FtpReply:
        """Send QUIT; the reply is not checked."""
        self._quit_sent = True
        return self.command("QUIT")

    def close(self, send_quit: bool = False) -> None:
        """
        Release the control socket.

        Args:
            send_quit: Attempt a QUIT first if none was sent yet
        """
        if self._ftp is None:
            return

        if send_quit and not self._quit_sent:
            try:
                self.quit()
            except FTPError as e:
                logger.debug(f"QUIT during cleanup failed: {e}")

        try:
            self._ftp.close()
        except OSError as e:
            logger.debug(f"Closing control connection failed: {e}")

        self._ftp = None
        self.advance(SessionState.CLOSED)

    def __enter__(self) -> "ControlSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close(send_quit=getattr(exc_val, "channel_intact", False))


class DataSession:
    """Passive-mode data connection used for exactly one transfer."""

    def __init__(self, host: str, port: int, timeout: int = 30):
        """
        Initialize the data session.

        Args:
            host: Host to connect to (always the control channel host)
            port: Negotiated data port
            timeout: Socket timeout in seconds
        """
        self._host = host
        self._port = port
        self._timeout = timeout
        self._sock: Optional[socket.socket] = None

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def open(self) -> None:
        """
        Connect to the negotiated data port.

        Raises:
            FTPDataConnectionError: If the connection fails
        """
        try:
            self._sock = socket.create_connection(
                (self._host, self._port),
                timeout=self._timeout
            )
        except OSError as e:
            raise FTPDataConnectionError(self._host, self._port, e)

        logger.debug(f"Data connection open to {self._host}:{self._port}")

    def write(self, payload: bytes) -> int:
        """
        Write the whole payload in one blocking call.

        Returns:
            Number of bytes written

        Raises:
            FTPTimeoutError: If the write stalls past the timeout
            FTPTransportError: On any socket failure
        """
        if self._sock is None:
            raise FTPNotConnectedError("Transferência de dados")

        try:
            self._sock.sendall(payload)
        except socket.timeout:
            raise FTPTimeoutError("transferência de dados", self._timeout)
        except OSError as e:
            raise FTPTransportError("transferência de dados", e)

        return len(payload)

    def close(self) -> None:
        """Close the data connection, ignoring socket errors."""
        if self._sock is None:
            return

        try:
            self._sock.close()
        except OSError as e:
            logger.debug(f"Closing data connection failed: {e}")

        self._sock = None

    def __enter__(self) -> "DataSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
