"""FTP upload service for Pedido FTP.

Runs one connectivity test or one single-file upload per call, over a
fresh control connection that is always closed before returning.
"""

from dataclasses import dataclass
from typing import Optional
import logging
import time

from src.ftp.connection import (
    ConnectionConfig,
    ControlSession,
    DataSession,
    SessionState,
)
from src.ftp.exceptions import (
    ErrorKind,
    FTPAuthenticationError,
    FTPDirectoryError,
    FTPError,
    FTPPassiveModeError,
    FTPTransferError,
)

logger = logging.getLogger("pedido_ftp.uploader")


# STOR replies that mean the transfer is starting
TRANSFER_START_CODES = (125, 150)


@dataclass
class TransferRequest:
    """A single in-memory file to upload."""
    filename: str
    payload: bytes

    def __post_init__(self):
        """Validate the request after initialization."""
        if not self.filename:
            raise ValueError("Filename is required")
        if any(c in self.filename for c in "/\\\r\n"):
            raise ValueError(f"Invalid filename: {self.filename!r}")
        if isinstance(self.payload, str):
            self.payload = self.payload.encode("utf-8")


@dataclass
class UploadResult:
    """Result of one test or upload invocation."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    bytes_transferred: int = 0
    duration_seconds: float = 0.0

    def to_dict(self) -> dict:
        """Response body for the HTTP function."""
        if self.success:
            return {"success": True, "message": self.message}
        data = {"success": False, "error": self.error}
        if self.error_kind is not None:
            data["errorKind"] = self.error_kind.value
        return data


class FtpUploadService:
    """
    Tests FTP connectivity or uploads one file.

    The service keeps no state between calls; every call opens its own
    control connection, so calls may run concurrently.
    """

    def execute(
        self,
        config: ConnectionConfig,
        transfer: Optional[TransferRequest] = None
    ) -> UploadResult:
        """
        Run test mode (transfer is None) or upload mode.

        Args:
            config: Target server, credentials and remote folder
            transfer: File to upload, or None to only test the connection

        Returns:
            UploadResult with success/failure status; FTP failures are
            reported in the result, never raised
        """
        mode = "test" if transfer is None else "upload"
        logger.info(
            f"FTP {mode} to {config.host}:{config.port}{config.remote_folder}"
            + (f"/{transfer.filename}" if transfer else "")
        )

        start_time = time.time()
        bytes_sent = 0
        session = ControlSession(config)

        try:
            with session:
                session.open()
                self._login(session, config)
                self._change_directory(session, config)

                if transfer is None:
                    session.quit()
                    session.advance(SessionState.TEST_DONE)
                    message = f"Conexão estabelecida com {config.host}"
                else:
                    bytes_sent = self._upload(session, config, transfer)
                    session.quit()
                    message = (
                        f"Arquivo {transfer.filename} enviado com sucesso "
                        f"para {config.location}"
                    )

        except FTPError as e:
            duration = time.time() - start_time
            logger.error(f"FTP {mode} failed ({e.kind.value}): {e}")
            return UploadResult(
                success=False,
                error=str(e),
                error_kind=e.kind,
                bytes_transferred=bytes_sent,
                duration_seconds=duration
            )

        duration = time.time() - start_time
        logger.info(f"FTP {mode} succeeded in {duration:.2f}s")
        return UploadResult(
            success=True,
            message=message,
            bytes_transferred=bytes_sent,
            duration_seconds=duration
        )

    def test_connection(self, config: ConnectionConfig) -> UploadResult:
        """Shortcut for test mode."""
        return self.execute(config, None)

    def _login(self, session: ControlSession, config: ConnectionConfig) -> None:
        """
        Send USER and PASS.

        Raises:
            FTPAuthenticationError: If PASS is not answered with 230
        """
        # Servers differ on USER replies (331, 230, 332...), only PASS decides
        session.command(f"USER {config.user}")

        reply = session.command(f"PASS {config.password}")
        if reply.code != 230:
            raise FTPAuthenticationError(config.user, reply)

        session.advance(SessionState.AUTHENTICATED)

    def _change_directory(self, session: ControlSession, config: ConnectionConfig) -> None:
        """
        Enter the remote folder unless it is the root.

        Raises:
            FTPDirectoryError: If CWD is not answered with 250
        """
        if not config.changes_directory:
            return

        reply = session.command(f"CWD {config.remote_folder}")
        if reply.code != 250:
            raise FTPDirectoryError(config.remote_folder, reply)

        session.advance(SessionState.DIRECTORY_CHANGED)

    def _negotiate_passive(self, session: ControlSession, config: ConnectionConfig) -> int:
        """
        Obtain a data port, trying EPSV before PASV.

        The data connection always goes to the control channel host;
        addresses advertised by the server are ignored because NATed
        servers routinely report ones the client cannot reach.

        Returns:
            Data port on config.host

        Raises:
            FTPPassiveModeError: If neither command yields a port
        """
        reply = session.command("EPSV")
        port = reply.epsv_port()
        if port is not None:
            return port

        if reply.code == 229:
            logger.warning(f"Unparseable EPSV reply, falling back to PASV: {reply}")

        reply = session.command("PASV")
        address = reply.pasv_address()
        if address is None:
            raise FTPPassiveModeError(reply)

        advertised_host, port = address
        if advertised_host != config.host:
            logger.debug(
                f"Ignoring PASV host {advertised_host}, using {config.host}"
            )
        return port

    def _upload(
        self,
        session: ControlSession,
        config: ConnectionConfig,
        transfer: TransferRequest
    ) -> int:
        """
        Transfer the payload over a passive data connection.

        Returns:
            Number of bytes written to the data connection

        Raises:
            FTPPassiveModeError: If no data port could be negotiated
            FTPDataConnectionError: If the data connection fails
            FTPTransferError: If STOR is not answered with 125 or 150
        """
        reply = session.command("TYPE I")
        if not reply.is_success:
            logger.warning(f"TYPE I not accepted: {reply}")

        port = self._negotiate_passive(session, config)
        session.advance(SessionState.PASSIVE_NEGOTIATED)

        with DataSession(config.host, port, config.timeout) as data:
            data.open()
            session.advance(SessionState.DATA_CONNECTED)

            reply = session.command(f"STOR {transfer.filename}")
            if reply.code not in TRANSFER_START_CODES:
                raise FTPTransferError(transfer.filename, config.remote_folder, reply)

            bytes_sent = data.write(transfer.payload)
            data.close()

        reply = session.read_reply("confirmação da transferência")
        if not reply.is_success:
            logger.warning(f"Transfer completion reply: {reply}")

        session.advance(SessionState.UPLOADED)
        logger.debug(f"Sent {bytes_sent} bytes as {transfer.filename}")
        return bytes_sent
