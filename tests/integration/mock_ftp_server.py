"""Mock FTP server for integration testing.

Uses pyftpdlib to run a local FTP server with an order drop folder.
Variants can refuse EPSV and advertise an unreachable PASV address to
simulate a server behind NAT.
"""

import socket
import tempfile
import threading
import time
from pathlib import Path
from typing import List, Optional, Type

from pyftpdlib.authorizers import DummyAuthorizer
from pyftpdlib.handlers import FTPHandler
from pyftpdlib.servers import FTPServer


class NoEpsvHandler(FTPHandler):
    """Handler for servers that only speak PASV."""

    def ftp_EPSV(self, line):
        self.respond("502 Command not implemented.")


class MockOrderFTPServer:
    """
    Local FTP server with a /pedidos folder.

    Usage:
        with MockOrderFTPServer() as server:
            # Connect to server.host:server.port
            # server.root_dir contains the served filesystem
            pass
    """

    DEFAULT_USER = "testuser"
    DEFAULT_PASS = "testpass"
    ORDER_FOLDER = "pedidos"

    def __init__(
        self,
        username: str = DEFAULT_USER,
        password: str = DEFAULT_PASS,
        epsv: bool = True,
        masquerade_address: Optional[str] = None,
    ):
        """
        Initialize the mock FTP server.

        Args:
            username: FTP username
            password: FTP password
            epsv: If False, EPSV is answered with 502
            masquerade_address: Address advertised in PASV replies
        """
        self.username = username
        self.password = password
        self.epsv = epsv
        self.masquerade_address = masquerade_address
        self.port = 0

        self._server: Optional[FTPServer] = None
        self._thread: Optional[threading.Thread] = None
        self._temp_dir: Optional[tempfile.TemporaryDirectory] = None
        self._root_dir: Optional[Path] = None

    @property
    def root_dir(self) -> Path:
        """Root directory of the served filesystem."""
        if self._root_dir is None:
            raise RuntimeError("Server not started")
        return self._root_dir

    @property
    def host(self) -> str:
        """Server host address."""
        return "127.0.0.1"

    def uploaded(self, filename: str, folder: str = ORDER_FOLDER) -> Path:
        """Local path of a file uploaded to the given folder."""
        return self.root_dir / folder / filename

    def _make_handler(self, authorizer: DummyAuthorizer) -> Type[FTPHandler]:
        # A fresh subclass per server keeps class attributes out of FTPHandler
        base = FTPHandler if self.epsv else NoEpsvHandler

        class Handler(base):
            pass

        Handler.authorizer = authorizer
        Handler.auth_failed_timeout = 0.1
        if self.masquerade_address:
            Handler.masquerade_address = self.masquerade_address
        return Handler

    def start(self) -> None:
        """Start the FTP server in a background thread."""
        self._temp_dir = tempfile.TemporaryDirectory(prefix="mock_order_ftp_")
        self._root_dir = Path(self._temp_dir.name)
        (self._root_dir / self.ORDER_FOLDER).mkdir()

        authorizer = DummyAuthorizer()
        authorizer.add_user(
            self.username,
            self.password,
            str(self._root_dir),
            perm="elradfmw"  # Full permissions
        )

        # Port 0 lets the OS pick a free port
        self._server = FTPServer((self.host, 0), self._make_handler(authorizer))
        self.port = self._server.address[1]

        self._thread = threading.Thread(
            target=self._server.serve_forever,
            kwargs={"timeout": 0.1, "handle_exit": False},
            daemon=True
        )
        self._thread.start()

        # Give server time to start
        time.sleep(0.2)

    def stop(self) -> None:
        """Stop the FTP server and clean up."""
        if self._server:
            self._server.close_all()

        if self._thread:
            self._thread.join(timeout=2)

        if self._temp_dir:
            self._temp_dir.cleanup()

        self._server = None
        self._thread = None
        self._temp_dir = None
        self._root_dir = None

    def __enter__(self) -> "MockOrderFTPServer":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.stop()


class ScriptedReplyServer:
    """
    One-connection TCP server that replays raw reply bytes.

    The first reply is sent as the greeting; each command line received
    afterwards is answered with the next reply. Used for servers whose
    replies pyftpdlib cannot produce, such as Latin-1 text.

    Usage:
        with ScriptedReplyServer([b"220 Ready\r\n", ...]) as server:
            # Connect to server.host:server.port
            # server.commands lists the lines received
            pass
    """

    def __init__(self, replies: List[bytes]):
        self.replies = replies
        self.commands: List[str] = []
        self.port = 0

        self._sock: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def host(self) -> str:
        return "127.0.0.1"

    def _serve(self) -> None:
        try:
            conn, _ = self._sock.accept()
        except OSError:
            return

        with conn, conn.makefile("rb") as reader:
            conn.sendall(self.replies[0])
            for reply in self.replies[1:]:
                line = reader.readline()
                if not line:
                    break
                self.commands.append(line.rstrip(b"\r\n").decode("utf-8", "replace"))
                conn.sendall(reply)

    def start(self) -> None:
        self._sock = socket.create_server((self.host, 0))
        self._sock.settimeout(5)
        self.port = self._sock.getsockname()[1]

        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._thread:
            self._thread.join(timeout=2)
        if self._sock:
            self._sock.close()

        self._sock = None
        self._thread = None

    def __enter__(self) -> "ScriptedReplyServer":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
