"""Control channel reply parsing for Pedido FTP.

Provides the FtpReply dataclass and helpers that extract the data
port from EPSV (229) and PASV (227) replies.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from src.ftp.exceptions import FTPTransportError


# First line of a reply: three-digit code, optional separator, text
REPLY_PATTERN = re.compile(r"^(\d{3})(?:[ -](.*))?$")

# RFC 2428: (<d><d><d>port<d>) where <d> is any single delimiter, usually '|'
EPSV_PATTERN = re.compile(r"\(([^\w\s])\1\1(\d+)\1\)")

# h1,h2,h3,h4,p1,p2 with or without surrounding parentheses
PASV_PATTERN = re.compile(r"(\d+),(\d+),(\d+),(\d+),(\d+),(\d+)")


@dataclass(frozen=True)
class FtpReply:
    """A parsed control channel reply."""
    code: int
    text: str

    @classmethod
    def parse(cls, raw: str) -> "FtpReply":
        """
        Parse a raw reply as returned by the control channel.

        Multi-line replies keep their continuation lines in ``text``.

        Args:
            raw: Reply text, lines separated by newlines

        Returns:
            FtpReply instance

        Raises:
            FTPTransportError: If the reply has no three-digit code
        """
        raw = (raw or "").strip()
        first_line, _, rest = raw.partition("\n")
        match = REPLY_PATTERN.match(first_line.rstrip("\r"))
        if not match:
            raise FTPTransportError(
                "leitura da resposta",
                ValueError(f"resposta inválida do servidor: {raw[:80]!r}")
            )

        text = (match.group(2) or "").strip()
        if rest:
            text = f"{text}\n{rest}" if text else rest
        return cls(code=int(match.group(1)), text=text)

    @property
    def category(self) -> int:
        """Leading digit of the reply code."""
        return self.code // 100

    @property
    def is_preliminary(self) -> bool:
        return self.category == 1

    @property
    def is_success(self) -> bool:
        return self.category == 2

    @property
    def is_intermediate(self) -> bool:
        return self.category == 3

    @property
    def is_failure(self) -> bool:
        """True for transient (4xx) and permanent (5xx) failures."""
        return self.category in (4, 5)

    def epsv_port(self) -> Optional[int]:
        """
        Extract the data port from an EPSV reply.

        Returns:
            Port number, or None if this is not a well-formed 229 reply
        """
        if self.code != 229:
            return None

        match = EPSV_PATTERN.search(self.text)
        if not match:
            return None

        port = int(match.group(2))
        if not 1 <= port <= 65535:
            return None
        return port

    def pasv_address(self) -> Optional[Tuple[str, int]]:
        """
        Extract the advertised host and data port from a PASV reply.

        Returns:
            (host, port) tuple, or None if this is not a well-formed 227 reply
        """
        if self.code != 227:
            return None

        match = PASV_PATTERN.search(self.text)
        if not match:
            return None

        numbers = [int(n) for n in match.groups()]
        if any(n > 255 for n in numbers):
            return None

        host = ".".join(str(n) for n in numbers[:4])
        port = numbers[4] * 256 + numbers[5]
        if port == 0:
            return None
        return host, port

    def __str__(self) -> str:
        first_line = self.text.split("\n", 1)[0]
        return f"{self.code} {first_line}".rstrip()
