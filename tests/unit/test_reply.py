"""Unit tests for FtpReply parsing and passive-mode tuple extraction."""

import pytest

from src.ftp.exceptions import FTPTransportError
from src.ftp.reply import FtpReply


class TestFtpReplyParse:
    """Tests for FtpReply.parse."""

    def test_single_line(self):
        """Test a plain single-line reply."""
        reply = FtpReply.parse("230 Login successful.")
        assert reply.code == 230
        assert reply.text == "Login successful."

    def test_trailing_crlf_is_ignored(self):
        """Test that line endings are stripped."""
        reply = FtpReply.parse("250 OK\r\n")
        assert reply.code == 250
        assert reply.text == "OK"

    def test_code_only(self):
        """Test a reply without text."""
        reply = FtpReply.parse("200")
        assert reply.code == 200
        assert reply.text == ""

    def test_multi_line(self):
        """Test that continuation lines are kept in the text."""
        reply = FtpReply.parse("220-Welcome\n220-Be nice\n220 Ready")
        assert reply.code == 220
        assert reply.text.startswith("Welcome")
        assert "220 Ready" in reply.text
        assert str(reply) == "220 Welcome"

    def test_invalid_reply_raises(self):
        """Test that a reply without a code is a transport error."""
        with pytest.raises(FTPTransportError):
            FtpReply.parse("hello there")

    def test_empty_reply_raises(self):
        """Test that an empty reply is a transport error."""
        with pytest.raises(FTPTransportError):
            FtpReply.parse("")


class TestFtpReplyCategories:
    """Tests for leading-digit classification."""

    @pytest.mark.parametrize("code,preliminary,success,intermediate,failure", [
        (150, True, False, False, False),
        (226, False, True, False, False),
        (331, False, False, True, False),
        (421, False, False, False, True),
        (530, False, False, False, True),
    ])
    def test_classification(self, code, preliminary, success, intermediate, failure):
        """Test each reply category."""
        reply = FtpReply(code=code, text="")
        assert reply.is_preliminary is preliminary
        assert reply.is_success is success
        assert reply.is_intermediate is intermediate
        assert reply.is_failure is failure


class TestEpsvPort:
    """Tests for EPSV (229) port extraction."""

    def test_standard_reply(self):
        """Test the usual |||port| form."""
        reply = FtpReply.parse("229 Entering Extended Passive Mode (|||50123|)")
        assert reply.epsv_port() == 50123

    def test_alternate_delimiter(self):
        """Test a non-pipe delimiter allowed by RFC 2428."""
        reply = FtpReply.parse("229 Entering Extended Passive Mode (!!!40000!)")
        assert reply.epsv_port() == 40000

    def test_wrong_code(self):
        """Test that a non-229 reply yields no port."""
        reply = FtpReply.parse("500 EPSV not understood")
        assert reply.epsv_port() is None

    def test_malformed_229(self):
        """Test that a 229 without a tuple yields no port."""
        reply = FtpReply.parse("229 Entering Extended Passive Mode")
        assert reply.epsv_port() is None

    def test_out_of_range_port(self):
        """Test that an impossible port is rejected."""
        reply = FtpReply.parse("229 Entering Extended Passive Mode (|||70000|)")
        assert reply.epsv_port() is None


class TestPasvAddress:
    """Tests for PASV (227) tuple extraction."""

    def test_standard_reply(self):
        """Test host and port computation."""
        reply = FtpReply.parse("227 Entering Passive Mode (192,168,1,10,195,80)")
        assert reply.pasv_address() == ("192.168.1.10", 195 * 256 + 80)

    def test_without_parentheses(self):
        """Test servers that omit the parentheses."""
        reply = FtpReply.parse("227 Entering Passive Mode 10,0,0,1,4,1")
        assert reply.pasv_address() == ("10.0.0.1", 1025)

    def test_wrong_code(self):
        """Test that a non-227 reply yields nothing."""
        reply = FtpReply.parse("502 Command not implemented")
        assert reply.pasv_address() is None

    def test_octet_out_of_range(self):
        """Test that numbers above 255 are rejected."""
        reply = FtpReply.parse("227 Entering Passive Mode (10,0,0,1,300,1)")
        assert reply.pasv_address() is None

    def test_missing_numbers(self):
        """Test a truncated tuple."""
        reply = FtpReply.parse("227 Entering Passive Mode (10,0,0,1,4)")
        assert reply.pasv_address() is None
