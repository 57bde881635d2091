"""Input validators for Pedido FTP.

Provides validation functions for FTP settings received from the
front end: hosts, ports, remote folders and export filenames.
"""

import ipaddress
import re
from typing import Any, Optional, Tuple


# Hostname pattern (simplified)
HOSTNAME_PATTERN = re.compile(
    r'^(?=.{1,253}$)(?!-)[A-Za-z0-9_-]{1,63}(?<!-)(\.[A-Za-z0-9_-]{1,63})*$'
)


def validate_ip_address(ip: str) -> Tuple[bool, Optional[str]]:
    """
    Validate an IPv4 or IPv6 address.

    Args:
        ip: IP address string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not ip or not ip.strip():
        return False, "Endereço IP é obrigatório"

    ip = ip.strip()

    try:
        ipaddress.ip_address(ip)
    except ValueError:
        return False, f"Endereço IP inválido: {ip}"

    return True, None


def validate_hostname(hostname: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a hostname.

    Args:
        hostname: Hostname string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not hostname or not hostname.strip():
        return False, "Hostname é obrigatório"

    hostname = hostname.strip()

    if HOSTNAME_PATTERN.match(hostname):
        return True, None

    return False, f"Hostname inválido: {hostname}"


def validate_host(host: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a host (IP address or hostname).

    Args:
        host: Host string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(host, str) or not host.strip():
        return False, "Host é obrigatório"

    host = host.strip()

    # Try IP first
    is_valid_ip, _ = validate_ip_address(host)
    if is_valid_ip:
        return True, None

    # Try hostname
    is_valid_hostname, _ = validate_hostname(host)
    if is_valid_hostname:
        return True, None

    return False, f"Host inválido: {host}. Informe um endereço IP ou hostname."


def validate_port(port: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate a port number.

    Args:
        port: Port number to validate (int or digit string)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(port, bool):
        return False, "Porta deve ser um número"

    if not isinstance(port, int):
        try:
            port = int(port)
        except (ValueError, TypeError):
            return False, "Porta deve ser um número"

    if port < 1 or port > 65535:
        return False, f"Porta deve estar entre 1 e 65535, recebido {port}"

    return True, None


def validate_timeout(timeout: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate a timeout value in seconds.

    Args:
        timeout: Timeout in seconds

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(timeout, int):
        try:
            timeout = int(timeout)
        except (ValueError, TypeError):
            return False, "Timeout deve ser um número"

    if timeout < 5 or timeout > 300:
        return False, f"Timeout deve estar entre 5 e 300 segundos, recebido {timeout}"

    return True, None


def validate_no_line_breaks(value: str, field: str) -> Tuple[bool, Optional[str]]:
    """
    Reject values that would break an FTP command line.

    Args:
        value: Value that will be sent on the control channel
        field: Field name for the error message

    Returns:
        Tuple of (is_valid, error_message)
    """
    if "\r" in value or "\n" in value:
        return False, f"{field} não pode conter quebras de linha"
    return True, None


def validate_ftp_path(path: str) -> Tuple[bool, Optional[str]]:
    """
    Validate an FTP folder path.

    An empty path or "/" means the server root.

    Args:
        path: FTP path to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not path or not path.strip():
        return True, None

    path = path.strip()

    if not path.startswith("/"):
        return False, "Pasta destino deve ser um caminho absoluto (iniciar com /)"

    # Check for path traversal attempts
    if ".." in path:
        return False, "Pasta destino não pode conter '..'"

    return validate_no_line_breaks(path, "Pasta destino")


def validate_filename(filename: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a remote file name for STOR.

    Args:
        filename: Name of the file to create in the remote folder

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(filename, str) or not filename.strip():
        return False, "Nome do arquivo é obrigatório"

    if "/" in filename or "\\" in filename:
        return False, f"Nome do arquivo não pode conter separadores de pasta: {filename}"

    return validate_no_line_breaks(filename, "Nome do arquivo")
