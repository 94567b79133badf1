"""Validation helpers shared by the CLI and the models."""

import string

# Port range constants
MIN_PORT = 1
MAX_PORT = 65535

DEFAULT_SSH_PORT = 22

SAFE_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_-.@")


def is_safe_name(value: str) -> bool:
    """Check that a name contains only characters safe for paths and argv.

    Allowed: A-Z a-z 0-9 '_' '-' '.' '@'. The empty string passes; callers
    reject it separately.

    Args:
        value: Name to check, typically an ssh user@host

    Returns:
        True if every character is allowed
    """
    return all(char in SAFE_NAME_CHARS for char in value)


def validate_port(port: int, port_name: str = "Port") -> None:
    """Validate port number range.

    Args:
        port: Port number to validate
        port_name: Name of the port for error messages

    Raises:
        ValueError: If port is not in valid range (1-65535)
    """
    if (
        not isinstance(port, int)
        or isinstance(port, bool)
        or not (MIN_PORT <= port <= MAX_PORT)
    ):
        raise ValueError(f"{port_name} must be between {MIN_PORT} and {MAX_PORT}")


def parse_port(value: str, port_name: str = "Port") -> int:
    """Parse a decimal port string from the command line.

    Only plain ASCII digits are accepted: no sign, whitespace or underscores.

    Args:
        value: Raw argument
        port_name: Name of the port for error messages

    Returns:
        Port number

    Raises:
        ValueError: If the string is not a decimal number in range
    """
    if not value or not (value.isascii() and value.isdigit()):
        raise ValueError(f"{port_name} must be a decimal number")
    port = int(value)
    validate_port(port, port_name)
    return port
