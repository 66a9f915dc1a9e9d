"""Utility functions for tinytunnel."""

from pathlib import Path
from typing import Any

from pydantic import ValidationError

# Port range constants
MIN_PORT = 1
MAX_PORT = 65535


def validate_port(port: int, port_name: str = "Port", allow_zero: bool = False) -> None:
    """Validate port number range.

    Args:
        port: Port number to validate
        port_name: Name of the port for error messages
        allow_zero: Accept 0 (let the OS pick a free port)

    Raises:
        ValueError: If port is not in valid range
    """
    low = 0 if allow_zero else MIN_PORT
    if isinstance(port, bool) or not isinstance(port, int) or not (low <= port <= MAX_PORT):
        raise ValueError(f"{port_name} must be between {low} and {MAX_PORT}")


def parse_unsigned(value: str, field_name: str) -> int:
    """Parse a configuration string as an unsigned integer.

    Args:
        value: Raw string value
        field_name: Name of the field for error messages

    Returns:
        Parsed integer

    Raises:
        ValueError: If value is empty, not a number or negative
    """
    text = value.strip()
    if not text:
        raise ValueError(f"{field_name} is missing")
    if not text.isdigit():
        raise ValueError(f"{field_name} must be an unsigned integer, got '{value}'")
    return int(text)


def resolve_path(base_dir: Path, filename: str) -> Path:
    """Resolve a possibly relative file name against a base directory.

    Absolute paths and ``~`` paths are honoured as given.
    """
    path = Path(filename).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


def mask_sensitive_data(
    value: str | None, mask_char: str = "*", show_chars: int = 4
) -> str:
    """Mask sensitive data for logging while preserving some characters for debugging.

    Args:
        value: Sensitive string to mask (e.g., password, passphrase)
        mask_char: Character to use for masking
        show_chars: Number of characters to show at the end

    Returns:
        Masked string safe for logging
    """
    if not value:
        return "<None>"

    if len(value) <= show_chars:
        return mask_char * len(value)

    masked_length = len(value) - show_chars
    return mask_char * masked_length + value[-show_chars:]


def sanitize_log_data(data: dict[str, Any]) -> dict[str, Any]:
    """Sanitize dictionary data for safe logging by masking sensitive fields.

    Args:
        data: Dictionary potentially containing sensitive data

    Returns:
        Sanitized dictionary safe for logging
    """
    sensitive_fields = {
        "password",
        "passphrase",
        "secret",
        "token",
    }

    sanitized = {}
    for key, value in data.items():
        if any(sensitive_field in key.lower() for sensitive_field in sensitive_fields):
            sanitized[key] = mask_sensitive_data(str(value) if value else None)
        else:
            sanitized[key] = value

    return sanitized


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into a single readable line.

    Example: ``"connect_timeout: Input should be greater than or equal to 0.1"``
    """
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'value'}: {err['msg']}"
        for err in error.errors()
    )
