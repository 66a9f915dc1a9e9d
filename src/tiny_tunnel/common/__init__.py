"""Common utilities and shared functionality."""

from .exceptions import (
    ConfigurationError,
    ConnectError,
    CredentialError,
    DisconnectError,
    ForwardError,
    TinyTunnelError,
    TunnelError,
)
from .logging import get_logger, setup_logging
from .utils import (
    MAX_PORT,
    MIN_PORT,
    describe_validation_error,
    mask_sensitive_data,
    parse_unsigned,
    resolve_path,
    sanitize_log_data,
    validate_port,
)

__all__ = [
    # Exceptions
    "TinyTunnelError",
    "ConfigurationError",
    "TunnelError",
    "CredentialError",
    "ConnectError",
    "ForwardError",
    "DisconnectError",
    # Logging
    "get_logger",
    "setup_logging",
    # Utils
    "validate_port",
    "parse_unsigned",
    "resolve_path",
    "mask_sensitive_data",
    "sanitize_log_data",
    "describe_validation_error",
    "MIN_PORT",
    "MAX_PORT",
]
