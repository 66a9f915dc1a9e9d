"""Custom exceptions for tinytunnel."""


class TinyTunnelError(Exception):
    """Base exception for all tinytunnel errors."""
    pass


class ConfigurationError(TinyTunnelError):
    """Raised when the connection profiles cannot be read or coerced."""

    def __init__(self, message: str, profile_name: str | None = None):
        super().__init__(message)
        self.profile_name = profile_name


class TunnelError(TinyTunnelError):
    """Base exception for failures attributable to a single profile."""

    def __init__(self, message: str, profile_name: str | None = None):
        super().__init__(message)
        self.profile_name = profile_name


class CredentialError(TunnelError):
    """Raised when authentication material is missing, unreadable or rejected."""
    pass


class ConnectError(TunnelError):
    """Raised when an SSH session cannot be established."""
    pass


class ForwardError(TunnelError):
    """Raised when a local forward cannot be bound or started."""
    pass


class DisconnectError(TunnelError):
    """Raised when tearing down a session fails."""
    pass
