"""Custom exceptions for tunnel management."""

from ..common.exceptions import TunnelError


class TunnelRegistryError(TunnelError):
    """Exception raised for session registry operations."""

    pass
