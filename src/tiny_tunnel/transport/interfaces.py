"""Protocol interfaces for the SSH transport capability.

The orchestrator only depends on these protocols, so tests and alternative
transports can stand in for the paramiko implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..tunnels.models import Credential


class Forward(Protocol):
    """A local listener relaying connections to a remote destination."""

    @property
    def is_active(self) -> bool:
        """Whether the listener is accepting connections."""
        ...

    def start(self) -> None:
        """Bind the local listener and begin relaying."""
        ...

    def stop(self) -> None:
        """Close the local listener."""
        ...


class SessionHandle(Protocol):
    """One authenticated SSH session and the forwards bound to it."""

    def connect(self, timeout: float | None = None) -> None:
        """Open and authenticate the session."""
        ...

    def is_connected(self) -> bool:
        """Whether the underlying transport is still active."""
        ...

    def disconnect(self) -> None:
        """Stop every forward and close the session."""
        ...

    def add_forward(
        self, local_host: str, local_port: int, remote_host: str, remote_port: int
    ) -> Forward:
        """Create a forward bound to this session (not started)."""
        ...


class SessionFactory(Protocol):
    """Creates unconnected sessions."""

    def new_session(
        self, host: str, port: int, username: str, credential: Credential
    ) -> SessionHandle:
        """Return a new session for the given endpoint and credential."""
        ...
