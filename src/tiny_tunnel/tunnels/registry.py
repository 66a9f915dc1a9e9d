"""Session registry for established tunnels."""

import threading
from collections.abc import Iterator

from ..common.exceptions import DisconnectError
from ..common.logging import get_logger
from .exceptions import TunnelRegistryError
from .models import RegistryEntry

logger = get_logger(__name__)


class SessionRegistry:
    """Live record of established sessions, in registration order.

    All access goes through a lock so establishment running on worker threads
    and shutdown can never observe a half-updated list.
    """

    def __init__(self) -> None:
        self._entries: list[RegistryEntry] = []
        self._lock = threading.Lock()

    def register(self, entry: RegistryEntry) -> None:
        """Add an established session.

        Args:
            entry: Entry to add

        Raises:
            TunnelRegistryError: If the profile is already registered
        """
        with self._lock:
            if any(e.profile_name == entry.profile_name for e in self._entries):
                raise TunnelRegistryError(
                    f"Profile '{entry.profile_name}' is already registered",
                    profile_name=entry.profile_name,
                )
            self._entries.append(entry)
        logger.info("Registered session", profile=entry.profile_name)

    def get(self, profile_name: str) -> RegistryEntry | None:
        with self._lock:
            for entry in self._entries:
                if entry.profile_name == profile_name:
                    return entry
        return None

    @property
    def entries(self) -> tuple[RegistryEntry, ...]:
        """Read-only snapshot of the registered entries."""
        with self._lock:
            return tuple(self._entries)

    def names(self) -> list[str]:
        return [entry.profile_name for entry in self.entries]

    def disconnect_all(self) -> list[DisconnectError]:
        """Disconnect every registered session and empty the registry.

        Sessions that no longer report connected are skipped. A failure on one
        entry never prevents attempts on the others; calling this again is a
        no-op.

        Returns:
            Errors raised while disconnecting, one per failed entry
        """
        with self._lock:
            entries, self._entries = self._entries, []

        errors: list[DisconnectError] = []
        for entry in entries:
            try:
                if not entry.session.is_connected():
                    logger.debug("Session already closed", profile=entry.profile_name)
                    continue
                entry.session.disconnect()
                logger.info("Disconnected session", profile=entry.profile_name)
            except Exception as e:
                if isinstance(e, DisconnectError):
                    error = e
                    error.profile_name = error.profile_name or entry.profile_name
                else:
                    error = DisconnectError(str(e), profile_name=entry.profile_name)
                logger.error(
                    "Error disconnecting session",
                    profile=entry.profile_name,
                    error=str(e),
                )
                errors.append(error)

        return errors

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self.entries)

    def __contains__(self, profile_name: object) -> bool:
        return self.get(str(profile_name)) is not None
