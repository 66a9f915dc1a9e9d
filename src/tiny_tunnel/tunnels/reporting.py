"""Per-profile outcome reporting."""

import sys
from typing import Protocol, TextIO


class TunnelReporter(Protocol):
    """Sink for establishment outcomes."""

    def connected(self, profile_name: str, is_connected: bool) -> None:
        ...

    def failed(self, profile_name: str, message: str) -> None:
        ...


class ConsoleReporter:
    """Prints one status line per enabled profile."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def connected(self, profile_name: str, is_connected: bool) -> None:
        state = "connected" if is_connected else "not connected"
        self.write(f"connection {profile_name} has {state}")

    def failed(self, profile_name: str, message: str) -> None:
        self.write(
            f"Error with connection {profile_name}! Full error details: {message}"
        )

    def write(self, line: str) -> None:
        print(line, file=self.stream, flush=True)
