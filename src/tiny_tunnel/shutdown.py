"""Graceful shutdown on termination signals."""

import signal
import threading
from types import FrameType
from typing import Any, Protocol

from .common.logging import get_logger
from .tunnels.reporting import ConsoleReporter

logger = get_logger(__name__)

TERMINATION_NOTICE = "Terminating all tunnels please wait..."


class Disconnectable(Protocol):
    def disconnect_all(self) -> Any:
        ...


def termination_signals() -> tuple[signal.Signals, ...]:
    """SIGINT everywhere, plus SIGTERM where the platform has it."""
    signals = [signal.SIGINT]
    if hasattr(signal, "SIGTERM"):
        signals.append(signal.SIGTERM)
    return tuple(signals)


class ShutdownCoordinator:
    """Waits for a termination request, then tears every session down.

    The signal handler only sets an event; the supervisory loop blocked in
    ``wait()`` wakes up and runs ``shutdown()`` on the main thread.
    """

    def __init__(
        self,
        target: Disconnectable,
        reporter: ConsoleReporter | None = None,
        signals: tuple[signal.Signals, ...] | None = None,
    ):
        """Initialize shutdown coordinator.

        Args:
            target: Owner of the live sessions (usually the orchestrator)
            reporter: Console used for the termination notice
            signals: Signals to handle (SIGINT/SIGTERM by default)
        """
        self.target = target
        self.reporter = reporter or ConsoleReporter()
        self.signals = signals if signals is not None else termination_signals()
        self._event = threading.Event()
        self._received: int | None = None
        self._previous: dict[signal.Signals, Any] = {}

    @property
    def requested(self) -> bool:
        return self._event.is_set()

    def install(self) -> None:
        """Replace the default handlers; must run on the main thread."""
        for sig in self.signals:
            self._previous[sig] = signal.signal(sig, self._handle_signal)
        logger.debug("Installed signal handlers", signals=[s.name for s in self.signals])

    def uninstall(self) -> None:
        """Restore the handlers that were active before ``install()``."""
        for sig, previous in self._previous.items():
            signal.signal(sig, previous)
        self._previous.clear()

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        self._received = signum
        self._event.set()

    def request_shutdown(self) -> None:
        self._event.set()

    def wait(self, poll_interval: float = 0.5) -> None:
        """Block until shutdown is requested.

        Polls with a timeout so signal handlers get a chance to run on
        platforms where a blocking wait is not interruptible.
        """
        while not self._event.wait(poll_interval):
            pass
        if self._received is not None:
            logger.info("Termination requested", signal=signal.Signals(self._received).name)

    def shutdown(self) -> int:
        """Disconnect every session and return the process exit status.

        Errors while disconnecting are logged and otherwise ignored; the
        status is always 0.
        """
        self.reporter.write(TERMINATION_NOTICE)
        try:
            errors = self.target.disconnect_all()
            for error in errors or []:
                logger.warning(
                    "Session did not disconnect cleanly",
                    profile=getattr(error, "profile_name", None),
                    error=str(error),
                )
        except Exception as e:
            logger.error("Error during shutdown", error=str(e))
        return 0

    def run_until_shutdown(self, poll_interval: float = 0.5) -> int:
        """Wait for a termination request, then shut down."""
        self.wait(poll_interval)
        return self.shutdown()

    def __enter__(self) -> "ShutdownCoordinator":
        self.install()
        return self

    def __exit__(self, *exc: object) -> None:
        self.uninstall()
