"""Tunnel orchestrator: turns connection profiles into live forwards."""

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from types import TracebackType
from typing import Literal

from ..common.exceptions import ConfigurationError, DisconnectError, TunnelError
from ..common.logging import get_logger
from ..transport.interfaces import SessionFactory, SessionHandle
from .auth import Authenticator
from .config import OrchestratorConfig
from .models import ConnectionProfile, EstablishResult, RegistryEntry
from .registry import SessionRegistry
from .reporting import ConsoleReporter, TunnelReporter

logger = get_logger(__name__)


class TunnelOrchestrator:
    """Establishes one session and forward per enabled profile.

    Each profile is handled in isolation: whatever goes wrong while
    authenticating, connecting or forwarding is reported against that profile
    and the next one is attempted.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        authenticator: Authenticator,
        config: OrchestratorConfig | None = None,
        reporter: TunnelReporter | None = None,
    ):
        """Initialize tunnel orchestrator.

        Args:
            session_factory: Transport used to create sessions
            authenticator: Resolves profile credentials
            config: Timeout and concurrency settings
            reporter: Sink for per-profile outcomes (console by default)
        """
        self.session_factory = session_factory
        self.authenticator = authenticator
        self.config = config or OrchestratorConfig()
        self.reporter: TunnelReporter = reporter or ConsoleReporter()
        self._registry = SessionRegistry()

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    def establish_all(
        self, profiles: Sequence[ConnectionProfile | ConfigurationError]
    ) -> SessionRegistry:
        """Establish every enabled profile, in order.

        Disabled profiles are skipped silently. Sections that failed to load
        may be passed as their ConfigurationError; they are reported as
        failures in their place. Outcomes are reported and registered in
        input order even when establishment runs in parallel.

        Args:
            profiles: Profiles (or load errors) in configuration order

        Returns:
            The live registry
        """
        items = [p for p in profiles if isinstance(p, ConfigurationError) or p.enabled]
        enabled = [p for p in items if isinstance(p, ConnectionProfile)]
        logger.info(
            "Establishing tunnels",
            total=len(profiles),
            enabled=len(enabled),
            rejected=len(items) - len(enabled),
            parallel=self.config.parallel,
        )

        if self.config.parallel and len(enabled) > 1:
            with ThreadPoolExecutor(
                max_workers=self.config.max_workers, thread_name_prefix="establish"
            ) as executor:
                pending = [
                    item if isinstance(item, ConfigurationError)
                    else executor.submit(self.establish, item)
                    for item in items
                ]
                for task in pending:
                    if isinstance(task, ConfigurationError):
                        self._record(self._rejected(task))
                    else:
                        self._record(task.result())
        else:
            for item in items:
                if isinstance(item, ConfigurationError):
                    self._record(self._rejected(item))
                else:
                    self._record(self.establish(item))

        logger.info("Tunnels established", active=len(self._registry))
        return self._registry

    @staticmethod
    def _rejected(error: ConfigurationError) -> EstablishResult:
        return EstablishResult(profile_name=error.profile_name or "?", error=str(error))

    def establish(self, profile: ConnectionProfile) -> EstablishResult:
        """Authenticate, connect and start the forward for a single profile.

        Never raises; failures are returned in the result.
        """
        log = logger.bind(profile=profile.name)
        session: SessionHandle | None = None
        try:
            credential = self.authenticator.build(profile)
            session = self.session_factory.new_session(
                profile.host, profile.ssh_port, profile.username, credential
            )
            session.connect(timeout=self.config.connect_timeout)

            forward = session.add_forward(
                profile.local_host,
                profile.local_port,
                profile.remote_host,
                profile.remote_port,
            )
            forward.start()
        except Exception as e:
            if isinstance(e, TunnelError) and e.profile_name is None:
                e.profile_name = profile.name
            log.error(
                "Failed to establish tunnel",
                error_type=type(e).__name__,
                error=str(e),
            )
            if session is not None:
                self._discard(profile.name, session)
            return EstablishResult(
                profile_name=profile.name, error=str(e) or type(e).__name__
            )

        log.info("Tunnel established", forward=profile.route)
        entry = RegistryEntry(profile_name=profile.name, session=session, forward=forward)
        return EstablishResult(profile_name=profile.name, entry=entry)

    def _record(self, result: EstablishResult) -> None:
        if result.entry is None:
            self.reporter.failed(result.profile_name, result.error or "unknown error")
            return

        try:
            self._registry.register(result.entry)
        except TunnelError as e:
            self._discard(result.profile_name, result.entry.session)
            self.reporter.failed(result.profile_name, str(e))
            return

        self.reporter.connected(result.profile_name, result.entry.session.is_connected())

    def _discard(self, profile_name: str, session: SessionHandle) -> None:
        """Close a session that will not make it into the registry."""
        try:
            if session.is_connected():
                session.disconnect()
        except Exception as e:
            logger.warning(
                "Error closing failed session", profile=profile_name, error=str(e)
            )

    def disconnect_all(self) -> list[DisconnectError]:
        """Disconnect every registered session; see SessionRegistry.disconnect_all."""
        errors = self._registry.disconnect_all()
        logger.info("Disconnected all sessions", errors=len(errors))
        return errors

    def __enter__(self) -> "TunnelOrchestrator":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> Literal[False]:
        try:
            self.disconnect_all()
        except Exception as e:
            logger.error("Error during context exit", error=str(e))
        return False
