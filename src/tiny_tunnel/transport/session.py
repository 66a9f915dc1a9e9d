"""paramiko-backed SSH sessions."""

import socket
import threading

import paramiko

from ..common.exceptions import ConnectError, DisconnectError, ForwardError
from ..common.logging import get_logger
from ..tunnels.models import AuthMode, Credential
from .forward import LocalForward

logger = get_logger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10.0


class SshSession:
    """One SSH session and the local forwards bound to it."""

    def __init__(self, host: str, port: int, username: str, credential: Credential):
        """Initialize an unconnected session.

        Args:
            host: SSH server hostname
            port: SSH server port
            username: Login name
            credential: Resolved authentication method
        """
        self.host = host
        self.port = port
        self.username = username
        self.credential = credential
        self._client: paramiko.SSHClient | None = None
        self._forwards: list[LocalForward] = []
        self._lock = threading.Lock()

    @property
    def forwards(self) -> tuple[LocalForward, ...]:
        return tuple(self._forwards)

    def connect(self, timeout: float | None = DEFAULT_CONNECT_TIMEOUT) -> None:
        """Open and authenticate the session.

        Args:
            timeout: Seconds allowed for TCP connect, SSH banner and auth

        Raises:
            ConnectError: If the host is unreachable, negotiation fails or
                authentication is rejected
        """
        if self.is_connected():
            logger.debug("Session already connected", host=self.host)
            return

        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        if self.credential.mode == AuthMode.KEY:
            auth = {"pkey": self.credential.pkey}
        else:
            auth = {"password": self.credential.password or ""}

        logger.info(
            "Connecting SSH session",
            host=self.host,
            port=self.port,
            username=self.username,
            auth=self.credential.mode.value,
        )
        connected = False
        try:
            client.connect(
                hostname=self.host,
                port=self.port,
                username=self.username,
                timeout=timeout,
                banner_timeout=timeout,
                auth_timeout=timeout,
                look_for_keys=False,
                allow_agent=False,
                **auth,
            )
            connected = True
        except paramiko.AuthenticationException as e:
            raise ConnectError(f"Authentication rejected by {self.host}: {e}") from e
        except (paramiko.SSHException, socket.timeout, OSError) as e:
            raise ConnectError(
                f"Cannot connect to {self.host}:{self.port}: {str(e) or type(e).__name__}"
            ) from e
        finally:
            if not connected:
                client.close()

        self._client = client
        logger.info("SSH session connected", host=self.host, port=self.port)

    def is_connected(self) -> bool:
        if self._client is None:
            return False
        transport = self._client.get_transport()
        return transport is not None and transport.is_active()

    def add_forward(
        self, local_host: str, local_port: int, remote_host: str, remote_port: int
    ) -> LocalForward:
        """Create a forward over this session; call ``start()`` on it to bind.

        Raises:
            ForwardError: If the session is not connected
        """
        transport = self._client.get_transport() if self._client else None
        if transport is None or not transport.is_active():
            raise ForwardError(
                f"Cannot forward {local_host}:{local_port}: session to {self.host} is not connected"
            )

        forward = LocalForward(transport, local_host, local_port, remote_host, remote_port)
        with self._lock:
            self._forwards.append(forward)
        return forward

    def disconnect(self) -> None:
        """Stop every forward and close the session.

        Safe to call more than once.

        Raises:
            DisconnectError: If a forward or the SSH client fails to close
        """
        with self._lock:
            forwards, self._forwards = self._forwards, []
            client, self._client = self._client, None

        errors: list[str] = []
        for forward in forwards:
            try:
                forward.stop()
            except Exception as e:
                errors.append(f"forward {forward.local_port}: {e}")

        if client is not None:
            try:
                client.close()
            except Exception as e:
                errors.append(f"session: {e}")
            logger.info("SSH session closed", host=self.host, port=self.port)

        if errors:
            raise DisconnectError(
                f"Errors while disconnecting from {self.host}: {'; '.join(errors)}"
            )

    def __repr__(self) -> str:
        state = "connected" if self.is_connected() else "disconnected"
        return f"SshSession({self.username}@{self.host}:{self.port}, {state})"


class ParamikoSessionFactory:
    """Creates paramiko-backed sessions for the orchestrator."""

    def new_session(
        self, host: str, port: int, username: str, credential: Credential
    ) -> SshSession:
        return SshSession(host, port, username, credential)
