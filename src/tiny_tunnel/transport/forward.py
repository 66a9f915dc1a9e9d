"""Local port forwarding over an SSH transport."""

import os
import select
import socket
import socketserver
import threading

import paramiko

from ..common.exceptions import ForwardError
from ..common.logging import get_logger
from ..common.utils import validate_port

logger = get_logger(__name__)

RELAY_BUFFER_SIZE = 16384


class _ForwardServer(socketserver.ThreadingMixIn, socketserver.TCPServer):
    daemon_threads = True
    # Windows SO_REUSEADDR permits binding a port that is already in use
    allow_reuse_address = os.name != "nt"


class LocalForward:
    """Local listener relaying each accepted connection to a remote destination.

    Every accepted client gets a ``direct-tcpip`` channel on the session's
    transport; bytes are pumped in both directions until either side closes.
    """

    def __init__(
        self,
        transport: paramiko.Transport,
        local_host: str,
        local_port: int,
        remote_host: str,
        remote_port: int,
    ):
        validate_port(local_port, "Local port", allow_zero=True)
        validate_port(remote_port, "Remote port")
        self.local_host = local_host
        self.local_port = local_port
        self.remote_host = remote_host
        self.remote_port = remote_port
        self._transport = transport
        self._stop_event = threading.Event()
        self._server: _ForwardServer | None = None
        self._acceptor_thread: threading.Thread | None = None

    @property
    def is_active(self) -> bool:
        return self._server is not None and not self._stop_event.is_set()

    @property
    def bound_port(self) -> int | None:
        """Actual listening port, useful when ``local_port`` was 0."""
        if self._server is None:
            return None
        return int(self._server.server_address[1])

    def start(self) -> None:
        """Bind the local listener and start accepting connections.

        Raises:
            ForwardError: If the listener cannot be bound
        """
        if self.is_active:
            logger.debug("Forward already active", local_port=self.bound_port)
            return

        forward = self

        class ForwardHandler(socketserver.BaseRequestHandler):
            def handle(self) -> None:
                forward._handle_client(self.request)

        self._stop_event.clear()
        try:
            self._server = _ForwardServer(
                (self.local_host, self.local_port), ForwardHandler
            )
        except OSError as e:
            raise ForwardError(
                f"Cannot listen on {self.local_host}:{self.local_port}: {e}"
            ) from e

        self._acceptor_thread = threading.Thread(
            target=self._server.serve_forever,
            name=f"forward-{self.bound_port}",
            daemon=True,
        )
        self._acceptor_thread.start()
        logger.info(
            "Forward listening",
            local=f"{self.local_host}:{self.bound_port}",
            remote=f"{self.remote_host}:{self.remote_port}",
        )

    def stop(self) -> None:
        """Close the listener; open relays wind down on their own."""
        if self._server is None or self._stop_event.is_set():
            return

        self._stop_event.set()
        self._server.shutdown()
        self._server.server_close()
        if self._acceptor_thread:
            self._acceptor_thread.join(timeout=3.0)
        logger.info("Forward stopped", local_port=self.bound_port)
        self._server = None
        self._acceptor_thread = None

    def _handle_client(self, sock: socket.socket) -> None:
        try:
            peer = sock.getpeername()
            chan = self._transport.open_channel(
                "direct-tcpip", (self.remote_host, self.remote_port), peer
            )
        except (paramiko.SSHException, OSError) as e:
            logger.error(
                "Remote endpoint unreachable",
                remote=f"{self.remote_host}:{self.remote_port}",
                error=str(e),
            )
            return

        try:
            _bidirectional_forward(sock, chan, self._stop_event)
        except OSError as e:
            logger.debug("Relay closed", error=str(e))
        finally:
            chan.close()

    def __enter__(self) -> "LocalForward":
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()

    def __repr__(self) -> str:
        state = "active" if self.is_active else "stopped"
        return (
            f"LocalForward({self.local_host}:{self.local_port} -> "
            f"{self.remote_host}:{self.remote_port}, {state})"
        )


def _bidirectional_forward(
    sock: socket.socket, chan: paramiko.Channel, stop_event: threading.Event
) -> None:
    """Pump data between a client socket and an SSH channel until EOF."""
    while not stop_event.is_set():
        r, _, _ = select.select([sock, chan], [], [], 1.0)
        if sock in r:
            data = sock.recv(RELAY_BUFFER_SIZE)
            if not data:
                break
            chan.sendall(data)
        if chan in r:
            data = chan.recv(RELAY_BUFFER_SIZE)
            if not data:
                break
            sock.sendall(data)
