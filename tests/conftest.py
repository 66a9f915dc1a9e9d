"""Shared pytest fixtures for tinytunnel tests."""

from unittest.mock import Mock

import pytest

from tiny_tunnel.common.exceptions import ConnectError, ForwardError
from tiny_tunnel.tunnels.auth import Authenticator
from tiny_tunnel.tunnels.models import ConnectionProfile


class FakeForward:
    """Forward stand-in that records start/stop calls."""

    def __init__(self, local_host, local_port, remote_host, remote_port, fail=False):
        self.local_host = local_host
        self.local_port = local_port
        self.remote_host = remote_host
        self.remote_port = remote_port
        self.fail = fail
        self.started = False

    @property
    def is_active(self):
        return self.started

    def start(self):
        if self.fail:
            raise ForwardError(f"Cannot listen on {self.local_host}:{self.local_port}")
        self.started = True

    def stop(self):
        self.started = False


class FakeSession:
    """SessionHandle stand-in driven by the host name.

    Hosts starting with ``unreachable`` fail to connect, ``badforward`` hosts
    connect but cannot forward, ``baddisconnect`` hosts raise on disconnect.
    """

    def __init__(self, host, port, username, credential, log):
        self.host = host
        self.port = port
        self.username = username
        self.credential = credential
        self.connected = False
        self.disconnect_calls = 0
        self.forwards = []
        self._log = log

    def connect(self, timeout=None):
        self._log.append(("connect", self.host))
        self.timeout = timeout
        if self.host.startswith("unreachable"):
            raise ConnectError(f"Cannot connect to {self.host}:{self.port}: timed out")
        self.connected = True

    def is_connected(self):
        return self.connected

    def disconnect(self):
        self.disconnect_calls += 1
        self._log.append(("disconnect", self.host))
        if self.host.startswith("baddisconnect"):
            raise RuntimeError("socket already closed")
        self.connected = False

    def add_forward(self, local_host, local_port, remote_host, remote_port):
        forward = FakeForward(
            local_host,
            local_port,
            remote_host,
            remote_port,
            fail=self.host.startswith("badforward"),
        )
        self.forwards.append(forward)
        return forward


class FakeSessionFactory:
    def __init__(self):
        self.sessions = []
        self.log = []

    def new_session(self, host, port, username, credential):
        session = FakeSession(host, port, username, credential, self.log)
        self.sessions.append(session)
        return session

    def session_for(self, host):
        return next(s for s in self.sessions if s.host == host)


@pytest.fixture
def session_factory():
    """Transport stand-in recording every session it creates."""
    return FakeSessionFactory()


@pytest.fixture
def authenticator(tmp_path):
    return Authenticator(tmp_path)


@pytest.fixture
def make_profile():
    """Build ConnectionProfile objects with sensible defaults."""

    def _make(name="web", **overrides):
        data = {
            "name": name,
            "enabled": True,
            "host": f"{name}.example.com",
            "ssh_port": 22,
            "username": "deploy",
            "password": "secret",
            "local_host": "127.0.0.1",
            "local_port": 8080,
            "remote_host": "10.0.0.5",
            "remote_port": 80,
        }
        data.update(overrides)
        return ConnectionProfile(**data)

    return _make


@pytest.fixture
def reporter():
    """Mock reporter capturing connected/failed calls."""
    return Mock()


@pytest.fixture
def ini_file(tmp_path):
    """Write an INI file into tmp_path and return its path."""

    def _write(content, name="connections.ini"):
        path = tmp_path / name
        path.write_text(content)
        return path

    return _write
