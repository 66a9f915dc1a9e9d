"""Tests for the shutdown coordinator."""

import io
import os
import signal
import threading
from unittest.mock import Mock, patch

import pytest

from tiny_tunnel.common.exceptions import DisconnectError
from tiny_tunnel.shutdown import (
    TERMINATION_NOTICE,
    ShutdownCoordinator,
    termination_signals,
)
from tiny_tunnel.tunnels.orchestrator import TunnelOrchestrator
from tiny_tunnel.tunnels.reporting import ConsoleReporter


@pytest.fixture
def console():
    stream = io.StringIO()
    return stream, ConsoleReporter(stream)


class TestShutdownCoordinator:
    def test_termination_signals_include_sigint(self):
        assert signal.SIGINT in termination_signals()

    def test_shutdown_prints_notice_and_disconnects(self, console):
        stream, reporter = console
        target = Mock()
        target.disconnect_all.return_value = []
        coordinator = ShutdownCoordinator(target, reporter=reporter)

        status = coordinator.shutdown()

        assert status == 0
        target.disconnect_all.assert_called_once()
        assert stream.getvalue().strip() == TERMINATION_NOTICE

    def test_shutdown_swallows_disconnect_exceptions(self, console):
        _, reporter = console
        target = Mock()
        target.disconnect_all.side_effect = RuntimeError("transport gone")
        coordinator = ShutdownCoordinator(target, reporter=reporter)

        with patch("tiny_tunnel.shutdown.logger") as mock_logger:
            status = coordinator.shutdown()

        assert status == 0
        mock_logger.error.assert_called_once()

    def test_shutdown_logs_per_entry_errors(self, console):
        _, reporter = console
        target = Mock()
        target.disconnect_all.return_value = [DisconnectError("boom", profile_name="A")]
        coordinator = ShutdownCoordinator(target, reporter=reporter)

        with patch("tiny_tunnel.shutdown.logger") as mock_logger:
            assert coordinator.shutdown() == 0

        assert mock_logger.warning.call_args.kwargs["profile"] == "A"

    def test_request_shutdown_releases_wait(self, console):
        _, reporter = console
        coordinator = ShutdownCoordinator(Mock(), reporter=reporter)

        waiter = threading.Thread(target=coordinator.wait, kwargs={"poll_interval": 0.01})
        waiter.start()
        coordinator.request_shutdown()
        waiter.join(timeout=2.0)

        assert not waiter.is_alive()
        assert coordinator.requested

    def test_install_and_uninstall_restore_handlers(self, console):
        _, reporter = console
        previous = signal.getsignal(signal.SIGINT)
        coordinator = ShutdownCoordinator(Mock(), reporter=reporter, signals=(signal.SIGINT,))

        with coordinator:
            assert signal.getsignal(signal.SIGINT) == coordinator._handle_signal

        assert signal.getsignal(signal.SIGINT) == previous

    @pytest.mark.skipif(not hasattr(os, "kill") or os.name == "nt", reason="POSIX signals")
    def test_sigint_sets_event_instead_of_raising(self, console):
        """The handler replaces KeyboardInterrupt with a shutdown request"""
        _, reporter = console
        coordinator = ShutdownCoordinator(Mock(), reporter=reporter, signals=(signal.SIGINT,))

        with coordinator:
            os.kill(os.getpid(), signal.SIGINT)
            coordinator.wait(poll_interval=0.01)

        assert coordinator.requested

    def test_interrupt_with_two_sessions(self, session_factory, authenticator, make_profile, console):
        """Both sessions are closed and status is 0 even if one disconnect errors"""
        _, reporter = console
        orchestrator = TunnelOrchestrator(session_factory, authenticator, reporter=reporter)
        orchestrator.establish_all(
            [make_profile("A", host="baddisconnect-a"), make_profile("B")]
        )
        coordinator = ShutdownCoordinator(orchestrator, reporter=reporter)

        coordinator.request_shutdown()
        status = coordinator.run_until_shutdown(poll_interval=0.01)

        assert status == 0
        assert [s.disconnect_calls for s in session_factory.sessions] == [1, 1]
        assert not session_factory.session_for("B.example.com").is_connected()
        assert len(orchestrator.registry) == 0
