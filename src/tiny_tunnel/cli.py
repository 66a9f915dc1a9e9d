"""Command line entry point."""

import argparse
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from . import __version__
from .common.exceptions import ConfigurationError
from .common.logging import get_logger, setup_logging
from .common.utils import describe_validation_error
from .config import DEFAULT_CONFIG_NAME, load_profiles
from .shutdown import ShutdownCoordinator
from .transport.interfaces import SessionFactory
from .transport.session import ParamikoSessionFactory
from .tunnels.auth import Authenticator
from .tunnels.config import OrchestratorConfig
from .tunnels.orchestrator import TunnelOrchestrator
from .tunnels.reporting import ConsoleReporter

logger = get_logger(__name__)

BANNER = f"TinyTunnel {__version__} - SSH port forwarding for named connection profiles\n"
IDLE_NOTICE = "When finished press Ctrl+C to close all connections..."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinytunnel",
        description="Open SSH local port forwards for every enabled profile in an INI file.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help=f"profile file (default: ./{DEFAULT_CONFIG_NAME})",
    )
    parser.add_argument(
        "--connect-timeout",
        type=float,
        default=10.0,
        help="seconds allowed per SSH connect (default: 10)",
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="establish profiles concurrently",
    )
    parser.add_argument(
        "--max-workers", type=int, default=4, help="worker threads with --parallel"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument("--json-logs", action="store_true", help="emit JSON log lines")
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run(
    args: argparse.Namespace,
    session_factory: SessionFactory | None = None,
    reporter: ConsoleReporter | None = None,
    install_signals: bool = True,
) -> int:
    """Establish tunnels, idle until terminated and tear everything down.

    Returns:
        Process exit status
    """
    reporter = reporter or ConsoleReporter()
    reporter.write(BANNER)

    try:
        profile_set = load_profiles(args.config)
        config = OrchestratorConfig(
            connect_timeout=args.connect_timeout,
            parallel=args.parallel,
            max_workers=args.max_workers,
        )
    except ConfigurationError as e:
        reporter.write(f"Cannot load connection profiles: {e}")
        return 1
    except ValidationError as e:
        reporter.write(f"Invalid settings: {describe_validation_error(e)}")
        return 1

    orchestrator = TunnelOrchestrator(
        session_factory or ParamikoSessionFactory(),
        Authenticator(profile_set.base_dir),
        config=config,
        reporter=reporter,
    )
    coordinator = ShutdownCoordinator(orchestrator, reporter=reporter)
    if install_signals:
        coordinator.install()

    try:
        orchestrator.establish_all(profile_set.in_file_order())

        reporter.write(IDLE_NOTICE)
        return coordinator.run_until_shutdown()
    finally:
        if install_signals:
            coordinator.uninstall()


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, json_format=args.json_logs, log_file=args.log_file)
    sys.exit(run(args))
