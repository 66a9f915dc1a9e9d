"""tinytunnel - keep SSH local port forwards alive for named connection profiles."""

__version__ = "0.1.0"

from .common.exceptions import (
    ConfigurationError,
    ConnectError,
    CredentialError,
    DisconnectError,
    ForwardError,
    TinyTunnelError,
    TunnelError,
)
from .common.logging import get_logger, setup_logging
from .config import ProfileSet, load_profiles, parse_profiles
from .shutdown import ShutdownCoordinator
from .transport import LocalForward, ParamikoSessionFactory, SshSession
from .tunnels import (
    Authenticator,
    AuthMode,
    ConnectionProfile,
    Credential,
    OrchestratorConfig,
    RegistryEntry,
    SessionRegistry,
    TunnelOrchestrator,
)

__all__ = [
    # Configuration
    "load_profiles",
    "parse_profiles",
    "ProfileSet",
    "ConnectionProfile",
    "OrchestratorConfig",
    # Orchestration
    "TunnelOrchestrator",
    "SessionRegistry",
    "RegistryEntry",
    "Authenticator",
    "AuthMode",
    "Credential",
    "ShutdownCoordinator",
    # Transport
    "SshSession",
    "LocalForward",
    "ParamikoSessionFactory",
    # Exceptions
    "TinyTunnelError",
    "ConfigurationError",
    "TunnelError",
    "CredentialError",
    "ConnectError",
    "ForwardError",
    "DisconnectError",
    # Logging
    "get_logger",
    "setup_logging",
]
