"""Tunnel orchestration: profiles, credentials, registry and lifecycle."""

from .auth import Authenticator
from .config import OrchestratorConfig
from .exceptions import TunnelRegistryError
from .models import (
    AuthMode,
    ConnectionProfile,
    Credential,
    EstablishResult,
    RegistryEntry,
)
from .orchestrator import TunnelOrchestrator
from .registry import SessionRegistry
from .reporting import ConsoleReporter, TunnelReporter

__all__ = [
    # Models
    "AuthMode",
    "ConnectionProfile",
    "Credential",
    "RegistryEntry",
    "EstablishResult",
    "OrchestratorConfig",
    # Lifecycle
    "Authenticator",
    "TunnelOrchestrator",
    "SessionRegistry",
    "TunnelRegistryError",
    # Reporting
    "ConsoleReporter",
    "TunnelReporter",
]
