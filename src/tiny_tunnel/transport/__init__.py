"""SSH transport: sessions and local port forwards."""

from .forward import LocalForward
from .interfaces import Forward, SessionFactory, SessionHandle
from .session import ParamikoSessionFactory, SshSession

__all__ = [
    "Forward",
    "SessionHandle",
    "SessionFactory",
    "LocalForward",
    "SshSession",
    "ParamikoSessionFactory",
]
