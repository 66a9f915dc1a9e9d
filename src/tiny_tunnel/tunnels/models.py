"""Tunnel models.

This module defines connection profiles, the credentials derived from them and
the entries kept in the live session registry.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_LOCAL_HOST = "127.0.0.1"


class AuthMode(str, Enum):
    """Authentication method enumeration."""

    KEY = "key"
    PASSWORD = "password"


class ConnectionProfile(BaseModel):
    """One named forwarding intent plus its authentication material."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="forbid")

    name: str = Field(min_length=1, description="Profile name (INI section)")
    enabled: bool = Field(default=False, description="Activate this profile")
    host: str = Field(min_length=1, description="SSH server hostname")
    ssh_port: int = Field(default=22, ge=1, le=65535, description="SSH server port")
    username: str = Field(default="", description="Login name")
    key_file: str = Field(default="", description="Private key file")
    key_passphrase: str = Field(default="", repr=False, description="Key passphrase")
    password: str = Field(default="", repr=False, description="Login password")
    local_host: str = Field(default=DEFAULT_LOCAL_HOST, description="Local bind address")
    local_port: int = Field(ge=0, le=65535, description="Local bind port (0 = any)")
    remote_host: str = Field(min_length=1, description="Destination host seen from the SSH server")
    remote_port: int = Field(ge=1, le=65535, description="Destination port")

    @field_validator("local_host")
    @classmethod
    def default_local_host(cls, v: str) -> str:
        """Bind to loopback when no local address is configured."""
        return v or DEFAULT_LOCAL_HOST

    @property
    def uses_key_auth(self) -> bool:
        """Key-based auth needs both a key file and a passphrase."""
        return bool(self.key_file) and bool(self.key_passphrase)

    @property
    def route(self) -> str:
        return (
            f"{self.local_host}:{self.local_port} -> "
            f"{self.remote_host}:{self.remote_port}"
        )


class Credential(BaseModel):
    """Authentication method resolved for one profile."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    mode: AuthMode
    username: str
    password: str | None = Field(default=None, repr=False)
    pkey: Any = Field(default=None, repr=False, exclude=True)
    key_path: str | None = Field(default=None, description="Resolved key file")


class RegistryEntry(BaseModel):
    """A live session and the forward bound to it."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    profile_name: str = Field(min_length=1)
    session: Any = Field(description="Connected SessionHandle")
    forward: Any = Field(description="Started Forward")
    established_at: datetime = Field(default_factory=datetime.now)


class EstablishResult(BaseModel):
    """Outcome of establishing a single profile."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    profile_name: str
    entry: RegistryEntry | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.entry is not None
