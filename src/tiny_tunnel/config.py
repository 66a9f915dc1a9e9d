"""Connection profile loading from INI files.

Each section of the file is one profile::

    [db]
    enabled = 1
    host = bastion.example.com
    sshport = 22
    username = deploy
    keyfile = keys/id_rsa
    password = key-passphrase
    localhost = 127.0.0.1
    localport = 15432
    remotehost = db.internal
    remoteport = 5432

Options shared by every profile may be placed in a ``[DEFAULT]`` section.
"""

import configparser
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .common.exceptions import ConfigurationError
from .common.logging import get_logger
from .common.utils import describe_validation_error, parse_unsigned, sanitize_log_data
from .tunnels.models import ConnectionProfile

logger = get_logger(__name__)

DEFAULT_CONFIG_NAME = "connections.ini"
DEFAULT_SSH_PORT = 22

# INI option -> ConnectionProfile field
RECOGNIZED_OPTIONS = {
    "keyfile": "key_file",
    "keypassphrase": "key_passphrase",
    "password": "password",
    "username": "username",
    "host": "host",
    "sshport": "ssh_port",
    "localhost": "local_host",
    "localport": "local_port",
    "remotehost": "remote_host",
    "remoteport": "remote_port",
    "enabled": "enabled",
}


class ProfileSet(BaseModel):
    """Profiles read from a configuration source, in enumeration order."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    profiles: list[ConnectionProfile] = Field(default_factory=list)
    errors: list[ConfigurationError] = Field(
        default_factory=list, description="Enabled sections that could not be coerced"
    )
    base_dir: Path = Field(default_factory=Path.cwd, description="Key file base directory")
    order: list[str] = Field(
        default_factory=list, description="Section names of profiles and errors, in file order"
    )

    @property
    def enabled(self) -> list[ConnectionProfile]:
        return [p for p in self.profiles if p.enabled]

    def in_file_order(self) -> list[ConnectionProfile | ConfigurationError]:
        """Profiles and load errors interleaved as their sections appear."""
        by_name: dict[str, ConnectionProfile | ConfigurationError] = {
            p.name: p for p in self.profiles
        }
        by_name.update({e.profile_name: e for e in self.errors if e.profile_name})
        return [by_name[name] for name in self.order if name in by_name]


def default_config_path() -> Path:
    return Path.cwd() / DEFAULT_CONFIG_NAME


def parse_enabled(value: str) -> bool:
    """Interpret an ``enabled`` value as a 0/1 integer; blank means disabled."""
    text = value.strip()
    if not text:
        return False
    try:
        return int(text) != 0
    except ValueError:
        raise ValueError(f"enabled must be 0 or 1, got '{value}'") from None


def parse_profile(name: str, values: Mapping[str, str]) -> ConnectionProfile:
    """Coerce one section's raw string values into a ConnectionProfile.

    Missing options are treated as empty strings. The ``password`` option
    doubles as the key passphrase unless ``keypassphrase`` is set.

    Args:
        name: Section name
        values: Raw option values

    Returns:
        Validated profile

    Raises:
        ConfigurationError: If a value cannot be coerced
    """

    def raw(option: str) -> str:
        return (values.get(option) or "").strip()

    try:
        ssh_port = raw("sshport")
        data = {
            "name": name,
            "enabled": parse_enabled(raw("enabled")),
            "host": raw("host"),
            "ssh_port": parse_unsigned(ssh_port, "sshport") if ssh_port else DEFAULT_SSH_PORT,
            "username": raw("username"),
            "key_file": raw("keyfile"),
            "key_passphrase": raw("keypassphrase") or raw("password"),
            "password": raw("password"),
            "local_host": raw("localhost"),
            "local_port": parse_unsigned(raw("localport"), "localport"),
            "remote_host": raw("remotehost"),
            "remote_port": parse_unsigned(raw("remoteport"), "remoteport"),
        }
        return ConnectionProfile(**data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid profile '{name}': {describe_validation_error(e)}", profile_name=name
        ) from e
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid profile '{name}': {e}", profile_name=name
        ) from e


def parse_profiles(
    sections: Mapping[str, Mapping[str, str]], base_dir: Path | None = None
) -> ProfileSet:
    """Parse every section of an already-read configuration source.

    A section that fails coercion does not affect the others. Failures of
    enabled sections are collected in ``errors``; broken disabled sections are
    dropped since they would never be activated.
    """
    profiles: list[ConnectionProfile] = []
    errors: list[ConfigurationError] = []
    order: list[str] = []

    for name, values in sections.items():
        try:
            profile = parse_profile(name, values)
        except ConfigurationError as e:
            try:
                enabled = parse_enabled(values.get("enabled") or "")
            except ValueError:
                enabled = True
            if enabled:
                logger.error("Invalid profile", profile=name, error=str(e))
                errors.append(e)
                order.append(name)
            else:
                logger.debug("Ignoring invalid disabled profile", profile=name)
            continue

        logger.debug("Loaded profile", **sanitize_log_data(profile.model_dump()))
        profiles.append(profile)
        order.append(name)

    return ProfileSet(
        profiles=profiles, errors=errors, base_dir=base_dir or Path.cwd(), order=order
    )


def load_profiles(path: Path | str | None = None) -> ProfileSet:
    """Read connection profiles from an INI file.

    Args:
        path: INI file (``connections.ini`` in the current directory if None)

    Returns:
        Parsed profiles; key files resolve relative to the file's directory

    Raises:
        ConfigurationError: If the file cannot be read or parsed at all
    """
    config_path = Path(path) if path else default_config_path()
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        with config_path.open(encoding="utf-8") as f:
            parser.read_file(f)
    except (OSError, configparser.Error, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read {config_path}: {e}") from e

    sections = {
        name: {option: parser.get(name, option, fallback="") for option in RECOGNIZED_OPTIONS}
        for name in parser.sections()
    }

    unknown = {
        option
        for name in parser.sections()
        for option in parser.options(name)
        if option not in RECOGNIZED_OPTIONS
    }
    if unknown:
        logger.warning("Ignoring unrecognized options", options=sorted(unknown))

    logger.info("Read configuration", path=str(config_path), sections=len(sections))
    return parse_profiles(sections, base_dir=config_path.resolve().parent)
