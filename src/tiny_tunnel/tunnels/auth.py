"""Credential resolution for connection profiles."""

from pathlib import Path

import paramiko

from ..common.exceptions import CredentialError
from ..common.logging import get_logger
from ..common.utils import resolve_path
from .models import AuthMode, ConnectionProfile, Credential

logger = get_logger(__name__)

KEY_TYPES: tuple[type[paramiko.PKey], ...] = (
    paramiko.RSAKey,
    paramiko.ECDSAKey,
    paramiko.Ed25519Key,
)


class Authenticator:
    """Turns a profile's authentication material into a Credential."""

    def __init__(self, base_dir: Path | str):
        """Initialize authenticator.

        Args:
            base_dir: Directory relative key file paths are resolved against
        """
        self.base_dir = Path(base_dir)

    def build(self, profile: ConnectionProfile) -> Credential:
        """Select and build exactly one authentication method for a profile.

        Key-based auth is chosen when both a key file and a passphrase are
        set; otherwise the password (possibly empty) is used.

        Args:
            profile: Profile to authenticate

        Returns:
            Credential for the transport

        Raises:
            CredentialError: If the username is missing or the key cannot be loaded
        """
        if not profile.username:
            raise CredentialError("Username is required", profile_name=profile.name)

        if profile.uses_key_auth:
            key_path = resolve_path(self.base_dir, profile.key_file)
            pkey = self._load_key(profile.name, key_path, profile.key_passphrase)
            logger.debug(
                "Selected key authentication",
                profile=profile.name,
                key_path=str(key_path),
                key_type=pkey.get_name(),
            )
            return Credential(
                mode=AuthMode.KEY,
                username=profile.username,
                pkey=pkey,
                key_path=str(key_path),
            )

        if profile.key_file:
            logger.warning(
                "Key file configured without a passphrase, using password authentication",
                profile=profile.name,
                key_file=profile.key_file,
            )
        if not profile.password:
            logger.warning(
                "Attempting password authentication with an empty password",
                profile=profile.name,
            )

        return Credential(
            mode=AuthMode.PASSWORD,
            username=profile.username,
            password=profile.password,
        )

    def _load_key(self, profile_name: str, key_path: Path, passphrase: str) -> paramiko.PKey:
        """Load a private key, trying each supported key type in turn."""
        if not key_path.is_file():
            raise CredentialError(
                f"Key file not found: {key_path}", profile_name=profile_name
            )

        last_error: Exception | None = None
        for key_cls in KEY_TYPES:
            try:
                return key_cls.from_private_key_file(str(key_path), password=passphrase)
            except paramiko.PasswordRequiredException as e:
                raise CredentialError(
                    f"Key file {key_path} requires a passphrase", profile_name=profile_name
                ) from e
            except (paramiko.SSHException, ValueError, TypeError) as e:
                logger.debug(
                    "Key type did not match",
                    key_path=str(key_path),
                    key_type=key_cls.__name__,
                    error=str(e),
                )
                last_error = e
            except OSError as e:
                raise CredentialError(
                    f"Cannot read key file {key_path}: {e}", profile_name=profile_name
                ) from e

        raise CredentialError(
            f"Cannot parse key file {key_path} with the given passphrase: {last_error}",
            profile_name=profile_name,
        ) from last_error
