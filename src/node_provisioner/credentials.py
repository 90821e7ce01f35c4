"""Credential helpers: service account key material and node login keys."""

import io
from pathlib import Path

import paramiko
import structlog

from .errors import CredentialsError
from .models import LoginCredentials

logger = structlog.get_logger()

SERVICE_ACCOUNT_DOMAIN = ".iam.gserviceaccount.com"
LOGIN_KEY_BITS = 2048


def read_private_key(path: str | Path) -> str:
    """Read the service account private key file.

    Raises:
        CredentialsError: If the file cannot be opened or decoded
    """
    try:
        return Path(path).read_text()
    except (OSError, UnicodeDecodeError) as e:
        raise CredentialsError(f"Cannot open service account private key file: {path}\n{e}") from e


def project_from_identity(identity: str) -> str | None:
    """Extract the project id from a service account email, if it has one."""
    _, sep, domain = identity.partition("@")
    if not sep or not domain.endswith(SERVICE_ACCOUNT_DOMAIN):
        return None
    return domain[: -len(SERVICE_ACCOUNT_DOMAIN)] or None


def generate_login_credentials(user: str) -> LoginCredentials:
    """Generate an RSA key pair for logging in to new nodes."""
    key = paramiko.RSAKey.generate(LOGIN_KEY_BITS)
    buffer = io.StringIO()
    key.write_private_key(buffer)
    public_key = f"{key.get_name()} {key.get_base64()} {user}"
    logger.debug("Generated login key pair", user=user, fingerprint=key.get_fingerprint().hex())
    return LoginCredentials(identity=user, secret=buffer.getvalue(), public_key=public_key)
