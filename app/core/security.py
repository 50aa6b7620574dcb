"""Password hashing, API key secrets and symmetric encryption helpers."""

import hashlib

import bcrypt
from cryptography.fernet import Fernet

from app.core.config import get_settings

# =============================================================================
# Passwords
# =============================================================================


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt.

    Args:
        password: Plain-text password.
        rounds: bcrypt cost factor (defaults to ``settings.password_hash_rounds``).

    Returns:
        bcrypt hash as a UTF-8 string.
    """
    cost = rounds if rounds is not None else get_settings().password_hash_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=cost)).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Check a plain-text password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))


# =============================================================================
# API key secrets
# =============================================================================


def hash_secret_key(secret_key: str) -> str:
    """Slow (bcrypt) hash of an API secret key for storage."""
    return hash_password(secret_key, rounds=11)


def fast_hash_secret_key(secret_key: str, salt: str | None = None) -> str:
    """Salted SHA-256 of an API secret key, used for indexed lookups.

    Args:
        secret_key: Plain secret key.
        salt: Salt override (defaults to ``settings.salt``).

    Returns:
        Hex digest.
    """
    key_salt = salt if salt is not None else get_settings().salt
    return hashlib.sha256(f"{secret_key}{key_salt}".encode()).hexdigest()


def get_display_secret_key(secret_key: str) -> str:
    """Masked representation of a secret, e.g. ``sk-lf-...7890``."""
    return f"{secret_key[:6]}...{secret_key[-4:]}"


# =============================================================================
# Symmetric encryption
# =============================================================================


def _fernet(key: str | None = None) -> Fernet:
    encryption_key = key if key is not None else get_settings().encryption_key
    if not encryption_key:
        raise RuntimeError("ENCRYPTION_KEY is not configured; cannot encrypt secrets.")
    try:
        return Fernet(encryption_key.encode())
    except ValueError as e:
        raise RuntimeError("ENCRYPTION_KEY is not a valid Fernet key.") from e


def encrypt(plaintext: str, key: str | None = None) -> str:
    """Encrypt a string with Fernet.

    Args:
        plaintext: Value to encrypt.
        key: Fernet key override (defaults to ``settings.encryption_key``).

    Returns:
        URL-safe token string.

    Raises:
        RuntimeError: If no valid encryption key is configured.
    """
    return _fernet(key).encrypt(plaintext.encode()).decode()

