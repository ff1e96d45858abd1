"""Infrastructure encryption utilities."""

from .secret_encryption import (
    ENCRYPTED_PREFIX,
    SecretEncryption,
    decrypt_secret,
    encrypt_secret,
    is_encrypted,
)

__all__ = [
    "ENCRYPTED_PREFIX",
    "SecretEncryption",
    "decrypt_secret",
    "encrypt_secret",
    "is_encrypted",
]
