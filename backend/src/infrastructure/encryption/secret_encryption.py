"""Secret encryption utilities using AES-256-GCM.

Credentials for the ERP and the SFTP site live in the environment / .env file.
They can be stored as ``enc:<token>`` instead of plain text, where the token is
produced by ``yooz-bridge encrypt-secret``.

Security considerations:
- Uses AES-256-GCM for authenticated encryption
- Derives the encryption key from SECRET_KEY using HKDF
- Each encryption uses a unique random nonce
- The setting name is bound as associated data, so a token encrypted for
  SFTP_PASSWORD will not decrypt as EPICOR_PASSWORD
"""

import base64
import binascii
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

ENCRYPTED_PREFIX = "enc:"

_NONCE_BYTES = 12


class SecretEncryption:
    """AES-256-GCM encryption for single secret values.

    Example:
        encryptor = SecretEncryption("my-secret-key")
        token = encryptor.encrypt("hunter2", context="SFTP_PASSWORD")
        # SFTP_PASSWORD=enc:... goes into .env
        encryptor.decrypt(token, context="SFTP_PASSWORD")
    """

    # HKDF info string for secret encryption
    HKDF_INFO = b"yooz-bridge-secret-encryption-v1"

    def __init__(self, key_material: str):
        if not key_material:
            raise ValueError("Key material must not be empty")
        self._key = self._derive_key(key_material.encode())

    def _derive_key(self, key_material: bytes) -> bytes:
        """Derive 256-bit encryption key using HKDF."""
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=None,
            info=self.HKDF_INFO,
        )
        return hkdf.derive(key_material)

    def encrypt(self, plaintext: str, context: Optional[str] = None) -> str:
        """Encrypt a secret and return an ``enc:`` token."""
        nonce = os.urandom(_NONCE_BYTES)
        associated_data = context.encode() if context else None
        ciphertext = AESGCM(self._key).encrypt(nonce, plaintext.encode(), associated_data)
        return ENCRYPTED_PREFIX + base64.urlsafe_b64encode(nonce + ciphertext).decode()

    def decrypt(self, token: str, context: Optional[str] = None) -> str:
        """Decrypt an ``enc:`` token.

        Raises:
            ValueError: If the token is malformed, the key is wrong, the data
                was tampered with or the context does not match
        """
        if not is_encrypted(token):
            raise ValueError("Value is not an encrypted token")

        try:
            raw = base64.urlsafe_b64decode(token[len(ENCRYPTED_PREFIX):].encode())
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Malformed encrypted token: {e}") from e

        if len(raw) <= _NONCE_BYTES:
            raise ValueError("Malformed encrypted token: too short")

        nonce, ciphertext = raw[:_NONCE_BYTES], raw[_NONCE_BYTES:]
        associated_data = context.encode() if context else None
        try:
            plaintext = AESGCM(self._key).decrypt(nonce, ciphertext, associated_data)
        except InvalidTag as e:
            raise ValueError("Decryption failed - invalid key, context or tampered data") from e

        return plaintext.decode()


def is_encrypted(value: Optional[str]) -> bool:
    """True when a setting value is an ``enc:`` token."""
    return bool(value) and value.startswith(ENCRYPTED_PREFIX)


def encrypt_secret(plaintext: str, key_material: str, context: Optional[str] = None) -> str:
    """Encrypt a secret with the given key material."""
    return SecretEncryption(key_material).encrypt(plaintext, context=context)


def decrypt_secret(token: str, key_material: str, context: Optional[str] = None) -> str:
    """Decrypt an ``enc:`` token with the given key material."""
    return SecretEncryption(key_material).decrypt(token, context=context)
