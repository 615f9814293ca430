"""
AES-256-GCM encryption for stored API keys.

Payload layout, base64 encoded: 16-byte IV | ciphertext | 16-byte auth tag.
The AES key is the SHA-256 digest of ENCRYPTION_SECRET.
"""

import base64
import hashlib
import secrets
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from osfit.config import get_encryption_secret

IV_LENGTH = 16
AUTH_TAG_LENGTH = 16


class EncryptionNotConfiguredError(RuntimeError):
    """ENCRYPTION_SECRET is not set."""


class DecryptionError(ValueError):
    """A stored key could not be decrypted (wrong secret or corrupted payload)."""


def _get_encryption_key(secret: Optional[str] = None) -> bytes:
    secret = secret if secret is not None else get_encryption_secret()
    if not secret:
        raise EncryptionNotConfiguredError("ENCRYPTION_SECRET environment variable is not set")
    return hashlib.sha256(secret.encode("utf-8")).digest()


def is_encryption_configured() -> bool:
    return bool(get_encryption_secret())


def encrypt_api_key(plaintext: str, secret: Optional[str] = None) -> str:
    aesgcm = AESGCM(_get_encryption_key(secret))
    iv = secrets.token_bytes(IV_LENGTH)
    # AESGCM appends the tag to the ciphertext
    encrypted = aesgcm.encrypt(iv, plaintext.encode("utf-8"), None)
    return base64.b64encode(iv + encrypted).decode("ascii")


def decrypt_api_key(ciphertext: str, secret: Optional[str] = None) -> str:
    aesgcm = AESGCM(_get_encryption_key(secret))
    try:
        combined = base64.b64decode(ciphertext, validate=True)
    except ValueError as e:
        raise DecryptionError(f"Stored key is not valid base64: {e}") from e

    if len(combined) < IV_LENGTH + AUTH_TAG_LENGTH:
        raise DecryptionError("Stored key payload is too short")

    iv, encrypted = combined[:IV_LENGTH], combined[IV_LENGTH:]
    try:
        return aesgcm.decrypt(iv, encrypted, None).decode("utf-8")
    except InvalidTag as e:
        raise DecryptionError("Stored key failed authentication") from e
