"""
Per-user API key vault.

Keys are encrypted before they reach the database and decrypted only for the
request that needs them. Status queries report booleans, never key material.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from osfit.config import BUILTIN_PROVIDERS, get_system_api_keys, load_config
from osfit.core import database as db
from osfit.credentials.encryption import (
    DecryptionError,
    EncryptionNotConfiguredError,
    decrypt_api_key,
    encrypt_api_key,
)
from osfit.credentials.overlay import DEFAULT_PROVIDER, EffectiveCredentials, get_effective_credentials
from osfit.logger import get_logger

logger = get_logger(__name__)

KEY_TYPES = ("gemini", "groq", "lingo")

_UNSET = object()


@dataclass(frozen=True)
class UserApiKeys:
    gemini_key: Optional[str] = None
    groq_key: Optional[str] = None
    lingo_key: Optional[str] = None
    ai_provider: Optional[str] = None

    def __repr__(self) -> str:
        configured = [k for k in KEY_TYPES if getattr(self, f"{k}_key")]
        return f"UserApiKeys(configured={configured!r}, ai_provider={self.ai_provider!r})"


def _configured_provider(config: Dict) -> str:
    """System-wide provider choice, used until a user picks one."""
    provider = config.get("ai_provider")
    return provider if provider in BUILTIN_PROVIDERS else DEFAULT_PROVIDER


def _decrypt_column(row: Dict, key_type: str, user_id: str) -> Optional[str]:
    encrypted = row.get(f"{key_type}_key_encrypted")
    if not encrypted:
        return None
    try:
        return decrypt_api_key(encrypted)
    except (DecryptionError, EncryptionNotConfiguredError) as e:
        # A key encrypted under a rotated or missing secret is treated as absent
        logger.warning(f"Could not decrypt {key_type} key for user {user_id}: {e}")
        return None


def get_user_api_keys(user_id: str) -> UserApiKeys:
    """Decrypted keys for a user; unset keys are None."""
    row = db.get_user_api_keys_row(user_id)
    if not row:
        return UserApiKeys()

    return UserApiKeys(
        gemini_key=_decrypt_column(row, "gemini", user_id),
        groq_key=_decrypt_column(row, "groq", user_id),
        lingo_key=_decrypt_column(row, "lingo", user_id),
        ai_provider=row.get("ai_provider"),
    )


def get_user_key_status(user_id: str) -> Dict[str, object]:
    """Which keys a user has stored. Never returns the keys themselves."""
    row = db.get_user_api_keys_row(user_id) or {}
    status: Dict[str, object] = {
        f"has_{key_type}": bool(row.get(f"{key_type}_key_encrypted")) for key_type in KEY_TYPES
    }
    status["ai_provider"] = row.get("ai_provider") or _configured_provider(load_config())
    return status


def save_user_api_keys(user_id: str, gemini_key=_UNSET, groq_key=_UNSET, lingo_key=_UNSET,
                       ai_provider=_UNSET) -> None:
    """
    Store or update a user's keys.

    Only the arguments that are passed are written. An empty string or None
    clears that key.
    """
    values: Dict[str, Optional[str]] = {}
    for key_type, value in (("gemini", gemini_key), ("groq", groq_key), ("lingo", lingo_key)):
        if value is _UNSET:
            continue
        values[f"{key_type}_key_encrypted"] = encrypt_api_key(value) if value else None

    if ai_provider is not _UNSET:
        if ai_provider not in BUILTIN_PROVIDERS:
            raise ValueError(f"Unsupported AI provider: {ai_provider}")
        values["ai_provider"] = ai_provider

    if not values:
        return

    db.upsert_user_api_keys(user_id, values)
    logger.info(f"Saved API keys for user {user_id}: {sorted(values)}")


def delete_user_api_key(user_id: str, key_type: str) -> bool:
    if key_type not in KEY_TYPES:
        raise ValueError(f"Invalid key type: {key_type}")
    removed = db.clear_user_api_key(user_id, f"{key_type}_key_encrypted")
    logger.info(f"Deleted {key_type} key for user {user_id}")
    return removed


def get_credentials_for_user(user_id: Optional[str]) -> EffectiveCredentials:
    """Effective credentials for one request: stored user keys over system defaults."""
    config = load_config()
    user_keys = get_user_api_keys(user_id) if user_id else None
    return get_effective_credentials(
        user_keys,
        get_system_api_keys(config),
        default_provider=_configured_provider(config),
    )
