"""
Credentials module - Per-user encrypted API keys

This module provides:
- encryption: AES-256-GCM helpers keyed by ENCRYPTION_SECRET
- vault: store, read and delete a user's keys
- overlay: user keys over system defaults, per request
"""

from osfit.credentials.encryption import (
    DecryptionError,
    EncryptionNotConfiguredError,
    decrypt_api_key,
    encrypt_api_key,
    is_encryption_configured,
)
from osfit.credentials.overlay import (
    Credential,
    EffectiveCredentials,
    get_effective_credentials,
    resolve_credential,
)
from osfit.credentials.vault import (
    KEY_TYPES,
    UserApiKeys,
    delete_user_api_key,
    get_credentials_for_user,
    get_user_api_keys,
    get_user_key_status,
    save_user_api_keys,
)
