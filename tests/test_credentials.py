import base64

import pytest

from osfit import config
from osfit.core import database as db
from osfit.credentials import (
    Credential,
    DecryptionError,
    EncryptionNotConfiguredError,
    UserApiKeys,
    decrypt_api_key,
    delete_user_api_key,
    encrypt_api_key,
    get_credentials_for_user,
    get_effective_credentials,
    get_user_api_keys,
    get_user_key_status,
    is_encryption_configured,
    resolve_credential,
    save_user_api_keys,
)


# ---------------------------------------------------------------------------
# Encryption
# ---------------------------------------------------------------------------

def test_encrypt_then_decrypt():
    ciphertext = encrypt_api_key("AIza-secret-key")
    assert ciphertext != "AIza-secret-key"
    assert decrypt_api_key(ciphertext) == "AIza-secret-key"


def test_payload_layout_is_iv_ciphertext_tag():
    plaintext = "gsk_0123456789"
    payload = base64.b64decode(encrypt_api_key(plaintext))
    assert len(payload) == 16 + len(plaintext.encode()) + 16


def test_same_plaintext_encrypts_differently():
    assert encrypt_api_key("key") != encrypt_api_key("key")


def test_wrong_secret_fails_authentication():
    ciphertext = encrypt_api_key("key", secret="one")
    with pytest.raises(DecryptionError):
        decrypt_api_key(ciphertext, secret="two")


def test_tampered_payload_fails_authentication():
    payload = bytearray(base64.b64decode(encrypt_api_key("key")))
    payload[20] ^= 0xFF
    with pytest.raises(DecryptionError):
        decrypt_api_key(base64.b64encode(bytes(payload)).decode())


def test_garbage_and_short_payloads():
    with pytest.raises(DecryptionError):
        decrypt_api_key("not base64 at all!")
    with pytest.raises(DecryptionError):
        decrypt_api_key(base64.b64encode(b"short").decode())


def test_missing_secret(monkeypatch):
    monkeypatch.delenv("ENCRYPTION_SECRET")
    assert not is_encryption_configured()
    with pytest.raises(EncryptionNotConfiguredError):
        encrypt_api_key("key")


# ---------------------------------------------------------------------------
# Overlay
# ---------------------------------------------------------------------------

def test_resolve_credential_precedence():
    assert resolve_credential("user", "system") == Credential("user", "user")
    assert resolve_credential(None, "system") == Credential("system", "system")
    assert resolve_credential("", "system") == Credential("system", "system")
    assert resolve_credential(None, None) is None


def test_user_keys_mask_system_keys():
    user_keys = UserApiKeys(gemini_key="user-gemini", ai_provider="gemini")
    system = {"gemini": "sys-gemini", "groq": "sys-groq", "lingo": "sys-lingo"}

    creds = get_effective_credentials(user_keys, system)

    assert creds.gemini == Credential("user-gemini", "user")
    assert creds.groq == Credential("sys-groq", "system")
    assert creds.lingo == Credential("sys-lingo", "system")
    assert creds.sources() == {"gemini": "user", "groq": "system", "lingo": "system"}


def test_generative_provider_selection():
    only_groq = get_effective_credentials(UserApiKeys(groq_key="g", ai_provider="gemini"), {})
    assert only_groq.generative_provider() == "groq"

    both = get_effective_credentials(UserApiKeys(gemini_key="a", groq_key="b", ai_provider="groq"), {})
    assert both.generative_provider() == "groq"

    none = get_effective_credentials(None, {"lingo": "l"})
    assert none.generative_provider() is None
    assert not none.has_generative_key()


def test_default_provider_applies_to_anonymous_requests():
    creds = get_effective_credentials(None, {"gemini": "a", "groq": "b"}, default_provider="groq")
    assert creds.provider == "groq"
    assert creds.generative_provider() == "groq"


def test_reprs_never_show_keys():
    creds = get_effective_credentials(UserApiKeys(gemini_key="super-secret"), {})
    assert "super-secret" not in repr(creds)
    assert "super-secret" not in repr(UserApiKeys(gemini_key="super-secret"))


def test_unknown_service():
    with pytest.raises(ValueError):
        get_effective_credentials(None, {}).for_service("openai")


# ---------------------------------------------------------------------------
# Vault
# ---------------------------------------------------------------------------

def test_save_and_read_keys(database):
    save_user_api_keys("user-1", gemini_key="gem", lingo_key="lin", ai_provider="gemini")

    keys = get_user_api_keys("user-1")
    assert keys.gemini_key == "gem"
    assert keys.lingo_key == "lin"
    assert keys.groq_key is None
    assert keys.ai_provider == "gemini"


def test_keys_are_stored_encrypted(database):
    save_user_api_keys("user-1", gemini_key="plain-gemini-key")
    row = db.get_user_api_keys_row("user-1")
    assert row["gemini_key_encrypted"]
    assert "plain-gemini-key" not in row["gemini_key_encrypted"]


def test_status_reports_booleans_only(database):
    assert get_user_key_status("nobody") == {
        "has_gemini": False, "has_groq": False, "has_lingo": False, "ai_provider": "gemini",
    }
    save_user_api_keys("user-1", groq_key="groq-secret", ai_provider="groq")
    status = get_user_key_status("user-1")
    assert status == {"has_gemini": False, "has_groq": True, "has_lingo": False, "ai_provider": "groq"}


def test_partial_update_keeps_other_keys(database):
    save_user_api_keys("user-1", gemini_key="gem", groq_key="groq")
    save_user_api_keys("user-1", groq_key="groq-2")
    keys = get_user_api_keys("user-1")
    assert keys.gemini_key == "gem"
    assert keys.groq_key == "groq-2"


def test_empty_value_clears_key(database):
    save_user_api_keys("user-1", gemini_key="gem", lingo_key="lin")
    save_user_api_keys("user-1", gemini_key="")
    keys = get_user_api_keys("user-1")
    assert keys.gemini_key is None
    assert keys.lingo_key == "lin"


def test_delete_single_key(database):
    save_user_api_keys("user-1", gemini_key="gem", lingo_key="lin")
    assert delete_user_api_key("user-1", "lingo")
    assert get_user_key_status("user-1")["has_lingo"] is False
    assert get_user_key_status("user-1")["has_gemini"] is True


def test_invalid_key_type_and_provider(database):
    with pytest.raises(ValueError):
        delete_user_api_key("user-1", "apify")
    with pytest.raises(ValueError):
        save_user_api_keys("user-1", ai_provider="openai")


def test_users_are_isolated(database):
    save_user_api_keys("alice", gemini_key="alice-key")
    assert get_user_api_keys("bob").gemini_key is None


def test_undecryptable_key_is_treated_as_absent(database, monkeypatch):
    save_user_api_keys("user-1", gemini_key="gem")
    monkeypatch.setenv("ENCRYPTION_SECRET", "rotated-secret")
    assert get_user_api_keys("user-1").gemini_key is None


def test_credentials_for_user_overlay_system_keys(database, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "system-gemini")
    monkeypatch.setenv("LINGO_API_KEY", "system-lingo")
    save_user_api_keys("user-1", lingo_key="user-lingo")

    creds = get_credentials_for_user("user-1")
    assert creds.gemini == Credential("system-gemini", "system")
    assert creds.lingo == Credential("user-lingo", "user")

    anonymous = get_credentials_for_user(None)
    assert anonymous.lingo == Credential("system-lingo", "system")


def test_placeholder_system_key_is_ignored(database, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "YOUR_API_KEY_HERE")
    assert get_credentials_for_user(None).gemini is None


def test_configured_provider_applies_until_user_picks_one(database, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "system-gemini")
    monkeypatch.setenv("GROQ_API_KEY", "system-groq")
    settings = config.load_config()
    settings["ai_provider"] = "groq"
    config.save_config(settings)

    assert get_credentials_for_user(None).provider == "groq"

    save_user_api_keys("bob", lingo_key="bob-lingo")
    assert get_user_api_keys("bob").ai_provider is None
    assert get_credentials_for_user("bob").provider == "groq"
    assert get_user_key_status("bob")["ai_provider"] == "groq"

    save_user_api_keys("bob", ai_provider="gemini")
    assert get_credentials_for_user("bob").provider == "gemini"
    assert get_user_key_status("bob")["ai_provider"] == "gemini"
