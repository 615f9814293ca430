"""Per-user API key routes. Responses never contain key material."""

from __future__ import annotations

from flask import Blueprint, jsonify, request, g

from osfit.config import BUILTIN_PROVIDERS
from osfit.credentials import (
    KEY_TYPES,
    delete_user_api_key,
    get_user_key_status,
    is_encryption_configured,
    save_user_api_keys,
)
from osfit.logger import get_logger
from osfit import i18n

keys_bp = Blueprint("keys", __name__)
logger = get_logger(__name__)


def _unauthorized(lang: str):
    return jsonify({"error": i18n.get_translation("errors.unauthorized", lang=lang)}), 401


@keys_bp.get("")
def get_key_status():
    """Which keys the user has stored, as booleans, plus the selected provider."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    if not g.user_id:
        return _unauthorized(lang)
    return jsonify(get_user_key_status(g.user_id))


@keys_bp.post("")
def save_keys():
    """
    Save or update keys. Only fields present in the body change; an empty
    string removes that key.
    """
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    if not g.user_id:
        return _unauthorized(lang)

    if not is_encryption_configured():
        logger.error("ENCRYPTION_SECRET is not set; refusing to store API keys")
        return jsonify({"error": i18n.get_translation("errors.encryptionNotConfigured", lang=lang)}), 500

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": i18n.get_translation("errors.invalidJson", lang=lang)}), 400

    updates = {}
    for key_type in KEY_TYPES:
        field = f"{key_type}_key"
        if field in data:
            value = data[field]
            if value is not None and not isinstance(value, str):
                return jsonify({"error": i18n.get_translation("errors.invalidJson", lang=lang)}), 400
            updates[field] = value.strip() if value else None

    if "ai_provider" in data:
        if data["ai_provider"] not in BUILTIN_PROVIDERS:
            return jsonify({"error": i18n.get_translation("errors.invalidProvider", lang=lang)}), 400
        updates["ai_provider"] = data["ai_provider"]

    try:
        save_user_api_keys(g.user_id, **updates)
    except Exception as e:
        logger.error(f"Error saving keys for user {g.user_id}: {e}")
        return jsonify({"error": i18n.get_translation("errors.failedToSaveKeys", lang=lang)}), 500

    return jsonify({"success": True})


@keys_bp.delete("")
def delete_key():
    """Remove one key. Query param: key_type (gemini, groq or lingo)."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    if not g.user_id:
        return _unauthorized(lang)

    key_type = request.args.get("key_type")
    if key_type not in KEY_TYPES:
        return jsonify({"error": i18n.get_translation("errors.invalidKeyType", lang=lang)}), 400

    try:
        delete_user_api_key(g.user_id, key_type)
    except Exception as e:
        logger.error(f"Error deleting {key_type} key for user {g.user_id}: {e}")
        return jsonify({"error": i18n.get_translation("errors.failedToDeleteKey", lang=lang)}), 500

    return jsonify({"success": True})
