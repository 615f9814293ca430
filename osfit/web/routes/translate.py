"""Translation API routes."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request, g

from osfit.credentials import get_credentials_for_user
from osfit.logger import get_logger
from osfit.translation import get_default_pipeline
from osfit import i18n

translate_bp = Blueprint("translate", __name__)
logger = get_logger(__name__)


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@translate_bp.post("")
def translate_text():
    """
    Translate freeform text (AI answers, user content).

    Degraded results still return 200 with the original text; only an
    unexpected failure returns 500 with an empty translation.
    """
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    data = _json_body()
    text = data.get("text")
    target_language = data.get("targetLanguage")

    if not text or not target_language:
        return jsonify({"error": i18n.get_translation("errors.missingTextOrLanguage", lang=lang)}), 400

    try:
        credentials = get_credentials_for_user(g.user_id)
        translated = get_default_pipeline().translate_text(text, target_language, credentials=credentials)
        return jsonify({"translated": translated})
    except Exception as e:
        logger.exception(f"Translation API error: {e}")
        return jsonify({"translated": ""}), 500


@translate_bp.post("/ui")
def translate_ui_string():
    """Translate one UI key; never falls back to the generative tier."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    data = _json_body()
    key = data.get("key")
    target_language = data.get("language")

    if not key or not target_language:
        return jsonify({"error": i18n.get_translation("errors.missingKeyOrLanguage", lang=lang)}), 400

    try:
        credentials = get_credentials_for_user(g.user_id)
        resolution = get_default_pipeline().translate_ui(key, target_language, credentials=credentials)
        return jsonify({"translated": resolution.text, "tier": resolution.tier.value})
    except Exception as e:
        logger.exception(f"UI translation error: {e}")
        return jsonify({"translated": ""}), 500


@translate_bp.post("/batch")
def translate_ui_batch():
    """Localize a whole UI string table with a single engine call."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    data = _json_body()
    strings = data.get("strings")
    target_language = data.get("language")

    if not target_language:
        return jsonify({"error": i18n.get_translation("errors.missingKeyOrLanguage", lang=lang)}), 400
    if not isinstance(strings, dict) or not all(isinstance(v, str) for v in strings.values()):
        return jsonify({"error": i18n.get_translation("errors.invalidStrings", lang=lang)}), 400

    try:
        credentials = get_credentials_for_user(g.user_id)
        translations = get_default_pipeline().translate_ui_batch(strings, target_language, credentials=credentials)
        return jsonify({"translations": translations})
    except Exception as e:
        logger.exception(f"Batch translation error: {e}")
        return jsonify({"translations": {}}), 500
