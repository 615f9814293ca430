"""Settings management API routes."""

from __future__ import annotations

import copy
from typing import Any, Dict

from flask import Blueprint, jsonify, request, g

import osfit.config as config
from osfit.config import (
    API_KEY_PLACEHOLDER,
    BUILTIN_PROVIDERS,
    BUILTIN_PROVIDER_DISPLAY_NAMES,
    PROVIDER_DEFAULTS,
)
from osfit.logger import get_logger, LOG_MODES, _clear_log_mode_cache
from osfit.translation import reset_default_pipeline
from osfit import i18n

settings_bp = Blueprint("settings", __name__)
logger = get_logger(__name__)

# Sections whose api_key may hold a system-wide credential
KEYED_SECTIONS = list(BUILTIN_PROVIDERS) + ["lingo"]
MASKED_KEY = "********"
MAX_MODELS = 5


def _mask_keys(current_config: Dict[str, Any]) -> Dict[str, Any]:
    masked = copy.deepcopy(current_config)
    for section in KEYED_SECTIONS:
        section_config = masked.get(section)
        if isinstance(section_config, dict):
            api_key = section_config.get("api_key")
            if api_key and api_key != API_KEY_PLACEHOLDER:
                section_config["api_key"] = MASKED_KEY
    return masked


@settings_bp.get("/")
def get_settings():
    """Return current system configuration with default values merged."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    try:
        current_config = config.load_config()

        # Merge defaults for sections that are missing or incomplete
        for section in KEYED_SECTIONS + ["translation", "streaming"]:
            current_config[section] = config.get_section(section, current_config)
        current_config.setdefault("ai_provider", config.DEFAULT_CONFIG["ai_provider"])
        current_config.setdefault("log_mode", config.DEFAULT_CONFIG["log_mode"])

        logger.debug("Settings retrieved with defaults merged")

        return jsonify({
            "config": _mask_keys(current_config),
            "meta": {
                "builtin_providers": [
                    {"id": p, "name": BUILTIN_PROVIDER_DISPLAY_NAMES[p]}
                    for p in BUILTIN_PROVIDERS
                ],
                "provider_defaults": PROVIDER_DEFAULTS,
                "log_modes": list(LOG_MODES),
            }
        })
    except Exception as e:
        logger.error(f"Failed to retrieve settings: {e}")
        return jsonify({"error": i18n.get_translation("errors.failedToRetrieveSettings", lang=lang)}), 500


@settings_bp.put("/")
def update_settings():
    """
    Update system configuration. Restricted to the user ids listed in
    OSFIT_ADMIN_USERS.
    """
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    if not g.user_id:
        return jsonify({"error": i18n.get_translation("errors.unauthorized", lang=lang)}), 401
    if g.user_id not in config.get_admin_user_ids():
        logger.warning(f"User {g.user_id} tried to update settings without admin rights")
        return jsonify({"error": i18n.get_translation("errors.forbidden", lang=lang)}), 403

    data = request.get_json(silent=True)
    if data is None:
        return jsonify({"error": i18n.get_translation("errors.invalidJson", lang=lang)}), 400
    if not isinstance(data, dict) or "config" not in data:
        return jsonify({"error": i18n.get_translation("errors.configMissing", lang=lang)}), 400

    new_config = data["config"]
    validation_error = validate_config(new_config)
    if validation_error:
        return jsonify({"error": validation_error}), 400

    try:
        # Merge with existing config to preserve any fields not in the request
        current_config = config.load_config()

        for section in KEYED_SECTIONS + ["translation", "streaming"]:
            if section not in new_config:
                continue
            incoming = dict(new_config[section])
            # A masked key echoed back from GET keeps the stored key
            if incoming.get("api_key") == MASKED_KEY:
                incoming.pop("api_key")
            if "model" in incoming and "models" not in incoming:
                model = incoming.pop("model")
                incoming["models"] = [model] if model else []
            if "models" in incoming:
                incoming["models"] = [m for m in incoming["models"] if m and isinstance(m, str)]
            merged = current_config.get(section) if isinstance(current_config.get(section), dict) else {}
            merged.update(incoming)
            current_config[section] = merged

        for key in ("ai_provider", "log_mode"):
            if key in new_config:
                current_config[key] = new_config[key]

        config.save_config(current_config)
    except Exception as e:
        logger.error(f"Failed to update settings: {e}")
        return jsonify({"error": i18n.get_translation("errors.failedToUpdateSettings", lang=lang)}), 500

    # Clear log mode cache to ensure new log mode takes effect
    _clear_log_mode_cache()
    # Rebuild the shared pipeline so a new cache bound applies
    reset_default_pipeline()

    logger.info("Settings updated successfully")
    return jsonify({"message": "Settings updated successfully", "config": _mask_keys(current_config)})


def validate_config(config_dict: Any) -> str | None:
    """Validate configuration structure and return error message if invalid."""
    if not isinstance(config_dict, dict):
        return "Configuration must be an object"

    if "ai_provider" in config_dict and config_dict["ai_provider"] not in BUILTIN_PROVIDERS:
        return f"Invalid AI provider: {config_dict['ai_provider']}"

    if "log_mode" in config_dict and config_dict["log_mode"] not in LOG_MODES:
        return f"log_mode must be one of: {', '.join(LOG_MODES)}"

    for section in KEYED_SECTIONS:
        if section not in config_dict:
            continue
        section_config = config_dict[section]
        if not isinstance(section_config, dict):
            return f"{section} config must be an object"

        if "api_key" in section_config and not isinstance(section_config["api_key"], str):
            return f"{section} api_key must be a string"

        api_url = section_config.get("api_url")
        if api_url and not isinstance(api_url, str):
            return f"{section} api_url must be a string"

        if "models" in section_config:
            models = section_config["models"]
            if not isinstance(models, list):
                return f"{section} models must be an array"
            if len([m for m in models if m and isinstance(m, str)]) > MAX_MODELS:
                return f"{section} can have at most {MAX_MODELS} models"

        if "max_retries" in section_config:
            retries = section_config["max_retries"]
            if not isinstance(retries, int) or isinstance(retries, bool) or retries < 1:
                return f"{section} max_retries must be at least 1"

        if "timeout" in section_config:
            timeout = section_config["timeout"]
            if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
                return f"{section} timeout must be a positive number"

    streaming = config_dict.get("streaming")
    if streaming is not None:
        if not isinstance(streaming, dict):
            return "streaming config must be an object"
        interval = streaming.get("base_interval_ms", 0)
        if not isinstance(interval, (int, float)) or isinstance(interval, bool) or interval < 0:
            return "streaming base_interval_ms must be a non-negative number"

    translation = config_dict.get("translation")
    if translation is not None:
        if not isinstance(translation, dict):
            return "translation config must be an object"
        max_entries = translation.get("cache_max_entries")
        if max_entries is not None and (not isinstance(max_entries, int) or max_entries < 1):
            return "translation cache_max_entries must be a positive integer or null"
        threshold = translation.get("cache_hash_threshold", 1)
        if not isinstance(threshold, int) or threshold < 1:
            return "translation cache_hash_threshold must be a positive integer"

    return None


@settings_bp.get("/translations")
def get_translations():
    """Return UI strings for the requested language (for the frontend)."""
    try:
        lang = i18n.normalize_language_code(request.args.get("lang", i18n.DEFAULT_LANGUAGE))
        return jsonify({
            "translations": i18n.get_ui_strings(lang),
            "lang": lang,
            "available_languages": i18n.get_available_languages()
        })
    except Exception as e:
        logger.error(f"Failed to load translations: {e}")
        return jsonify({"error": "Failed to load translations", "translations": {}}), 500


@settings_bp.get("/languages")
def get_languages():
    """Supported UI languages with their names."""
    return jsonify({"languages": i18n.get_available_languages(), "default": i18n.DEFAULT_LANGUAGE})
