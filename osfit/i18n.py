"""
Internationalization (i18n) module for OSFIT.

This module holds the compiled-in UI string table. Each language pack is a JSON
file under web/locales/ keyed by UI string key (e.g. 'newChat'). It serves two
callers: API responses that need a localized message, and the static tier of
the translation pipeline, which must only answer when the target language pack
really contains the key.

Note: Log messages are NOT translated - they remain in English for debugging purposes.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from osfit.language_codes import get_speech_code
from osfit.logger import get_logger

logger = get_logger(__name__)

# Language pack directory
LOCALES_DIR = Path(__file__).parent / "web" / "locales"

# Default language
DEFAULT_LANGUAGE = "en"

# Supported languages with their display names
SUPPORTED_LANGUAGES = {
    "en": {"name": "English", "native_name": "English"},
    "es": {"name": "Spanish", "native_name": "Español"},
    "fr": {"name": "French", "native_name": "Français"},
    "de": {"name": "German", "native_name": "Deutsch"},
    "hi": {"name": "Hindi", "native_name": "हिन्दी"},
    "zh": {"name": "Chinese", "native_name": "中文"},
    "ja": {"name": "Japanese", "native_name": "日本語"},
    "ko": {"name": "Korean", "native_name": "한국어"},
    "pt": {"name": "Portuguese", "native_name": "Português"},
    "ru": {"name": "Russian", "native_name": "Русский"},
    "ar": {"name": "Arabic", "native_name": "العربية"},
    "bn": {"name": "Bengali", "native_name": "বাংলা"},
}

# Cache for loaded language packs
_language_cache: Dict[str, Dict[str, Any]] = {}


def load_language(lang_code: str) -> Dict[str, Any]:
    """
    Load a language pack from JSON file.

    Unknown or unreadable packs fall back to the default language.

    Args:
        lang_code: The language code (e.g., 'en', 'ja')

    Returns:
        Dictionary containing all translations for the language
    """
    if lang_code in _language_cache:
        return _language_cache[lang_code]

    lang_code = normalize_language_code(lang_code)

    if lang_code in _language_cache:
        return _language_cache[lang_code]

    lang_file = LOCALES_DIR / f"{lang_code}.json"

    if not lang_file.exists():
        logger.debug(f"Language file not found: {lang_file}, falling back to {DEFAULT_LANGUAGE}")
        if lang_code != DEFAULT_LANGUAGE:
            return load_language(DEFAULT_LANGUAGE)
        return {}

    try:
        with open(lang_file, 'r', encoding='utf-8') as f:
            translations = json.load(f)
            _language_cache[lang_code] = translations
            logger.debug(f"Loaded language pack: {lang_code}")
            return translations
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load language file {lang_file}: {e}")
        if lang_code != DEFAULT_LANGUAGE:
            return load_language(DEFAULT_LANGUAGE)
        return {}


def normalize_language_code(lang_code: str) -> str:
    """
    Normalize a language code to match our supported languages.

    Args:
        lang_code: Raw language code (e.g., 'ja', 'JA', 'zh-CN', 'pt_BR')

    Returns:
        Normalized language code (e.g., 'zh'), or the default language when
        nothing matches
    """
    if not lang_code:
        return DEFAULT_LANGUAGE

    lang_lower = lang_code.lower().replace('_', '-')

    if lang_lower in SUPPORTED_LANGUAGES:
        return lang_lower

    # Region variants map onto the base pack (e.g., 'zh-CN' -> 'zh')
    lang_prefix = lang_lower.split('-')[0]
    if lang_prefix in SUPPORTED_LANGUAGES:
        return lang_prefix

    return DEFAULT_LANGUAGE


def is_supported_language(lang_code: str) -> bool:
    """True when a language pack ships for this exact code."""
    return bool(lang_code) and lang_code in SUPPORTED_LANGUAGES


def get_nested_value(data: Dict[str, Any], key_path: str) -> Optional[str]:
    """
    Get a value from a nested dictionary using dot notation.

    Args:
        data: The dictionary to search
        key_path: Dot-separated key path (e.g., 'errors.unauthorized')

    Returns:
        The value if found, None otherwise
    """
    keys = key_path.split('.')
    current = data

    for key in keys:
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return None

    return current if isinstance(current, str) else None


def is_translation_key(key: str) -> bool:
    """True when ``key`` names a string in the default-language pack."""
    if not isinstance(key, str) or not key:
        return False
    return get_nested_value(load_language(DEFAULT_LANGUAGE), key) is not None


def get_static_translation(key: str, lang: str) -> Optional[str]:
    """
    Strict lookup of a UI string in one language pack.

    Unlike get_translation this never falls back to another language: it
    returns None unless ``lang`` ships a non-empty value for ``key`` that is
    not just the key echoed back.
    """
    if not is_supported_language(lang):
        return None
    value = get_nested_value(load_language(lang), key)
    if not value or not value.strip() or value == key:
        return None
    return value


def get_translation(key: str, lang: str = DEFAULT_LANGUAGE, **kwargs) -> str:
    """
    Get a translated string for the given key and language.

    Args:
        key: The translation key (dot notation, e.g., 'errors.unauthorized')
        lang: The language code (default: 'en')
        **kwargs: Optional format arguments for string interpolation

    Returns:
        The translated string, or the key itself if not found
    """
    lang = normalize_language_code(lang)
    translations = load_language(lang)

    value = get_nested_value(translations, key)

    # Fallback to English if not found and not already English
    if value is None and lang != DEFAULT_LANGUAGE:
        value = get_nested_value(load_language(DEFAULT_LANGUAGE), key)

    if value is None:
        logger.debug(f"Translation not found for key: {key} (lang: {lang})")
        return key

    if kwargs:
        try:
            value = value.format(**kwargs)
        except KeyError as e:
            logger.warning(f"Missing interpolation key {e} for translation: {key}")

    return value


# Alias for convenience
t = get_translation


def get_available_languages() -> List[Dict[str, Any]]:
    """
    Get a list of available languages.

    Returns:
        List of dictionaries with language info
    """
    languages = []
    for code, info in SUPPORTED_LANGUAGES.items():
        lang_file = LOCALES_DIR / f"{code}.json"
        languages.append({
            "code": code,
            "name": info["name"],
            "native_name": info["native_name"],
            "speech_code": get_speech_code(code),
            "available": lang_file.exists()
        })
    return languages


def get_ui_strings(lang: str = DEFAULT_LANGUAGE) -> Dict[str, str]:
    """
    Flat UI strings for a language, with missing keys filled from English.
    Nested sections (API error messages) are left out.
    """
    defaults = load_language(DEFAULT_LANGUAGE)
    strings = {key: value for key, value in defaults.items() if isinstance(value, str)}
    if normalize_language_code(lang) != DEFAULT_LANGUAGE:
        for key, value in load_language(lang).items():
            if key in strings and isinstance(value, str) and value.strip():
                strings[key] = value
    return strings


def clear_cache() -> None:
    """Clear the language cache (useful for development/testing)."""
    global _language_cache
    _language_cache = {}
    logger.debug("Language cache cleared")
