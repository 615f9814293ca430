"""
Language code mappings and utilities.

Standards:
- ISO 639-1: 2-letter language codes (en, zh, es)
- BCP 47: Language + Region codes (en-US, zh-CN, pt-BR)

The UI ships language packs for the 12 codes in LANGUAGE_NAMES. The names are
also used to tell the AI which language to answer in.
"""

from typing import Optional

LANGUAGE_NAMES = {
    'en': 'English',
    'es': 'Spanish',
    'fr': 'French',
    'de': 'German',
    'hi': 'Hindi',
    'zh': 'Chinese',
    'ja': 'Japanese',
    'ko': 'Korean',
    'pt': 'Portuguese',
    'ru': 'Russian',
    'ar': 'Arabic',
    'bn': 'Bengali',
}

# Codes used by the browser speech recognition API
SPEECH_LANG_CODES = {
    'en': 'en-US',
    'es': 'es-ES',
    'fr': 'fr-FR',
    'de': 'de-DE',
    'hi': 'hi-IN',
    'zh': 'zh-CN',
    'ja': 'ja-JP',
    'ko': 'ko-KR',
    'pt': 'pt-BR',
    'ru': 'ru-RU',
    'ar': 'ar-SA',
    'bn': 'bn-BD',
}


def get_language_name(code: str) -> Optional[str]:
    """
    Get the English name for a language code.

    Region variants resolve through their base language, so 'pt-BR' is
    'Portuguese'.

    Examples:
        >>> get_language_name('ja')
        'Japanese'
        >>> get_language_name('pt-BR')
        'Portuguese'
        >>> get_language_name('xx') is None
        True
    """
    if not code:
        return None
    if code in LANGUAGE_NAMES:
        return LANGUAGE_NAMES[code]
    return LANGUAGE_NAMES.get(extract_base_language(code))


def extract_base_language(code: str) -> str:
    """
    Extract base language from code (remove region).

    Examples:
        >>> extract_base_language('zh-CN')
        'zh'
        >>> extract_base_language('fr')
        'fr'
    """
    return code.replace('_', '-').split('-')[0].lower()


def languages_match(code1: str, code2: str, strict: bool = False) -> bool:
    """
    Check if two language codes match.

    Args:
        code1: First language code
        code2: Second language code
        strict: If True, must match exactly. If False, base language match is ok.

    Examples:
        >>> languages_match('en', 'en-US')
        True
        >>> languages_match('en', 'en-US', strict=True)
        False
    """
    if strict:
        return code1 == code2

    return extract_base_language(code1) == extract_base_language(code2)


def get_speech_code(code: str) -> str:
    """Browser speech recognition locale for a UI language, defaulting to en-US."""
    return SPEECH_LANG_CODES.get(extract_base_language(code), SPEECH_LANG_CODES['en'])
