import json

from osfit import i18n
from osfit import language_codes as lc


def flat_keys(lang):
    with open(i18n.LOCALES_DIR / f"{lang}.json", encoding="utf-8") as f:
        return {key for key, value in json.load(f).items() if isinstance(value, str)}


def test_every_language_pack_has_the_same_ui_keys():
    expected = flat_keys("en")
    assert len(expected) == 18
    for code in i18n.SUPPORTED_LANGUAGES:
        assert flat_keys(code) == expected, code


def test_supported_languages_match_language_names():
    assert set(i18n.SUPPORTED_LANGUAGES) == set(lc.LANGUAGE_NAMES)


def test_static_translation_is_strict():
    assert i18n.get_static_translation("newChat", "ja") == "新しいチャット"
    assert i18n.get_static_translation("newChat", "it") is None
    assert i18n.get_static_translation("errors.unauthorized", "es") is None
    assert i18n.get_static_translation("doesNotExist", "es") is None


def test_translation_keys():
    assert i18n.is_translation_key("newChat")
    assert i18n.is_translation_key("errors.unauthorized")
    assert not i18n.is_translation_key("Hello")
    assert not i18n.is_translation_key("")


def test_get_translation_falls_back_to_english_then_key():
    assert i18n.get_translation("newChat", "es") == "Nuevo chat"
    assert i18n.get_translation("errors.unauthorized", "es") == "Unauthorized"
    assert i18n.get_translation("no.such.key", "es") == "no.such.key"
    assert i18n.get_translation("errors.invalidMode", "en", mode="turbo") == "Invalid mode: turbo"


def test_normalize_language_code():
    assert i18n.normalize_language_code("JA") == "ja"
    assert i18n.normalize_language_code("zh-CN") == "zh"
    assert i18n.normalize_language_code("pt_BR") == "pt"
    assert i18n.normalize_language_code("it") == "en"
    assert i18n.normalize_language_code("") == "en"


def test_ui_strings_fill_missing_keys_from_english():
    strings = i18n.get_ui_strings("fr")
    assert strings["newChat"] == "Nouveau chat"
    assert "errors" not in strings
    assert set(strings) == flat_keys("en")


def test_language_codes():
    assert lc.get_language_name("zh-CN") == "Chinese"
    assert lc.get_language_name("xx") is None
    assert lc.languages_match("en", "en-US")
    assert not lc.languages_match("en", "en-US", strict=True)
    assert lc.get_speech_code("ja") == "ja-JP"
    assert lc.get_speech_code("xx") == "en-US"
