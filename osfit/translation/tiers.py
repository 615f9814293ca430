"""
Translation tiers.

Each tier is a small object with an ``attempt(request)`` method that returns
the translated text, ``None`` when the tier has nothing to offer (no key, no
credential, cache miss), or raises when a remote call fails. The pipeline
evaluates them in order and stops at the first value.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from osfit import i18n
from osfit import language_codes as lc
from osfit.config import DEFAULT_SOURCE_LANGUAGE
from osfit.credentials.overlay import EffectiveCredentials
from osfit.translation.cache import TranslationCache

# localize(content, source_locale, target_locale, api_key) -> translated content
LocalizeFn = Callable[[Dict[str, str], str, str, str], Dict[str, str]]
# generate(text, target_language, source_language, credentials) -> translated text
GenerateFn = Callable[[str, str, str, EffectiveCredentials], str]


class ResolutionTier(str, Enum):
    IDENTITY = "identity"
    STATIC_HIT = "static"
    CACHE_HIT = "cache"
    LOCALIZATION_HIT = "localization"
    GENERATIVE_HIT = "generative"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class TranslationRequest:
    text_or_key: str
    target_language: str
    source_language: str = DEFAULT_SOURCE_LANGUAGE
    allow_generative: bool = True
    credentials: Optional[EffectiveCredentials] = None

    @property
    def is_key(self) -> bool:
        return i18n.is_translation_key(self.text_or_key)

    @property
    def source_text(self) -> str:
        """The text to translate: the default-language string for a known key, else the input."""
        if self.is_key:
            return i18n.get_translation(self.text_or_key, i18n.DEFAULT_LANGUAGE)
        return self.text_or_key


@dataclass(frozen=True)
class Resolution:
    text: str
    tier: ResolutionTier


class Tier:
    name = "tier"
    hit = ResolutionTier.FALLBACK
    # Remote hits are written to the cache by the pipeline
    remote = False

    def attempt(self, request: TranslationRequest) -> Optional[str]:
        raise NotImplementedError


class IdentityTier(Tier):
    name = "identity"
    hit = ResolutionTier.IDENTITY

    def attempt(self, request: TranslationRequest) -> Optional[str]:
        if lc.languages_match(request.target_language, request.source_language):
            return request.source_text
        return None


class StaticTier(Tier):
    """Compiled-in language packs. Never touches the network."""

    name = "static"
    hit = ResolutionTier.STATIC_HIT

    def attempt(self, request: TranslationRequest) -> Optional[str]:
        if not request.is_key:
            return None
        # 'ja-JP', 'JA' and 'ja_JP' all read the 'ja' pack; unknown bases have no pack
        base = lc.extract_base_language(request.target_language)
        if not i18n.is_supported_language(base):
            return None
        return i18n.get_static_translation(request.text_or_key, base)


class CacheTier(Tier):
    name = "cache"
    hit = ResolutionTier.CACHE_HIT

    def __init__(self, cache: TranslationCache):
        self.cache = cache

    def attempt(self, request: TranslationRequest) -> Optional[str]:
        return self.cache.get(request.target_language, request.source_text)


class LocalizationTier(Tier):
    name = "localization"
    hit = ResolutionTier.LOCALIZATION_HIT
    remote = True

    def __init__(self, localize: LocalizeFn):
        self.localize = localize

    def attempt(self, request: TranslationRequest) -> Optional[str]:
        credential = request.credentials.lingo if request.credentials else None
        if credential is None:
            return None
        translated = self.localize(
            {"text": request.source_text},
            request.source_language,
            request.target_language,
            credential.key,
        )
        text = translated.get("text")
        return text if isinstance(text, str) and text.strip() else None


class GenerativeTier(Tier):
    name = "generative"
    hit = ResolutionTier.GENERATIVE_HIT
    remote = True

    def __init__(self, generate: GenerateFn):
        self.generate = generate

    def attempt(self, request: TranslationRequest) -> Optional[str]:
        if not request.allow_generative:
            return None
        if request.credentials is None or not request.credentials.has_generative_key():
            return None
        text = self.generate(
            request.source_text,
            request.target_language,
            request.source_language,
            request.credentials,
        )
        text = text.strip() if isinstance(text, str) else ""
        return text or None
