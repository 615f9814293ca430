"""
Translation Resolution Pipeline

Resolves a UI string key or freeform text to a target language by trying, in
order: identity, the compiled-in language packs, the in-process cache, the
localization engine and the generative AI fallback. A failing tier is logged
and skipped. When every tier comes up empty the original text is returned.
"""

import dataclasses
from typing import Dict, List, Optional

from osfit.config import DEFAULT_SOURCE_LANGUAGE, get_section
from osfit.credentials.overlay import EffectiveCredentials
from osfit.credentials.vault import get_credentials_for_user
from osfit.logger import get_logger
from osfit import language_codes as lc
from osfit.translation.cache import DEFAULT_HASH_THRESHOLD, TranslationCache
from osfit.translation.tiers import (
    CacheTier,
    GenerateFn,
    GenerativeTier,
    IdentityTier,
    LocalizationTier,
    LocalizeFn,
    Resolution,
    ResolutionTier,
    StaticTier,
    Tier,
    TranslationRequest,
)

logger = get_logger(__name__)


def _system_credentials() -> EffectiveCredentials:
    return get_credentials_for_user(None)


def _default_localize(content, source_locale, target_locale, api_key):
    from osfit.translation.localization import localize_object
    return localize_object(content, source_locale, target_locale, api_key)


def _default_generate(text, target_language, source_language, credentials):
    from osfit.ai.service import generate_translation
    return generate_translation(text, target_language, source_language, credentials)


class TranslationPipeline:
    """
    Ordered tier fold with a shared cache.

    The localization and generative collaborators are injectable; by default
    they call Lingo.dev and the configured AI provider.
    """

    def __init__(
        self,
        cache: Optional[TranslationCache] = None,
        localize: Optional[LocalizeFn] = None,
        generate: Optional[GenerateFn] = None,
    ):
        self.cache = cache if cache is not None else TranslationCache()
        self.localize = localize or _default_localize
        self.generate = generate or _default_generate
        self.tiers: List[Tier] = [
            IdentityTier(),
            StaticTier(),
            CacheTier(self.cache),
            LocalizationTier(self.localize),
            GenerativeTier(self.generate),
        ]

    def resolve(self, request: TranslationRequest) -> Resolution:
        """
        Resolve one request. Only malformed input raises (``TypeError``);
        tier failures fall through to the next tier.
        """
        for field in ("text_or_key", "target_language", "source_language"):
            if not isinstance(getattr(request, field), str):
                raise TypeError(f"{field} must be a string")

        if request.credentials is None:
            request = dataclasses.replace(request, credentials=_system_credentials())

        for tier in self.tiers:
            try:
                value = tier.attempt(request)
            except Exception as e:
                logger.warning(
                    f"{tier.name} tier failed ({request.source_language} -> {request.target_language}): {e}"
                )
                continue

            if value is None:
                continue

            if tier.remote:
                self.cache.set(request.target_language, request.source_text, value)
            logger.debug(f"Resolved '{request.text_or_key[:40]}' for {request.target_language} via {tier.name}")
            return Resolution(text=value, tier=tier.hit)

        return Resolution(text=request.source_text, tier=ResolutionTier.FALLBACK)

    def translate_text(self, text: str, target_language: str, source_language: str = DEFAULT_SOURCE_LANGUAGE,
                       credentials: Optional[EffectiveCredentials] = None) -> str:
        """Freeform text, generative fallback included."""
        return self.resolve(TranslationRequest(
            text_or_key=text,
            target_language=target_language,
            source_language=source_language,
            credentials=credentials,
        )).text

    def translate_ui(self, key: str, lang: str,
                     credentials: Optional[EffectiveCredentials] = None) -> Resolution:
        """A UI key (or short UI text); never uses the generative tier."""
        return self.resolve(TranslationRequest(
            text_or_key=key,
            target_language=lang,
            allow_generative=False,
            credentials=credentials,
        ))

    def translate_ui_batch(self, strings: Dict[str, str], lang: str,
                           credentials: Optional[EffectiveCredentials] = None) -> Dict[str, str]:
        """
        Localize a whole ``{key: english_text}`` table with one engine call.

        Returns the input unchanged for the default language, without a
        localization credential, or when the call fails. Keys the engine
        leaves out keep their English value.
        """
        if not isinstance(strings, dict) or not all(isinstance(v, str) for v in strings.values()):
            raise TypeError("strings must be a mapping of str to str")
        if not isinstance(lang, str):
            raise TypeError("lang must be a string")

        if not strings or lc.languages_match(lang, DEFAULT_SOURCE_LANGUAGE):
            return dict(strings)

        if credentials is None:
            credentials = _system_credentials()
        if credentials.lingo is None:
            return dict(strings)

        try:
            translated = self.localize(dict(strings), DEFAULT_SOURCE_LANGUAGE, lang, credentials.lingo.key)
        except Exception as e:
            logger.warning(f"Batch localization failed for {lang}, returning English: {e}")
            return dict(strings)

        result = {}
        for key, source in strings.items():
            value = translated.get(key)
            if isinstance(value, str) and value.strip():
                result[key] = value
                self.cache.set(lang, source, value)
            else:
                result[key] = source
        return result


_default_pipeline: Optional[TranslationPipeline] = None


def get_default_pipeline() -> TranslationPipeline:
    """Process-wide pipeline whose cache is shared by every request."""
    global _default_pipeline
    if _default_pipeline is None:
        section = get_section("translation")
        cache = TranslationCache(
            max_entries=section.get("cache_max_entries"),
            hash_threshold=section.get("cache_hash_threshold") or DEFAULT_HASH_THRESHOLD,
        )
        _default_pipeline = TranslationPipeline(cache=cache)
    return _default_pipeline


def reset_default_pipeline() -> None:
    """Drop the shared pipeline so the next request rebuilds it from config."""
    global _default_pipeline
    _default_pipeline = None


def translate_text(text: str, target_language: str, source_language: str = DEFAULT_SOURCE_LANGUAGE,
                   credentials: Optional[EffectiveCredentials] = None) -> str:
    return get_default_pipeline().translate_text(text, target_language, source_language, credentials)


def translate_ui(key: str, lang: str, credentials: Optional[EffectiveCredentials] = None) -> str:
    return get_default_pipeline().translate_ui(key, lang, credentials).text


def translate_ui_batch(strings: Dict[str, str], lang: str,
                       credentials: Optional[EffectiveCredentials] = None) -> Dict[str, str]:
    return get_default_pipeline().translate_ui_batch(strings, lang, credentials)
