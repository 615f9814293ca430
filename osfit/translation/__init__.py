"""
Translation module - Multi-tier translation resolution

This module provides:
- TranslationPipeline: ordered tier fold (identity, static, cache,
  localization engine, generative fallback, passthrough)
- TranslationCache: injectable in-process cache with optional LRU bound
- LingoClient: Lingo.dev localization engine client
"""

from osfit.translation.cache import TranslationCache
from osfit.translation.localization import LingoClient, LocalizationError, localize_object
from osfit.translation.tiers import (
    Resolution,
    ResolutionTier,
    TranslationRequest,
)
from osfit.translation.pipeline import (
    TranslationPipeline,
    get_default_pipeline,
    reset_default_pipeline,
    translate_text,
    translate_ui,
    translate_ui_batch,
)
