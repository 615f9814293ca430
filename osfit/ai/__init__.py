"""
AI Module

This module provides the generative AI service, assistant prompts and
provider error types.
"""

from osfit.ai.exceptions import AIServiceError, ApiKeyError, is_quota_error
from osfit.ai.service import AIService, generate_translation, get_language_instruction

__all__ = [
    'AIServiceError',
    'ApiKeyError',
    'is_quota_error',
    'AIService',
    'generate_translation',
    'get_language_instruction',
]
