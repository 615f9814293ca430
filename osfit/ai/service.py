"""
AI Service Module

This module provides the main AI service:
- AIService class for routing prompts to the selected provider
- Direct-generation language instructions
- Error handling and retry logic

For provider-specific API implementations, see ai/providers.py
"""

import time
from typing import Any, Callable, Dict, Optional, Tuple

import httpx

from osfit.config import BUILTIN_PROVIDERS, DEFAULT_SYSTEM_MESSAGE, get_prompt, get_section, load_config
from osfit.credentials.overlay import EffectiveCredentials
from osfit.logger import get_logger
from osfit import language_codes as lc
from osfit.ai.exceptions import AIServiceError

logger = get_logger(__name__)


def get_language_instruction(language: Optional[str]) -> str:
    """
    Instruction appended to a system prompt so the model answers in ``language``.

    Returns an empty string for English. Unknown codes are passed through as
    the language name.
    """
    if not language or lc.extract_base_language(language) == 'en':
        return ''
    name = lc.get_language_name(language) or language
    return get_prompt('language_instruction')['prompt'].format(language_name=name)


class AIService:
    """AI service for generation and translation."""

    def __init__(
        self,
        credentials: EffectiveCredentials,
        provider_override: Optional[str] = None,
        model_override: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = load_config()
        self.credentials = credentials
        self.provider = provider_override or credentials.generative_provider()
        self.model_override = model_override
        self.transport = transport
        self._sleep = sleep
        # Token usage tracking
        self._last_token_usage = {'prompt_tokens': 0, 'completion_tokens': 0}
        self.total_prompt_tokens = 0
        self.total_completion_tokens = 0

        if self.provider is None:
            raise AIServiceError(
                "No AI provider key configured. Add a Gemini or Groq API key in Settings.",
                code="ai_config_missing",
            )
        if self.provider not in BUILTIN_PROVIDERS:
            raise AIServiceError(f"Unsupported AI provider: {self.provider}", code="ai_config_error")

        logger.info(
            f"Initialized AI service with provider: {self.provider} "
            f"(key source: {self.credentials.sources()[self.provider]})"
        )

    def get_provider_config(self, provider: str) -> Dict[str, Any]:
        return get_section(provider, self.config)

    def get_api_key(self, provider: str) -> str:
        credential = self.credentials.for_service(provider)
        if credential is None:
            raise AIServiceError(
                f"{provider.capitalize()} API key is required",
                code="ai_config_missing",
                details={"provider": provider, "missing_field": "api_key"},
            )
        return credential.key

    def http_client(self, timeout: httpx.Timeout) -> httpx.Client:
        return httpx.Client(timeout=timeout, transport=self.transport)

    def _get_model(self, provider_config: Dict[str, Any], default_model: str = "") -> str:
        """
        Get the model to use.

        Priority:
        1. model_override (if set)
        2. First model from 'models' array
        3. default_model
        """
        if self.model_override:
            return self.model_override

        models = provider_config.get('models', [])
        if models and isinstance(models, list) and models[0]:
            return models[0]

        return default_model

    def get_total_token_usage(self) -> Dict[str, int]:
        """Get accumulated token usage."""
        return {
            'prompt_tokens': self.total_prompt_tokens,
            'completion_tokens': self.total_completion_tokens,
        }

    def accumulate_tokens(self):
        """Add last call's tokens to total."""
        self.total_prompt_tokens += self._last_token_usage.get('prompt_tokens', 0)
        self.total_completion_tokens += self._last_token_usage.get('completion_tokens', 0)

    def generate(self, prompt: str, system_message: Optional[str] = None,
                 max_retries: Optional[int] = None) -> str:
        """
        Send a prompt to the provider, retrying recoverable failures.

        Raises:
            AIServiceError: when every attempt fails or the failure is not recoverable.
        """
        if max_retries is None:
            max_retries = self.get_provider_config(self.provider).get('max_retries', 3)
        max_retries = max(1, int(max_retries))
        last_error: Optional[Exception] = None

        for attempt in range(max_retries):
            try:
                if attempt > 0:
                    logger.info(f"  Retry attempt {attempt + 1}/{max_retries}")
                return self._call_ai_api_text(prompt, system_message)
            except AIServiceError as e:
                last_error = e
                should_retry, wait_time = self._categorize_error(e, attempt)

                if should_retry and attempt < max_retries - 1:
                    logger.warning(f"  Attempt {attempt + 1} failed: {e}. Waiting {wait_time}s before retry...")
                    self._sleep(wait_time)
                elif not should_retry:
                    logger.error(f"  Non-recoverable error: {e}")
                    break

        raise last_error

    def analyze(
        self,
        system_prompt: str,
        user_message: str,
        context: Optional[str] = None,
        target_language: Optional[str] = None,
    ) -> str:
        """
        Answer ``user_message`` under ``system_prompt``, generating directly
        in ``target_language`` instead of translating afterwards.
        """
        enhanced_system_prompt = system_prompt + get_language_instruction(target_language)
        prompt = f"Context:\n{context}\n\nUser: {user_message}" if context else f"User: {user_message}"
        return self.generate(prompt, system_message=enhanced_system_prompt)

    def translate(self, text: str, target_language: str, source_language: str = 'en',
                  max_retries: Optional[int] = None) -> str:
        """Translate freeform text, keeping markdown and code intact. Returns trimmed text."""
        prompt = self._build_translation_prompt(text, source_language, target_language)
        logger.debug(f"Translating {len(text)} chars from {source_language} to {target_language}")
        translated = self.generate(prompt, system_message=DEFAULT_SYSTEM_MESSAGE, max_retries=max_retries).strip()
        if not translated:
            raise AIServiceError("Empty translation from AI provider", code="malformed_response")
        return translated

    def _build_translation_prompt(self, text: str, source_language: str, target_language: str) -> str:
        source_language_name = lc.get_language_name(source_language) or source_language
        target_language_name = lc.get_language_name(target_language) or target_language
        prompt_template = get_prompt('text_translation_prompt')['prompt']
        return prompt_template.format(
            source_language_name=source_language_name,
            target_language_name=target_language_name,
            text=text,
        )

    def _call_ai_api_text(self, prompt: str, system_message: Optional[str] = None) -> str:
        """Call the selected provider and return its raw text response."""
        from osfit.ai.providers import call_gemini_api, call_groq_api

        if self.provider == 'gemini':
            return call_gemini_api(self, prompt, system_message)
        elif self.provider == 'groq':
            return call_groq_api(self, prompt, system_message)
        raise AIServiceError(f"Unsupported AI provider: {self.provider}")

    def _categorize_error(self, error: Exception, attempt: int) -> Tuple[bool, float]:
        """
        Categorize an error and determine retry strategy.

        Returns:
            Tuple of (should_retry, wait_time_seconds)
        """
        error_str = str(error).lower()

        # Missing configuration and malformed responses will not fix themselves
        if getattr(error, 'code', None) in ('ai_config_missing', 'ai_config_error'):
            return False, 0

        # Rate limiting (429) - long backoff
        if '429' in error_str or 'rate limit' in error_str or 'too many requests' in error_str:
            wait_time = 30 * (2 ** attempt)  # 30s, 60s, 120s
            return True, min(wait_time, 300)  # Max 5 minutes

        # Authentication errors (401, 403) - don't retry
        if '401' in error_str or '403' in error_str or 'unauthorized' in error_str or 'forbidden' in error_str:
            return False, 0

        # Invalid request (400) - don't retry
        if '(400)' in error_str or 'bad request' in error_str:
            return False, 0

        # Server errors (5xx) - standard backoff
        if any(code in error_str for code in ['500', '502', '503', '504']):
            return True, 2 ** attempt

        # Timeout - retry with backoff
        if 'timeout' in error_str:
            return True, 5 * (2 ** attempt)  # 5s, 10s, 20s

        # Unknown errors - standard backoff
        return True, 2 ** attempt


def generate_translation(text: str, target_language: str, source_language: str,
                         credentials: EffectiveCredentials) -> str:
    """Generative collaborator for the translation pipeline's AI fallback."""
    # One attempt; a failure falls through to the original text
    return AIService(credentials).translate(text, target_language, source_language, max_retries=1)
