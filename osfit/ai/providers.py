"""
AI Provider API Implementations

This module contains the API call implementations for each AI provider:
- Gemini (generateContent)
- Groq (OpenAI-compatible chat completions)

Each function takes an AIService instance, a prompt and an optional system
message, and returns the text response.
"""

from typing import Any, Optional
import httpx

from osfit.logger import get_logger
from osfit.ai.exceptions import AIServiceError

logger = get_logger(__name__)


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (total timeout) or a dict with
            connect, write, read, pool keys

    Returns:
        httpx.Timeout object
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 10.0),
            write=timeout_config.get('write', 60.0),
            read=timeout_config.get('read', 120.0),
            pool=timeout_config.get('pool', 10.0),
        )
    else:
        timeout_value = float(timeout_config) if timeout_config else 120.0
        return httpx.Timeout(
            connect=10.0,
            write=60.0,
            read=timeout_value,
            pool=10.0,
        )


def handle_http_error(e: httpx.HTTPStatusError, provider: str):
    """Raise an AIServiceError carrying the provider's own error message."""
    status_code = e.response.status_code
    error_text = "Unknown error"

    try:
        error_json = e.response.json()
        if isinstance(error_json, dict) and "error" in error_json:
            error_detail = error_json["error"]
            if isinstance(error_detail, dict):
                error_text = error_detail.get("message", str(error_detail))
            else:
                error_text = str(error_detail)
    except ValueError:
        error_text = e.response.text[:500]

    raise AIServiceError(
        f"{provider} API error ({status_code}): {error_text}",
        code="provider_http_error",
        details={"provider": provider, "status_code": status_code},
    )


def call_gemini_api(service, prompt: str, system_message: Optional[str] = None) -> str:
    """Call Gemini API."""
    provider_config = service.get_provider_config('gemini')
    api_key = service.get_api_key('gemini')
    model = service._get_model(provider_config, 'gemini-2.5-flash')
    timeout = provider_config.get('timeout', 120)
    base_url = provider_config.get('api_url', 'https://generativelanguage.googleapis.com/v1beta/models')

    url = f"{base_url.rstrip('/')}/{model}:generateContent"

    # Gemini receives the system prompt folded into the single user turn
    full_prompt = f"{system_message}\n\n{prompt}" if system_message else prompt

    body = {
        "contents": [{
            "parts": [{
                "text": full_prompt
            }]
        }],
        "generationConfig": {
            "maxOutputTokens": 8192,
        }
    }

    logger.debug(f"Calling Gemini API: {model}")

    try:
        with service.http_client(timeout=get_httpx_timeout(timeout)) as client:
            response = client.post(url, params={"key": api_key}, json=body)
            response.raise_for_status()

            result = response.json()

            usage_metadata = result.get('usageMetadata', {})
            prompt_tokens = usage_metadata.get('promptTokenCount', 0)
            completion_tokens = usage_metadata.get('candidatesTokenCount', 0)

            # Fallback: calculate from total if candidatesTokenCount is missing
            if completion_tokens == 0 and prompt_tokens > 0:
                total_tokens = usage_metadata.get('totalTokenCount', 0)
                if total_tokens > prompt_tokens:
                    completion_tokens = total_tokens - prompt_tokens

            service._last_token_usage = {
                'prompt_tokens': prompt_tokens,
                'completion_tokens': completion_tokens,
            }
            service.accumulate_tokens()

            candidates = result.get('candidates') or []
            if candidates:
                parts = candidates[0].get('content', {}).get('parts') or []
                if parts:
                    return ''.join(part.get('text', '') for part in parts)

            raise AIServiceError("Unexpected Gemini API response format", code="malformed_response")

    except httpx.HTTPStatusError as e:
        logger.error(f"Gemini API HTTP error: {e.response.status_code}")
        handle_http_error(e, "Gemini")
    except httpx.TimeoutException:
        raise AIServiceError("Gemini API request timeout", code="timeout")
    except AIServiceError:
        raise
    except Exception as e:
        logger.error(f"Gemini API call failed: {e}")
        raise AIServiceError(f"Gemini API call failed: {e}")


def call_groq_api(service, prompt: str, system_message: Optional[str] = None) -> str:
    """Call Groq's OpenAI-compatible chat completions API."""
    provider_config = service.get_provider_config('groq')
    api_key = service.get_api_key('groq')
    model = service._get_model(provider_config, 'openai/gpt-oss-120b')
    timeout = provider_config.get('timeout', 120)
    api_url = provider_config.get('api_url', 'https://api.groq.com/openai/v1/chat/completions')

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json"
    }

    messages = []
    if system_message:
        messages.append({"role": "system", "content": system_message})
    messages.append({"role": "user", "content": prompt})

    body = {
        "model": model,
        "messages": messages,
        "temperature": 0.7,
        "max_completion_tokens": 8192,
    }

    logger.debug(f"  Calling Groq API (model: {model})...")

    try:
        with service.http_client(timeout=get_httpx_timeout(timeout)) as client:
            response = client.post(api_url, headers=headers, json=body)
            response.raise_for_status()

            result = response.json()

            usage = result.get('usage', {})
            service._last_token_usage = {
                'prompt_tokens': usage.get('prompt_tokens', 0),
                'completion_tokens': usage.get('completion_tokens', 0),
            }
            service.accumulate_tokens()

            if 'choices' in result and len(result['choices']) > 0:
                content = result['choices'][0]['message'].get('content') or ''
                logger.debug(f"  Received {len(content)} chars from Groq (tokens: {service._last_token_usage})")
                return content

            raise AIServiceError("No content in Groq response", code="malformed_response")

    except httpx.HTTPStatusError as e:
        handle_http_error(e, "Groq")
    except httpx.TimeoutException:
        raise AIServiceError("Groq API request timeout", code="timeout")
    except AIServiceError:
        raise
    except Exception as e:
        raise AIServiceError(f"Groq API call failed: {e}")
