"""
Lingo.dev localization engine client.

Sends a flat ``{key: text}`` mapping to the engine and returns the same keys
with localized values. Used by the localization tier and by the UI batch
path, which sends a whole string table in a single call.
"""

from typing import Dict, Optional

import httpx

from osfit.config import get_section
from osfit.logger import get_logger
from osfit.ai.providers import get_httpx_timeout

logger = get_logger(__name__)

DEFAULT_LINGO_API_URL = "https://engine.lingo.dev"


class LocalizationError(Exception):
    """The localization engine failed or answered with something unusable."""


class LingoClient:
    """Minimal client for the Lingo.dev ``/i18n`` endpoint."""

    def __init__(self, api_key: str, api_url: Optional[str] = None, timeout=None,
                 transport: Optional[httpx.BaseTransport] = None):
        if not api_key:
            raise LocalizationError("Lingo.dev API key is required")
        section = get_section("lingo")
        self.api_key = api_key
        self.api_url = (api_url or section.get("api_url") or DEFAULT_LINGO_API_URL).rstrip("/")
        self.timeout = get_httpx_timeout(timeout if timeout is not None else section.get("timeout", 60))
        self.transport = transport

    def localize_object(self, content: Dict[str, str], source_locale: str, target_locale: str) -> Dict[str, str]:
        """
        Localize every value of ``content`` from ``source_locale`` to ``target_locale``.

        Raises:
            LocalizationError: on HTTP errors, timeouts or a response without a data mapping.
        """
        if not content:
            return {}

        body = {
            "params": {"fast": False},
            "locale": {"source": source_locale, "target": target_locale},
            "data": content,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json; charset=utf-8",
        }

        logger.debug(f"Localizing {len(content)} strings {source_locale} -> {target_locale}")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(f"{self.api_url}/i18n", headers=headers, json=body)
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as e:
            raise LocalizationError(
                f"Lingo.dev API error ({e.response.status_code}): {e.response.text[:500]}"
            ) from e
        except httpx.TimeoutException as e:
            raise LocalizationError("Lingo.dev request timeout") from e
        except (httpx.HTTPError, ValueError) as e:
            raise LocalizationError(f"Lingo.dev request failed: {e}") from e

        data = result.get("data") if isinstance(result, dict) else None
        if not isinstance(data, dict):
            raise LocalizationError("Unexpected Lingo.dev response format")

        return {key: value for key, value in data.items() if isinstance(value, str)}


def localize_object(content: Dict[str, str], source_locale: str, target_locale: str,
                    api_key: str) -> Dict[str, str]:
    """Localization collaborator used by the translation pipeline."""
    return LingoClient(api_key).localize_object(content, source_locale, target_locale)
