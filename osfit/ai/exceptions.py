"""
AI Service Exceptions

This module contains exception classes for the AI service.
Separated to avoid circular imports between service.py and providers.py.
"""

_QUOTA_MARKERS = ("quota", "rate limit", "429", "too many requests", "exceeded")


class AIServiceError(Exception):
    """AI provider error with optional code and details."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}


class ApiKeyError(AIServiceError):
    """A provider rejected a key for quota reasons; records whose key it was."""

    def __init__(self, service: str, source: str, message: str):
        super().__init__(message, code="api_key_error", details={"service": service, "source": source})
        self.service = service
        self.source = source


def is_quota_error(error: BaseException) -> bool:
    """True for quota and rate-limit failures."""
    message = str(error).lower()
    return any(marker in message for marker in _QUOTA_MARKERS)
