from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pytest

from osfit.core.schema import initialize_database
from osfit.credentials.overlay import Credential, EffectiveCredentials
from osfit.translation import reset_default_pipeline
from osfit import i18n

ENCRYPTION_SECRET = "test-encryption-secret"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Every test gets its own sqlite file and no system keys."""
    monkeypatch.setenv("OSFIT_DB_FILE", str(tmp_path / "osfit.db"))
    monkeypatch.setenv("ENCRYPTION_SECRET", ENCRYPTION_SECRET)
    monkeypatch.setenv("OSFIT_LOG_MODE", "off")
    for var in ("GEMINI_API_KEY", "GROQ_API_KEY", "LINGO_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    reset_default_pipeline()
    i18n.clear_cache()
    yield
    reset_default_pipeline()


@pytest.fixture
def database():
    initialize_database()


@pytest.fixture
def app():
    from osfit.web import create_app

    app = create_app()
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def make_credentials(gemini: Optional[str] = None, groq: Optional[str] = None, lingo: Optional[str] = None,
                     provider: str = "gemini", source: str = "system") -> EffectiveCredentials:
    def cred(value):
        return Credential(key=value, source=source) if value else None

    return EffectiveCredentials(gemini=cred(gemini), groq=cred(groq), lingo=cred(lingo), provider=provider)


class FakeLocalizer:
    """Localization collaborator that records calls and returns canned output."""

    def __init__(self, translations: Optional[Dict[str, str]] = None, error: Optional[Exception] = None,
                 transform: Optional[Callable[[str], str]] = None):
        self.translations = translations or {}
        self.error = error
        self.transform = transform
        self.calls: List[Dict[str, Any]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def __call__(self, content, source_locale, target_locale, api_key):
        self.calls.append({
            "content": dict(content),
            "source_locale": source_locale,
            "target_locale": target_locale,
            "api_key": api_key,
        })
        if self.error is not None:
            raise self.error
        if self.transform is not None:
            return {key: self.transform(value) for key, value in content.items()}
        return {key: self.translations.get(value, value) for key, value in content.items()}


class FakeGenerator:
    """Generative collaborator that records calls."""

    def __init__(self, translations: Optional[Dict[str, str]] = None, error: Optional[Exception] = None):
        self.translations = translations or {}
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def __call__(self, text, target_language, source_language, credentials):
        self.calls.append({
            "text": text,
            "target_language": target_language,
            "source_language": source_language,
            "credentials": credentials,
        })
        if self.error is not None:
            raise self.error
        return self.translations.get(text, f"[{target_language}] {text}")


class FixedRng:
    """Random source whose stride is always ``value``."""

    def __init__(self, value: int = 2):
        self.value = value

    def randrange(self, start, stop):
        assert start <= self.value < stop
        return self.value


class ManualScheduler:
    """Frame scheduler driven by hand from the test."""

    def __init__(self):
        self.pending: Dict[int, Callable[[float], None]] = {}
        self._next_handle = 0

    def request_frame(self, callback):
        self._next_handle += 1
        self.pending[self._next_handle] = callback
        return self._next_handle

    def cancel_frame(self, handle):
        self.pending.pop(handle, None)

    def fire(self, timestamp_ms: float) -> int:
        callbacks = list(self.pending.values())
        self.pending.clear()
        for callback in callbacks:
            callback(timestamp_ms)
        return len(callbacks)

    def run(self, step_ms: float = 10, max_frames: int = 10_000) -> None:
        now = 0.0
        for _ in range(max_frames):
            if not self.pending:
                return
            self.fire(now)
            now += step_ms
        raise AssertionError("reveal did not finish")
