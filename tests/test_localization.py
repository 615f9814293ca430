import json

import httpx
import pytest

from osfit.translation import LingoClient, LocalizationError


def make_client(handler, **kwargs):
    return LingoClient("lingo-key", transport=httpx.MockTransport(handler), **kwargs)


def test_localize_object_request_and_response():
    seen = []

    def handler(request):
        seen.append(request)
        body = json.loads(request.content)
        return httpx.Response(200, json={"data": {k: f"{v} (es)" for k, v in body["data"].items()}})

    client = make_client(handler)
    result = client.localize_object({"title": "Hello", "cta": "Start"}, "en", "es")

    assert result == {"title": "Hello (es)", "cta": "Start (es)"}
    request = seen[0]
    assert str(request.url) == "https://engine.lingo.dev/i18n"
    assert request.headers["Authorization"] == "Bearer lingo-key"
    body = json.loads(request.content)
    assert body["locale"] == {"source": "en", "target": "es"}
    assert body["data"] == {"title": "Hello", "cta": "Start"}


def test_custom_api_url():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"data": {"text": "Hallo"}})

    make_client(handler, api_url="https://lingo.internal/").localize_object({"text": "Hello"}, "en", "de")
    assert str(seen[0].url) == "https://lingo.internal/i18n"


def test_empty_content_skips_the_request():
    def handler(request):
        raise AssertionError("no request expected")

    assert make_client(handler).localize_object({}, "en", "fr") == {}


def test_http_errors_raise_localization_error():
    client = make_client(lambda request: httpx.Response(401, text="invalid api key"))
    with pytest.raises(LocalizationError, match="401"):
        client.localize_object({"text": "Hello"}, "en", "fr")


def test_unexpected_payload_raises_localization_error():
    client = make_client(lambda request: httpx.Response(200, json={"result": "??"}))
    with pytest.raises(LocalizationError):
        client.localize_object({"text": "Hello"}, "en", "fr")


def test_non_json_payload_raises_localization_error():
    client = make_client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
    with pytest.raises(LocalizationError):
        client.localize_object({"text": "Hello"}, "en", "fr")


def test_timeout_raises_localization_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out")

    with pytest.raises(LocalizationError, match="timeout"):
        make_client(handler).localize_object({"text": "Hello"}, "en", "fr")


def test_api_key_required():
    with pytest.raises(LocalizationError):
        LingoClient("")
