"""Assistant API route: direct generation in the user's language."""

from __future__ import annotations

import json
from typing import Any, Dict

from flask import Blueprint, Response, jsonify, request, g, stream_with_context

from osfit.ai import AIService, AIServiceError, ApiKeyError, is_quota_error
from osfit.ai.prompts import ASSISTANT_MODES, WELCOME_MESSAGE, build_session_title, get_system_prompt
from osfit.config import get_section
from osfit.credentials import get_credentials_for_user
from osfit.logger import get_logger
from osfit.streaming import DEFAULT_BASE_INTERVAL_MS, iter_reveal
from osfit.translation import get_default_pipeline
from osfit import i18n

assistant_bp = Blueprint("assistant", __name__)
logger = get_logger(__name__)


def _sse(payload: Dict[str, Any], event: str = None) -> str:
    data = json.dumps(payload, ensure_ascii=False)
    if event:
        return f"event: {event}\ndata: {data}\n\n"
    return f"data: {data}\n\n"


def _stream_response(content: str, meta: Dict[str, Any]) -> Response:
    """Reveal a finished answer progressively as Server-Sent Events."""
    interval = get_section("streaming").get("base_interval_ms", DEFAULT_BASE_INTERVAL_MS)

    def events():
        for fragment in iter_reveal(content, base_interval_ms=interval):
            yield _sse({"delta": fragment})
        yield _sse(meta, event="done")

    return Response(
        stream_with_context(events()),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@assistant_bp.post("")
def ask_assistant():
    """
    Answer a message in the requested mode.

    The response language is requested inside the system prompt, so the
    answer needs no second translation round-trip. Without a generative key
    the welcome message is returned instead.
    """
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    message = data.get("message")
    mode = data.get("mode") or "idle"
    language = data.get("language") or lang
    context = data.get("context")
    stream = bool(data.get("stream", False))

    if not isinstance(message, str) or not message.strip():
        return jsonify({"error": i18n.get_translation("errors.missingMessage", lang=lang)}), 400
    if mode not in ASSISTANT_MODES:
        return jsonify({"error": i18n.get_translation("errors.invalidMode", lang=lang, mode=mode)}), 400
    if not isinstance(language, str) or (context is not None and not isinstance(context, str)):
        return jsonify({"error": i18n.get_translation("errors.invalidJson", lang=lang)}), 400

    title = build_session_title(message, mode)
    credentials = get_credentials_for_user(g.user_id)
    usage = {"prompt_tokens": 0, "completion_tokens": 0}

    if not credentials.has_generative_key():
        logger.info("No generative key available, returning welcome message")
        response_text = get_default_pipeline().translate_text(
            WELCOME_MESSAGE, language, credentials=credentials
        )
    else:
        service = AIService(credentials)
        try:
            response_text = service.analyze(
                get_system_prompt(mode), message, context=context, target_language=language
            )
            usage = service.get_total_token_usage()
        except AIServiceError as e:
            if is_quota_error(e):
                error = ApiKeyError(service.provider, credentials.sources()[service.provider], str(e))
                logger.warning(f"Quota error from {error.service} ({error.source} key): {e}")
                return jsonify({
                    "error": str(error),
                    "errorType": "api_key_error",
                    "service": error.service,
                    "source": error.source,
                }), 500
            logger.error(f"Assistant generation failed: {e}")
            return jsonify({
                "error": i18n.get_translation("errors.generationFailed", lang=lang),
                "code": e.code or "ai_error",
            }), 500

    meta = {"title": title, "language": language, "usage": usage}
    if stream:
        return _stream_response(response_text, meta)
    return jsonify({"response": response_text, **meta})
