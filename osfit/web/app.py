"""Flask application configuration and blueprint registration."""

from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request, g

from osfit.logger import get_logger
from osfit import i18n

from .routes import translate_bp, keys_bp, assistant_bp, settings_bp

logger = get_logger(__name__)

# Set by the upstream auth layer once the session is verified
USER_ID_HEADER = "X-User-Id"


def get_current_language() -> str:
    """
    Determine the current language from various sources.
    Priority: query param > cookie > Accept-Language header > default (en)
    """
    # 1. Check query parameter
    lang = request.args.get('lang')
    if lang and lang in i18n.SUPPORTED_LANGUAGES:
        return lang

    # 2. Check cookie
    lang = request.cookies.get('lang')
    if lang and lang in i18n.SUPPORTED_LANGUAGES:
        return lang

    # 3. Check Accept-Language header
    accept_lang = request.accept_languages.best_match(
        list(i18n.SUPPORTED_LANGUAGES.keys()),
        default=i18n.DEFAULT_LANGUAGE
    )
    if accept_lang:
        return i18n.normalize_language_code(accept_lang)

    return i18n.DEFAULT_LANGUAGE


def get_current_user_id() -> Optional[str]:
    """Authenticated user id, or None for anonymous requests."""
    user_id = request.headers.get(USER_ID_HEADER, "").strip()
    return user_id or None


def build_app() -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Ensure JSON responses keep Unicode data.
    app.json.ensure_ascii = False

    @app.before_request
    def before_request():
        """Set current language and user in g before each request."""
        g.lang = get_current_language()
        g.user_id = get_current_user_id()

    register_blueprints(app)
    register_default_routes(app)

    return app


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    app.register_blueprint(translate_bp, url_prefix="/api/translate")
    app.register_blueprint(keys_bp, url_prefix="/api/user/keys")
    app.register_blueprint(assistant_bp, url_prefix="/api/assistant")
    app.register_blueprint(settings_bp, url_prefix="/api/settings")


def register_default_routes(app: Flask) -> None:
    """Register the health route and JSON error handlers."""

    @app.get("/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok"})

    @app.errorhandler(404)
    def page_not_found(e):
        lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
        return jsonify({"error": i18n.get_translation("errors.pageNotFound", lang=lang)}), 404

    @app.errorhandler(500)
    def internal_error(e):
        logger.exception("Internal server error: %s", e)
        lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
        return jsonify({"error": i18n.get_translation("errors.unexpectedError", lang=lang)}), 500
