"""Route blueprints for the web application."""

from .translate import translate_bp
from .keys import keys_bp
from .assistant import assistant_bp
from .settings import settings_bp

__all__ = [
    "translate_bp",
    "keys_bp",
    "assistant_bp",
    "settings_bp",
]
