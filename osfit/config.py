
import copy
import json
import os
from typing import Dict, Any, Optional, Set

from osfit.core import database as db
from osfit.core.schema import initialize_database
from osfit.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SOURCE_LANGUAGE = "en"
DEFAULT_SYSTEM_MESSAGE = "You are OSFIT, an AI assistant for open source developers."
API_KEY_PLACEHOLDER = "YOUR_API_KEY_HERE"

# Provider configuration constants
BUILTIN_PROVIDERS = ["gemini", "groq"]

BUILTIN_PROVIDER_DISPLAY_NAMES = {
    "gemini": "Gemini",
    "groq": "Groq",
}

PROVIDER_DEFAULTS = {
    "max_retries": 3,
    "timeout": 120
}

# Environment variables holding the system-wide credentials
SYSTEM_KEY_ENV_VARS = {
    "gemini": "GEMINI_API_KEY",
    "groq": "GROQ_API_KEY",
    "lingo": "LINGO_API_KEY",
}

ENCRYPTION_SECRET_ENV_VAR = "ENCRYPTION_SECRET"

# Comma-separated user ids allowed to change the system configuration
ADMIN_USERS_ENV_VAR = "OSFIT_ADMIN_USERS"

# Default prompts
DEFAULT_PROMPTS = {
    "text_translation_prompt": {
        "version": "1.0",
        "description": "Freeform translation prompt used when the localization engine is unavailable",
        "prompt": """Translate the following text from {source_language_name} to {target_language_name}.

CRITICAL REQUIREMENTS:
- Preserve ALL markdown structure exactly: headings, bold and italic markers, numbered and bulleted lists, tables, block quotes
- Do NOT translate anything inside fenced code blocks (```) or inline code (`...`)
- Keep URLs, file paths, command names and identifiers unchanged
- Output ONLY the translated text, with no preamble, notes or explanations

Text to translate:
{text}"""
    },
    "language_instruction": {
        "version": "1.0",
        "description": "Appended to the system prompt when answers are generated directly in the user's language",
        "prompt": """

**CRITICAL LANGUAGE REQUIREMENT:** You MUST respond ENTIRELY in {language_name}. All text, headings, code comments, and explanations must be written in {language_name}. Do NOT use English except for code syntax, variable names, and technical terms that have no translation."""
    },
}

# Default configuration templates
DEFAULT_CONFIG = {
    "ai_provider": "gemini",
    "gemini": {
        "api_key": API_KEY_PLACEHOLDER,
        "models": ["gemini-2.5-flash"],  # Up to 5 models, first is default
        "max_retries": 3,
        "timeout": 120,
        "api_url": "https://generativelanguage.googleapis.com/v1beta/models"
    },
    "groq": {
        "api_key": API_KEY_PLACEHOLDER,
        "models": ["openai/gpt-oss-120b"],  # Up to 5 models, first is default
        "max_retries": 3,
        "timeout": 120,
        "api_url": "https://api.groq.com/openai/v1/chat/completions"
    },
    "lingo": {
        "api_key": API_KEY_PLACEHOLDER,
        "timeout": 60,
        "api_url": "https://engine.lingo.dev"
    },
    "translation": {
        "source_language": DEFAULT_SOURCE_LANGUAGE,
        "cache_max_entries": None,
        "cache_hash_threshold": 256
    },
    "streaming": {
        "base_interval_ms": 8
    },
    "log_mode": "off"
}


def initialize_app():
    """
    Initialize the application.
    Creates the database and the default configuration if they are missing.
    """
    logger.info("Initializing application...")

    initialize_database()
    logger.info("Database initialized")

    try:
        existing_config = db.get_app_config('config')
        if not existing_config:
            logger.info("No config in database, initializing default config")
            save_config(DEFAULT_CONFIG)
        else:
            logger.debug("Config already exists in database")
    except Exception as e:
        logger.error(f"Failed to check/initialize config in database: {e}")
        logger.warning("Application will use in-memory default configuration")

    logger.info("Application initialization complete")


def load_config() -> Dict[str, Any]:
    """Load the configuration from database."""
    try:
        config_json = db.get_app_config('config')
        if config_json:
            config = json.loads(config_json)
            logger.debug("Configuration loaded from database")
            return config
        logger.info("No config in database, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse config from database: {e}")
        logger.warning("Using default configuration")
        try:
            save_config(DEFAULT_CONFIG)
            logger.info("Saved default configuration to replace corrupted data")
        except Exception as save_error:
            logger.error(f"Failed to save default config: {save_error}")
        return copy.deepcopy(DEFAULT_CONFIG)
    except Exception as e:
        logger.error(f"Failed to load config from database: {e}")
        logger.warning("Using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any]):
    """Save the configuration to database."""
    try:
        config_json = json.dumps(config, ensure_ascii=False)
        db.set_app_config('config', config_json)
        logger.info("Configuration saved to database")
    except Exception as e:
        logger.error(f"Failed to save config to database: {e}")
        raise


def get_section(name: str, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return a config section merged over its defaults."""
    config = config if config is not None else load_config()
    merged = dict(DEFAULT_CONFIG.get(name, {}))
    section = config.get(name)
    if isinstance(section, dict):
        merged.update(section)
    return merged


def get_prompt(prompt_name: str) -> Dict[str, Any]:
    """Get a specific prompt by name. Prompts are hardcoded and never saved to the database."""
    return DEFAULT_PROMPTS[prompt_name].copy()


def _usable_key(value: Optional[str]) -> Optional[str]:
    if not value or not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value == API_KEY_PLACEHOLDER:
        return None
    return value


def get_system_api_keys(config: Optional[Dict[str, Any]] = None) -> Dict[str, Optional[str]]:
    """
    Return the system-wide default credentials.

    Environment variables win; a configured, non-placeholder api_key in the
    matching provider section is used otherwise.
    """
    config = config if config is not None else load_config()
    keys: Dict[str, Optional[str]] = {}
    for service, env_var in SYSTEM_KEY_ENV_VARS.items():
        env_value = _usable_key(os.environ.get(env_var))
        if env_value:
            keys[service] = env_value
            continue
        section = config.get(service)
        keys[service] = _usable_key(section.get("api_key")) if isinstance(section, dict) else None
    return keys


def get_encryption_secret() -> Optional[str]:
    """Secret used to derive the credential vault key."""
    return os.environ.get(ENCRYPTION_SECRET_ENV_VAR) or None


def get_admin_user_ids() -> Set[str]:
    """User ids allowed to change the system configuration."""
    raw = os.environ.get(ADMIN_USERS_ENV_VAR, "")
    return {user_id.strip() for user_id in raw.split(",") if user_id.strip()}
