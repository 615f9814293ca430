"""
Database Schema Management Module

This module handles database initialization, schema validation, and migrations.
For CRUD operations, see core/database.py
"""

import sqlite3

# Import database module to use the DB path and get_connection dynamically
# This ensures monkeypatching in tests works correctly
import osfit.core.database as db

DB_VERSION = 2  # Increment when schema changes (added groq key and ai_provider in v2)


def get_connection():
    """Get a database connection using the database module's DB path."""
    return db.get_connection()


def get_db_version() -> int:
    """Get current database version."""
    try:
        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT version FROM db_version LIMIT 1")
            row = cursor.fetchone()
            return row[0] if row else 0
    except sqlite3.OperationalError:
        return 0


def set_db_version(version: int):
    """Set database version."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("CREATE TABLE IF NOT EXISTS db_version (version INTEGER)")
        cursor.execute("DELETE FROM db_version")
        cursor.execute("INSERT INTO db_version (version) VALUES (?)", (version,))
        conn.commit()


def initialize_database():
    """Initializes the database and creates the tables."""
    from osfit.logger import get_logger
    logger = get_logger(__name__)

    if db.get_db_file().exists():
        current_version = get_db_version()
        if current_version < DB_VERSION:
            migrate_database(current_version, DB_VERSION)
        elif current_version == DB_VERSION:
            try:
                ensure_all_schemas()
            except Exception as e:
                logger.warning(f"Failed to verify database schema: {e}")
        return

    with get_connection() as conn:
        cursor = conn.cursor()

        cursor.execute("""
        CREATE TABLE app_config (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """)

        cursor.execute("""
        CREATE TABLE user_api_keys (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL UNIQUE,
            gemini_key_encrypted TEXT,
            groq_key_encrypted TEXT,
            lingo_key_encrypted TEXT,
            ai_provider TEXT,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """)
        conn.commit()

    set_db_version(DB_VERSION)
    logger.info(f"Database created at {db.get_db_file()}")


# ============================================================
# Database Schema Validation
# ============================================================

def ensure_user_api_keys_schema():
    """
    Ensure user_api_keys table exists and has all required columns.
    Older databases predate Groq support and the provider preference.
    """
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
        CREATE TABLE IF NOT EXISTS user_api_keys (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL UNIQUE,
            gemini_key_encrypted TEXT,
            lingo_key_encrypted TEXT,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """)

        cursor.execute("PRAGMA table_info(user_api_keys)")
        columns = {row[1] for row in cursor.fetchall()}

        if "groq_key_encrypted" not in columns:
            cursor.execute("ALTER TABLE user_api_keys ADD COLUMN groq_key_encrypted TEXT")
        if "ai_provider" not in columns:
            cursor.execute("ALTER TABLE user_api_keys ADD COLUMN ai_provider TEXT")
        conn.commit()


def ensure_app_config_schema():
    """Ensure app_config table exists."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
        CREATE TABLE IF NOT EXISTS app_config (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """)
        conn.commit()


def ensure_all_schemas():
    """Ensure all tables have all required columns."""
    ensure_app_config_schema()
    ensure_user_api_keys_schema()


# ============================================================
# Database Migration
# ============================================================

def migrate_database(from_version: int, to_version: int):
    """
    Migrate database from one version to another.

    Every migration so far only adds tables or columns, so bringing the schema
    up to date is enough.
    """
    from osfit.logger import get_logger
    logger = get_logger(__name__)

    logger.info(f"Migrating database from version {from_version} to {to_version}")
    ensure_all_schemas()
    set_db_version(to_version)
    logger.info(f"Database migration completed: now at version {to_version}")
