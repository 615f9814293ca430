"""
Database CRUD Operations Module

This module handles all database CRUD operations for:
- App Config
- User API keys (stored encrypted, see credentials/vault.py)

For schema management and migrations, see core/schema.py
"""

import os
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Dict, Any

DB_FILE = Path(__file__).parent.parent.parent / "osfit.db"

USER_KEY_COLUMNS = ("gemini_key_encrypted", "groq_key_encrypted", "lingo_key_encrypted")


def get_db_file() -> Path:
    """Get the database path, honouring the OSFIT_DB_FILE override."""
    override = os.environ.get("OSFIT_DB_FILE")
    return Path(override) if override else DB_FILE


def get_connection():
    """Get a database connection."""
    return sqlite3.connect(get_db_file())


# ============================================================
# App Config Operations
# ============================================================

def get_app_config(key: str) -> Optional[str]:
    """Get a configuration value by key."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT value FROM app_config WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row[0] if row else None


def set_app_config(key: str, value: str):
    """Set a configuration value."""
    with get_connection() as conn:
        cursor = conn.cursor()
        # Ensure app_config table exists
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS app_config (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor.execute("""
            INSERT OR REPLACE INTO app_config (key, value, updated_at)
            VALUES (?, ?, ?)
        """, (key, value, datetime.now()))
        conn.commit()


# ============================================================
# User API Key Operations
# ============================================================

def get_user_api_keys_row(user_id: str) -> Optional[Dict[str, Any]]:
    """Get the stored (encrypted) key row for a user."""
    with get_connection() as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM user_api_keys WHERE user_id = ?", (user_id,))
        row = cursor.fetchone()
        return dict(row) if row else None


def upsert_user_api_keys(user_id: str, values: Dict[str, Optional[str]]):
    """
    Insert or update a user's key row.

    Only the columns present in ``values`` are written; a value of None clears
    the column.
    """
    allowed = set(USER_KEY_COLUMNS) | {"ai_provider"}
    unknown = set(values) - allowed
    if unknown:
        raise ValueError(f"Unknown user_api_keys columns: {sorted(unknown)}")

    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT id FROM user_api_keys WHERE user_id = ?", (user_id,))
        existing = cursor.fetchone()

        now = datetime.now()
        if existing:
            updates = [f"{column} = ?" for column in values]
            params: List[Any] = list(values.values())
            updates.append("updated_at = ?")
            params.extend([now, user_id])
            cursor.execute(f"UPDATE user_api_keys SET {', '.join(updates)} WHERE user_id = ?", params)
        else:
            columns = ["user_id", *values.keys(), "updated_at"]
            placeholders = ", ".join("?" for _ in columns)
            cursor.execute(
                f"INSERT INTO user_api_keys ({', '.join(columns)}) VALUES ({placeholders})",
                [user_id, *values.values(), now],
            )
        conn.commit()


def clear_user_api_key(user_id: str, column: str) -> bool:
    """Clear one encrypted key column. Returns True if a row was updated."""
    if column not in USER_KEY_COLUMNS:
        raise ValueError(f"Unknown key column: {column}")

    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"UPDATE user_api_keys SET {column} = NULL, updated_at = ? WHERE user_id = ?",
            (datetime.now(), user_id),
        )
        conn.commit()
        return cursor.rowcount > 0

