"""
Core module - Database utilities

This module provides:
- database: CRUD operations for app config and stored user keys
- schema: Database initialization and migrations
"""

from osfit.core.database import (
    DB_FILE,
    get_db_file,
    get_connection,
    # App config operations
    get_app_config,
    set_app_config,
    # User key operations
    get_user_api_keys_row,
    upsert_user_api_keys,
    clear_user_api_key,
)

from osfit.core.schema import (
    DB_VERSION,
    get_db_version,
    set_db_version,
    initialize_database,
    ensure_all_schemas,
    migrate_database,
)
