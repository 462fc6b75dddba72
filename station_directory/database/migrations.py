"""
Database schema migration functions for Station Directory

This module handles all database migrations:
- (fresh) -> latest schema
- v1 -> v2 (add quality_score, feedback_count, is_active to stations)

Migrations are applied automatically when the database is opened.
"""

import logging

logger = logging.getLogger(__name__)

from .schema import create_tables, create_quality_indexes


def _initialize_schema(cursor, conn, SCHEMA_VERSION):
    """Initialize schema (create new or migrate existing)

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        SCHEMA_VERSION: Current schema version (from database module)
    """
    cursor.execute("""
        SELECT name FROM sqlite_master
        WHERE type='table' AND name='schema_version'
    """)

    if not cursor.fetchone():
        _create_new_schema(cursor, conn, SCHEMA_VERSION)
        return

    cursor.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
    result = cursor.fetchone()
    current_version = result[0] if result else 0

    if current_version < SCHEMA_VERSION:
        logger.info(f"Database schema at version {current_version}, upgrading to {SCHEMA_VERSION}")

        # Migrate to version 2 (quality tracking columns)
        if current_version < 2:
            _migrate_to_v2(cursor, conn)


def _create_new_schema(cursor, conn, SCHEMA_VERSION):
    """Create new schema

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        SCHEMA_VERSION: Current schema version
    """
    create_tables(cursor)

    cursor.execute("""
        INSERT INTO schema_version (version, description)
        VALUES (?, ?)
    """, (SCHEMA_VERSION, 'Initial schema (stations, station_feedback)'))

    conn.commit()
    logger.info(f"Created new database schema (version {SCHEMA_VERSION})")


def _get_columns(cursor, table):
    cursor.execute(f"PRAGMA table_info({table})")
    return {row[1] for row in cursor.fetchall()}


def _migrate_to_v2(cursor, conn):
    """Migrate database from version 1 to version 2 (quality tracking)

    Version 1 stations had no score columns. Existing stations start with
    no score, zero feedback and active, and get scored by the next
    recalculation.

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
    """
    logger.info("Migrating database to version 2 (adding quality tracking columns)...")

    try:
        columns = _get_columns(cursor, 'stations')

        if 'quality_score' not in columns:
            cursor.execute("ALTER TABLE stations ADD COLUMN quality_score REAL")
        if 'feedback_count' not in columns:
            cursor.execute("ALTER TABLE stations ADD COLUMN feedback_count INTEGER DEFAULT 0")
        if 'is_active' not in columns:
            cursor.execute("ALTER TABLE stations ADD COLUMN is_active BOOLEAN DEFAULT 1")

        create_quality_indexes(cursor)

        cursor.execute("""
            INSERT INTO schema_version (version, description)
            VALUES (?, ?)
        """, (2, 'Add quality_score, feedback_count, is_active to stations'))

        conn.commit()
        logger.info("Migration to version 2 complete!")

    except Exception as e:
        logger.error(f"Error migrating database to version 2: {e}")
        conn.rollback()
        raise
