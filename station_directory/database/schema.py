"""
Database schema definitions for Station Directory

This module contains the CREATE TABLE statements and indexes for the
SQLite schema.

Tables:
- stations: Station directory entries with quality tracking
- station_feedback: Listener feedback reports (one row per submission)
- schema_version: Schema version tracking

Schema Version: 2
"""

import logging

logger = logging.getLogger(__name__)


# Column order used by every station SELECT
STATION_COLUMNS = [
    'id', 'public_id', 'name', 'url', 'homepage', 'country', 'genre',
    'language', 'codec', 'bitrate', 'clickcount', 'votes',
    'metadata_api_url', 'metadata_api_type', 'local_image_url', 'logo',
    'favicon', 'description', 'quality_score', 'feedback_count',
    'is_active', 'created_at', 'updated_at',
]

FEEDBACK_COLUMNS = [
    'id', 'station_id', 'feedback_type', 'details', 'user_id',
    'ip_address', 'user_agent', 'resolved', 'resolved_at', 'created_at',
]


def create_tables(cursor):
    """Create all tables and indexes (latest schema)

    Args:
        cursor: SQLite cursor object
    """
    # 1. stations table
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS stations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            public_id TEXT NOT NULL UNIQUE,
            name TEXT NOT NULL,
            url TEXT NOT NULL,
            homepage TEXT,
            country TEXT,
            genre TEXT,
            language TEXT,
            codec TEXT,
            bitrate INTEGER,
            clickcount INTEGER DEFAULT 0,
            votes INTEGER DEFAULT 0,
            metadata_api_url TEXT,
            metadata_api_type TEXT,
            local_image_url TEXT,
            logo TEXT,
            favicon TEXT,
            description TEXT,
            quality_score REAL,
            feedback_count INTEGER DEFAULT 0,
            is_active BOOLEAN DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_stations_name ON stations(name)")
    create_quality_indexes(cursor)

    # 2. station_feedback table
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS station_feedback (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            station_id INTEGER NOT NULL,
            feedback_type TEXT NOT NULL,
            details TEXT,
            user_id INTEGER,
            ip_address TEXT,
            user_agent TEXT,
            resolved BOOLEAN DEFAULT 0,
            resolved_at TIMESTAMP,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (station_id) REFERENCES stations(id) ON DELETE CASCADE
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_feedback_station_resolved ON station_feedback(station_id, resolved)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_feedback_station_ip ON station_feedback(station_id, ip_address, created_at)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_feedback_created ON station_feedback(created_at DESC)")

    # 3. schema_version table
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            description TEXT
        )
    """)


def create_quality_indexes(cursor):
    """Create the indexes used by tier browsing and visibility filters

    Args:
        cursor: SQLite cursor object
    """
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_stations_quality ON stations(quality_score DESC)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_stations_active ON stations(is_active)")
