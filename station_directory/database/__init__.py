"""
Database package for Station Directory

This package provides a modular database interface with:
- schema.py: Database table definitions
- migrations.py: Schema migration functions
- queries.py: SELECT query methods
- crud.py: INSERT/UPDATE/DELETE operations

The StationDatabase class (below) owns the SQLite connection and offers
convenience wrappers; the queries/crud modules take a cursor so callers
can group several calls on one cursor.

Schema Version: 2
"""

import sqlite3
import logging

logger = logging.getLogger(__name__)

from .migrations import _initialize_schema
from . import queries
from . import crud


class StationDatabase:
    """SQLite store for stations and listener feedback

    Tables:
    - stations: Station directory entries with quality tracking
    - station_feedback: Listener feedback reports
    - schema_version: Schema version tracking
    """

    # Current schema version
    SCHEMA_VERSION = 2

    def __init__(self, db_path):
        self.db_path = db_path
        self.conn = None

    def connect(self):
        """Connect to database and create/update schema if needed"""
        # Shared across Flask request threads
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)

        cursor = self.conn.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys = ON")
            _initialize_schema(cursor, self.conn, self.SCHEMA_VERSION)
        finally:
            cursor.close()

        logger.info(f"Connected to database: {self.db_path}")

    def get_cursor(self):
        """Get a new cursor for the current request"""
        return self.conn.cursor()

    def close(self):
        """Close the database connection"""
        if self.conn:
            self.conn.close()
            self.conn = None

    # ==================== STATION METHODS ====================

    def get_station(self, station_ref):
        """Get station by integer ID or public ID"""
        cursor = self.conn.cursor()
        try:
            return queries.find_station(cursor, station_ref)
        finally:
            cursor.close()

    def add_station(self, station_data):
        """Add a station, returns its integer ID"""
        cursor = self.conn.cursor()
        try:
            return crud.add_station(cursor, self.conn, station_data)
        finally:
            cursor.close()

    def update_station(self, station_id, **kwargs):
        cursor = self.conn.cursor()
        try:
            return crud.update_station(cursor, self.conn, station_id, **kwargs)
        finally:
            cursor.close()

    def delete_station(self, station_id):
        cursor = self.conn.cursor()
        try:
            return crud.delete_station(cursor, self.conn, station_id)
        finally:
            cursor.close()

    def get_all_station_ids(self):
        cursor = self.conn.cursor()
        try:
            return queries.get_all_station_ids(cursor)
        finally:
            cursor.close()

    # ==================== FEEDBACK METHODS ====================

    def get_station_feedback(self, station_id, unresolved_only=False):
        cursor = self.conn.cursor()
        try:
            return queries.get_station_feedback(cursor, station_id, unresolved_only)
        finally:
            cursor.close()

    def add_feedback(self, station_id, feedback_type, **kwargs):
        """Store feedback, returns its ID"""
        cursor = self.conn.cursor()
        try:
            return crud.add_feedback(cursor, self.conn, station_id, feedback_type, **kwargs)
        finally:
            cursor.close()

    def set_feedback_resolved(self, feedback_id, resolved=True):
        cursor = self.conn.cursor()
        try:
            return crud.set_feedback_resolved(cursor, self.conn, feedback_id, resolved)
        finally:
            cursor.close()


__all__ = ['StationDatabase', 'queries', 'crud']
