"""
Database CRUD operations for Station Directory

This module contains all INSERT/UPDATE/DELETE operations that modify the database.

CRUD Categories:
- Station CRUD: add_station, update_station, delete_station
- Interaction counters: increment_station_counter
- Quality tracking: update_station_quality, deactivate_station
- Feedback CRUD: add_feedback, set_feedback_resolved
"""

import logging
import sqlite3

from station_directory.public_ids import generate_public_id
from station_directory.quality import is_valid_feedback_type, FEEDBACK_TYPES

logger = logging.getLogger(__name__)

# Station fields accepted from callers (id, public_id, counters and
# quality columns are managed here)
EDITABLE_STATION_FIELDS = [
    'name', 'url', 'homepage', 'country', 'genre', 'language', 'codec',
    'metadata_api_url', 'metadata_api_type', 'local_image_url', 'logo',
    'favicon', 'description',
]
INTEGER_STATION_FIELDS = ['bitrate', 'clickcount', 'votes']
BOOLEAN_STATION_FIELDS = ['is_active']

COUNTER_COLUMNS = ['clickcount', 'votes']

MAX_PUBLIC_ID_ATTEMPTS = 5


# ==================== STATION CRUD ====================

def add_station(cursor, conn, station_data):
    """Add a new station to the database

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        station_data: Dict with at least 'name' and 'url', plus any of the
                      editable/integer fields

    Returns:
        int: New station ID

    Raises:
        ValueError: If name or url is missing
        Exception: If database error occurs
    """
    name = (station_data.get('name') or '').strip()
    url = (station_data.get('url') or '').strip()
    if not name or not url:
        raise ValueError("Station requires both 'name' and 'url'")

    columns = ['name', 'url']
    params = [name, url]

    for key in EDITABLE_STATION_FIELDS:
        if key in ('name', 'url'):
            continue
        if station_data.get(key) is not None:
            columns.append(key)
            params.append(station_data[key])

    for key in INTEGER_STATION_FIELDS:
        if station_data.get(key) is not None:
            columns.append(key)
            params.append(int(station_data[key]))

    if 'is_active' in station_data:
        columns.append('is_active')
        params.append(1 if station_data['is_active'] else 0)

    placeholders = ', '.join('?' for _ in range(len(columns) + 1))

    try:
        for attempt in range(MAX_PUBLIC_ID_ATTEMPTS):
            public_id = station_data.get('public_id') or generate_public_id()
            try:
                cursor.execute(f"""
                    INSERT INTO stations (public_id, {', '.join(columns)})
                    VALUES ({placeholders})
                """, [public_id] + params)
                break
            except sqlite3.IntegrityError:
                # public_id collision; retry with a fresh one unless it was supplied
                if station_data.get('public_id') or attempt == MAX_PUBLIC_ID_ATTEMPTS - 1:
                    raise
                logger.warning(f"Public ID collision on {public_id}, retrying")

        conn.commit()
        station_id = cursor.lastrowid
        logger.info(f"Added station {station_id} ({public_id}): {name}")
        return station_id

    except Exception as e:
        logger.error(f"Error adding station {name}: {e}")
        conn.rollback()
        raise


def update_station(cursor, conn, station_id, **kwargs):
    """Update station fields

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        station_id: Station ID
        **kwargs: Fields to update (editable, integer and boolean fields)

    Returns:
        True if updated, False if not found or nothing to update

    Raises:
        ValueError: If an unknown field is given
    """
    unknown = [
        key for key in kwargs
        if key not in EDITABLE_STATION_FIELDS + INTEGER_STATION_FIELDS + BOOLEAN_STATION_FIELDS
    ]
    if unknown:
        raise ValueError(f"Unknown station field(s): {', '.join(sorted(unknown))}")

    if not kwargs:
        return False

    updates = []
    params = []

    for key, value in kwargs.items():
        updates.append(f"{key} = ?")
        if key in BOOLEAN_STATION_FIELDS:
            params.append(1 if value else 0)
        elif key in INTEGER_STATION_FIELDS and value is not None:
            params.append(int(value))
        else:
            params.append(value)

    params.append(station_id)

    try:
        cursor.execute(f"""
            UPDATE stations
            SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        """, params)

        conn.commit()
        return cursor.rowcount > 0

    except Exception as e:
        logger.error(f"Error updating station {station_id}: {e}")
        conn.rollback()
        raise


def delete_station(cursor, conn, station_id):
    """Delete a station and its feedback

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        station_id: Station ID to delete

    Returns:
        True if deleted successfully, False if station not found
    """
    try:
        cursor.execute("SELECT id FROM stations WHERE id = ?", (station_id,))
        if not cursor.fetchone():
            logger.warning(f"Station {station_id} not found")
            return False

        cursor.execute("DELETE FROM station_feedback WHERE station_id = ?", (station_id,))
        feedback_deleted = cursor.rowcount
        cursor.execute("DELETE FROM stations WHERE id = ?", (station_id,))

        conn.commit()
        logger.info(f"Deleted station {station_id} ({feedback_deleted} feedback records)")
        return True

    except Exception as e:
        logger.error(f"Error deleting station {station_id}: {e}")
        conn.rollback()
        raise


def increment_station_counter(cursor, conn, station_id, column):
    """Increment a play/like counter in place

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        station_id: Station ID
        column: 'clickcount' or 'votes'

    Returns:
        int: New counter value, or None if station not found
    """
    if column not in COUNTER_COLUMNS:
        raise ValueError(f"Unknown counter column: {column}")

    try:
        cursor.execute(f"""
            UPDATE stations
            SET {column} = COALESCE({column}, 0) + 1, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        """, (station_id,))

        if cursor.rowcount == 0:
            conn.rollback()
            return None

        conn.commit()

        cursor.execute(f"SELECT {column} FROM stations WHERE id = ?", (station_id,))
        return cursor.fetchone()[0]

    except Exception as e:
        logger.error(f"Error incrementing {column} for station {station_id}: {e}")
        conn.rollback()
        raise


# ==================== QUALITY TRACKING ====================

def update_station_quality(cursor, conn, station_id, quality_score, feedback_count):
    """Persist a recalculated quality score

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        station_id: Station ID
        quality_score: Overall score (0-100)
        feedback_count: Number of unresolved feedback records scored

    Returns:
        True if updated, False if station not found
    """
    try:
        cursor.execute("""
            UPDATE stations
            SET quality_score = ?, feedback_count = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        """, (quality_score, feedback_count, station_id))

        conn.commit()
        return cursor.rowcount > 0

    except Exception as e:
        logger.error(f"Error updating quality score for station {station_id}: {e}")
        conn.rollback()
        raise


def deactivate_station(cursor, conn, station_id):
    """Hide a station from listings

    Returns:
        True if the station was active and is now hidden, False otherwise
    """
    try:
        cursor.execute("""
            UPDATE stations
            SET is_active = 0, updated_at = CURRENT_TIMESTAMP
            WHERE id = ? AND is_active = 1
        """, (station_id,))

        conn.commit()
        return cursor.rowcount > 0

    except Exception as e:
        logger.error(f"Error deactivating station {station_id}: {e}")
        conn.rollback()
        raise


# ==================== FEEDBACK CRUD ====================

def add_feedback(cursor, conn, station_id, feedback_type, details=None, user_id=None,
                 ip_address=None, user_agent=None):
    """Store a feedback submission

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        station_id: Station ID
        feedback_type: One of FEEDBACK_TYPES
        details: Optional free-text details
        user_id: Optional user ID
        ip_address: Client IP address
        user_agent: Client User-Agent

    Returns:
        int: New feedback ID

    Raises:
        ValueError: If feedback_type is not a known type
    """
    if not is_valid_feedback_type(feedback_type):
        raise ValueError(
            f"Invalid feedback type: {feedback_type!r}. "
            f"Expected one of: {', '.join(FEEDBACK_TYPES)}"
        )

    try:
        cursor.execute("""
            INSERT INTO station_feedback
            (station_id, feedback_type, details, user_id, ip_address, user_agent)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (station_id, feedback_type, details, user_id, ip_address, user_agent))

        conn.commit()
        feedback_id = cursor.lastrowid
        logger.info(f"Added {feedback_type} feedback {feedback_id} for station {station_id}")
        return feedback_id

    except Exception as e:
        logger.error(f"Error adding feedback for station {station_id}: {e}")
        conn.rollback()
        raise


def set_feedback_resolved(cursor, conn, feedback_id, resolved=True):
    """Mark feedback as resolved (or reopen it)

    Returns:
        True if updated, False if feedback not found
    """
    try:
        if resolved:
            cursor.execute("""
                UPDATE station_feedback
                SET resolved = 1, resolved_at = CURRENT_TIMESTAMP
                WHERE id = ?
            """, (feedback_id,))
        else:
            cursor.execute("""
                UPDATE station_feedback
                SET resolved = 0, resolved_at = NULL
                WHERE id = ?
            """, (feedback_id,))

        conn.commit()
        return cursor.rowcount > 0

    except Exception as e:
        logger.error(f"Error resolving feedback {feedback_id}: {e}")
        conn.rollback()
        raise
