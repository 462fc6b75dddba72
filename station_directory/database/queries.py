"""
Database query methods for Station Directory

This module contains all SELECT query methods for retrieving data from the database.
All methods return data structures (dicts, lists) and do not modify the database.

Query Categories:
- Station queries: get_station_by_id, get_station_by_public_id, find_station,
  get_stations_paginated, get_all_station_ids
- Feedback queries: get_station_feedback, get_feedback_paginated,
  get_feedback_by_id, has_recent_feedback, get_pending_feedback
- Quality queries: get_stations_by_score_range, get_top_quality_stations,
  count_stations_by_score_range
"""

import logging

from station_directory.public_ids import parse_station_ref
from .schema import STATION_COLUMNS, FEEDBACK_COLUMNS

logger = logging.getLogger(__name__)

_STATION_SELECT = f"SELECT {', '.join(STATION_COLUMNS)} FROM stations"
_FEEDBACK_SELECT = f"SELECT {', '.join(FEEDBACK_COLUMNS)} FROM station_feedback"


def _station_from_row(row):
    station = dict(zip(STATION_COLUMNS, row))
    station['is_active'] = bool(station['is_active'])
    return station


def _feedback_from_row(row):
    feedback = dict(zip(FEEDBACK_COLUMNS, row))
    feedback['resolved'] = bool(feedback['resolved'])
    return feedback


def _paginate(items, total, page, limit):
    return {
        'items': items,
        'total': total,
        'page': page,
        'pages': (total + limit - 1) // limit if limit else 0,
        'limit': limit
    }


# ==================== STATION QUERIES ====================

def get_station_by_id(cursor, station_id):
    """Get station by integer ID

    Args:
        cursor: SQLite cursor object
        station_id: Station primary key

    Returns:
        Station dict or None if not found
    """
    cursor.execute(f"{_STATION_SELECT} WHERE id = ?", (station_id,))
    row = cursor.fetchone()
    return _station_from_row(row) if row else None


def get_station_by_public_id(cursor, public_id):
    """Get station by public ID

    Args:
        cursor: SQLite cursor object
        public_id: 8-character public station ID

    Returns:
        Station dict or None if not found
    """
    cursor.execute(f"{_STATION_SELECT} WHERE public_id = ?", (public_id,))
    row = cursor.fetchone()
    return _station_from_row(row) if row else None


def find_station(cursor, station_ref):
    """Find a station by public ID or integer ID

    An all-digit 8-character reference is tried as a public ID first and
    then as an integer ID.

    Args:
        cursor: SQLite cursor object
        station_ref: Public ID, integer ID, or numeric string

    Returns:
        Station dict or None if not found / invalid reference
    """
    if isinstance(station_ref, int):
        return get_station_by_id(cursor, station_ref)

    ref_type, value = parse_station_ref(station_ref)

    if ref_type == 'public':
        station = get_station_by_public_id(cursor, value)
        if station is None and value.isdigit():
            station = get_station_by_id(cursor, int(value))
        return station

    if ref_type == 'numeric':
        return get_station_by_id(cursor, value)

    return None


def get_stations_paginated(cursor, page=1, limit=50, include_inactive=False):
    """Get paginated list of stations ordered by name

    Args:
        cursor: SQLite cursor object
        page: Page number (1-indexed)
        limit: Items per page
        include_inactive: Include hidden stations (default: False)

    Returns:
        Dict with keys: items, total, page, pages, limit
    """
    where_clause = "" if include_inactive else "WHERE is_active = 1"

    cursor.execute(f"SELECT COUNT(*) FROM stations {where_clause}")
    total = cursor.fetchone()[0]

    cursor.execute(f"""
        {_STATION_SELECT}
        {where_clause}
        ORDER BY name COLLATE NOCASE, id
        LIMIT ? OFFSET ?
    """, (limit, (page - 1) * limit))

    items = [_station_from_row(row) for row in cursor.fetchall()]
    return _paginate(items, total, page, limit)


def get_all_station_ids(cursor):
    """Get all station IDs (active and hidden)

    Returns:
        List of integer station IDs
    """
    cursor.execute("SELECT id FROM stations ORDER BY id")
    return [row[0] for row in cursor.fetchall()]


# ==================== FEEDBACK QUERIES ====================

def get_station_feedback(cursor, station_id, unresolved_only=False):
    """Get all feedback for a station, newest first

    Args:
        cursor: SQLite cursor object
        station_id: Station primary key
        unresolved_only: Only return feedback not yet resolved

    Returns:
        List of feedback dicts
    """
    query = f"{_FEEDBACK_SELECT} WHERE station_id = ?"
    if unresolved_only:
        query += " AND resolved = 0"
    query += " ORDER BY created_at DESC, id DESC"

    cursor.execute(query, (station_id,))
    return [_feedback_from_row(row) for row in cursor.fetchall()]


def get_feedback_paginated(cursor, station_id, page=1, limit=20):
    """Get paginated feedback for a station, newest first

    Returns:
        Dict with keys: items, total, page, pages, limit
    """
    cursor.execute("SELECT COUNT(*) FROM station_feedback WHERE station_id = ?", (station_id,))
    total = cursor.fetchone()[0]

    cursor.execute(f"""
        {_FEEDBACK_SELECT}
        WHERE station_id = ?
        ORDER BY created_at DESC, id DESC
        LIMIT ? OFFSET ?
    """, (station_id, limit, (page - 1) * limit))

    items = [_feedback_from_row(row) for row in cursor.fetchall()]
    return _paginate(items, total, page, limit)


def get_feedback_by_id(cursor, feedback_id):
    """Get a single feedback record

    Returns:
        Feedback dict or None if not found
    """
    cursor.execute(f"{_FEEDBACK_SELECT} WHERE id = ?", (feedback_id,))
    row = cursor.fetchone()
    return _feedback_from_row(row) if row else None


def has_recent_feedback(cursor, station_id, ip_address, window_minutes=60):
    """Check whether an IP already left feedback for a station recently

    Args:
        cursor: SQLite cursor object
        station_id: Station primary key
        ip_address: Client IP address
        window_minutes: Look-back window in minutes (default: 60)

    Returns:
        True if feedback exists inside the window
    """
    cursor.execute("""
        SELECT 1 FROM station_feedback
        WHERE station_id = ?
          AND ip_address = ?
          AND created_at >= datetime('now', ?)
        LIMIT 1
    """, (station_id, ip_address, f'-{int(window_minutes)} minutes'))
    return cursor.fetchone() is not None


def get_pending_feedback(cursor, feedback_types=None, limit=100):
    """Get unresolved feedback for moderation, newest first

    Args:
        cursor: SQLite cursor object
        feedback_types: Restrict to these feedback types (default: all)
        limit: Maximum rows (default: 100)

    Returns:
        List of feedback dicts, each with station name/public_id/is_active
    """
    conditions = ["f.resolved = 0"]
    params = []

    if feedback_types:
        placeholders = ', '.join('?' for _ in feedback_types)
        conditions.append(f"f.feedback_type IN ({placeholders})")
        params.extend(feedback_types)

    params.append(limit)

    columns = ', '.join(f"f.{column}" for column in FEEDBACK_COLUMNS)
    cursor.execute(f"""
        SELECT {columns}, s.name, s.public_id, s.is_active
        FROM station_feedback f
        JOIN stations s ON s.id = f.station_id
        WHERE {' AND '.join(conditions)}
        ORDER BY f.created_at DESC, f.id DESC
        LIMIT ?
    """, params)

    pending = []
    for row in cursor.fetchall():
        feedback = _feedback_from_row(row[:len(FEEDBACK_COLUMNS)])
        name, public_id, is_active = row[len(FEEDBACK_COLUMNS):]
        feedback['station'] = {
            'id': feedback['station_id'],
            'public_id': public_id,
            'name': name,
            'is_active': bool(is_active)
        }
        pending.append(feedback)

    return pending


# ==================== QUALITY QUERIES ====================

def _score_range_clause(min_score, max_score):
    conditions = ["is_active = 1", "quality_score IS NOT NULL", "quality_score >= ?"]
    params = [min_score]
    if max_score is not None:
        conditions.append("quality_score < ?")
        params.append(max_score)
    return ' AND '.join(conditions), params


def count_stations_by_score_range(cursor, min_score, max_score=None):
    """Count active stations with min_score <= score < max_score"""
    where_clause, params = _score_range_clause(min_score, max_score)
    cursor.execute(f"SELECT COUNT(*) FROM stations WHERE {where_clause}", params)
    return cursor.fetchone()[0]


def get_stations_by_score_range(cursor, min_score, max_score=None, page=1, limit=20):
    """Get active stations in a score range, best first

    Args:
        cursor: SQLite cursor object
        min_score: Lower bound (inclusive)
        max_score: Upper bound (exclusive), None for no upper bound
        page: Page number (1-indexed)
        limit: Items per page

    Returns:
        Dict with keys: items, total, page, pages, limit
    """
    total = count_stations_by_score_range(cursor, min_score, max_score)

    where_clause, params = _score_range_clause(min_score, max_score)
    params.extend([limit, (page - 1) * limit])

    cursor.execute(f"""
        {_STATION_SELECT}
        WHERE {where_clause}
        ORDER BY quality_score DESC, id
        LIMIT ? OFFSET ?
    """, params)

    items = [_station_from_row(row) for row in cursor.fetchall()]
    return _paginate(items, total, page, limit)


def get_top_quality_stations(cursor, min_score, min_feedback=0, limit=20):
    """Get active stations at or above a score (and feedback count), best first

    Used for featured stations and editor's picks.

    Returns:
        List of station dicts
    """
    cursor.execute(f"""
        {_STATION_SELECT}
        WHERE is_active = 1
          AND quality_score >= ?
          AND COALESCE(feedback_count, 0) >= ?
        ORDER BY quality_score DESC, COALESCE(feedback_count, 0) DESC, id
        LIMIT ?
    """, (min_score, min_feedback, limit))
    return [_station_from_row(row) for row in cursor.fetchall()]
