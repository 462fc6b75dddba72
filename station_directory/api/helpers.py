"""
Request helpers shared by the API blueprints
"""

import logging
from flask import current_app, jsonify, request

from station_directory.database import queries
from station_directory.public_ids import parse_station_ref
from station_directory.settings import get_setting

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def get_db():
    """Get database instance from Flask app config"""
    return current_app.config.get('db')


def get_recalculator():
    return current_app.config.get('recalculator')


def get_rate_limiter():
    return current_app.config.get('rate_limiter')


def get_app_setting(dotted_key, default=None):
    return get_setting(current_app.config.get('settings'), dotted_key, default)


def get_client_ip():
    return request.remote_addr or 'unknown'


def error_response(message, status):
    """Build the standard JSON error response"""
    return jsonify({'success': False, 'error': message}), status


def get_pagination(default_limit=20):
    """Read page/limit query parameters, clamped to sane values

    Returns:
        tuple: (page, limit)
    """
    page = request.args.get('page', 1, type=int) or 1
    limit = request.args.get('limit', default_limit, type=int) or default_limit
    return max(1, page), max(1, min(MAX_PAGE_SIZE, limit))


def pagination_info(result):
    return {
        'page': result['page'],
        'limit': result['limit'],
        'total': result['total'],
        'pages': result['pages']
    }


def serialize_score(result):
    """Make a score result JSON friendly (ISO timestamp)"""
    return {
        'overall': result['overall'],
        'breakdown': dict(result['breakdown']),
        'feedback_count': result['feedback_count'],
        'last_calculated': result['last_calculated'].isoformat()
    }


def lookup_station(station_ref):
    """Resolve a station from a URL parameter

    Returns:
        tuple: (station dict, None) on success, or (None, error response)
    """
    ref_type, _ = parse_station_ref(station_ref)
    if ref_type == 'invalid':
        return None, error_response('Invalid station ID', 400)

    cursor = get_db().get_cursor()
    try:
        station = queries.find_station(cursor, station_ref)
    finally:
        cursor.close()

    if station is None:
        return None, error_response('Station not found', 404)

    return station, None
