"""
Listener interaction routes for Station Directory API

Plays and likes bump the station's counters, which feed the cold-start
score, so each one triggers a recalculation. Both are throttled per
client IP through the app's rate-limit store.
"""

import logging
from flask import Blueprint, jsonify

from station_directory.rate_limit import interaction_key
from station_directory.recalculation import StationNotFoundError
from station_directory.api.helpers import (
    get_recalculator, get_rate_limiter, get_app_setting, get_client_ip,
    error_response, lookup_station
)

logger = logging.getLogger(__name__)

interactions_bp = Blueprint('interactions', __name__)


def _record(station_ref, counter, verb):
    station, error = lookup_station(station_ref)
    if error:
        return error

    cooldown = get_app_setting('rate_limits.interaction_cooldown_seconds', 10)
    ip_address = get_client_ip()
    if get_rate_limiter().hit(interaction_key(ip_address), cooldown):
        return error_response('Rate limit exceeded', 429)

    try:
        value, result = get_recalculator().record_interaction(station['id'], counter)
    except StationNotFoundError:
        return error_response('Station not found', 404)
    except Exception as e:
        logger.error(f"Error recording station {verb}: {e}", exc_info=True)
        return error_response(f'Failed to record station {verb}', 500)

    logger.info(f"Station {station['name']} {verb}: {counter}={value}, "
                f"quality_score={result['overall']:.2f}")

    return jsonify({
        'success': True,
        counter: value,
        'quality_score': result['overall'],
        'tier': result['tier'],
        'message': f'{verb.capitalize()} recorded successfully'
    })


@interactions_bp.route('/api/stations/<station_ref>/play', methods=['POST'])
def api_station_play(station_ref):
    """Record a play"""
    return _record(station_ref, 'clickcount', 'play')


@interactions_bp.route('/api/stations/<station_ref>/like', methods=['POST'])
def api_station_like(station_ref):
    """Record a like"""
    return _record(station_ref, 'votes', 'like')


@interactions_bp.route('/api/stations/<station_ref>/stats')
def api_station_stats(station_ref):
    """Play/like/feedback counters for a station"""
    station, error = lookup_station(station_ref)
    if error:
        return error

    return jsonify({
        'success': True,
        'station': {
            'id': station['id'],
            'public_id': station['public_id'],
            'name': station['name']
        },
        'stats': {
            'total_plays': station['clickcount'] or 0,
            'total_likes': station['votes'] or 0,
            'feedback_count': station['feedback_count'] or 0,
            'quality_score': station['quality_score'],
            'created_at': station['created_at'],
            'last_updated': station['updated_at']
        }
    })
