"""
Station routes for Station Directory API

Listing, detail and admin management of stations. Every station in a
response carries its quality tier (None until first scored).
"""

import logging
import sqlite3
from flask import Blueprint, jsonify, request

from station_directory.auth import requires_auth
from station_directory.database import queries, crud
from station_directory.recalculation import StationNotFoundError
from station_directory.tiers import classify_tier, tier_info
from station_directory.api.helpers import (
    get_db, get_recalculator, error_response, get_pagination, pagination_info,
    lookup_station, serialize_score
)

logger = logging.getLogger(__name__)

stations_bp = Blueprint('stations', __name__)


def with_tier(station):
    """Add 'tier' to a station dict (None if not yet scored)"""
    station = dict(station)
    score = station.get('quality_score')
    station['tier'] = classify_tier(score) if score is not None else None
    return station


@stations_bp.route('/api/stations')
def api_stations():
    """List stations (active only unless include_inactive=1)"""
    page, limit = get_pagination(default_limit=50)
    include_inactive = request.args.get('include_inactive', '0') in ('1', 'true', 'yes')

    cursor = get_db().get_cursor()
    try:
        result = queries.get_stations_paginated(cursor, page, limit, include_inactive)
    finally:
        cursor.close()

    return jsonify({
        'success': True,
        'items': [with_tier(station) for station in result['items']],
        'pagination': pagination_info(result)
    })


@stations_bp.route('/api/stations/<station_ref>')
def api_station_detail(station_ref):
    """Single station by integer ID or public ID"""
    station, error = lookup_station(station_ref)
    if error:
        return error

    station = with_tier(station)
    station['tier_info'] = tier_info(station['tier']) if station['tier'] else None

    return jsonify({'success': True, 'station': station})


@stations_bp.route('/api/stations', methods=['POST'])
@requires_auth
def api_create_station():
    """Create a station and give it an initial score"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response('Request body must be a JSON object', 400)

    db = get_db()
    cursor = db.get_cursor()
    try:
        station_id = crud.add_station(cursor, db.conn, data)
    except ValueError as e:
        return error_response(str(e), 400)
    except sqlite3.IntegrityError:
        return error_response('Public ID already in use', 409)
    except Exception as e:
        logger.error(f"Error creating station: {e}", exc_info=True)
        return error_response('Failed to create station', 500)
    finally:
        cursor.close()

    try:
        result = get_recalculator().recalculate(station_id)
    except Exception as e:
        # Station row is committed; the nightly job will score it
        logger.error(f"Error scoring new station {station_id}: {e}", exc_info=True)
        return error_response(f'Station {station_id} created but initial scoring failed', 500)

    station = db.get_station(station_id)
    return jsonify({
        'success': True,
        'station': with_tier(station),
        'quality': serialize_score(result)
    }), 201


@stations_bp.route('/api/stations/<station_ref>', methods=['PUT'])
@requires_auth
def api_update_station(station_ref):
    """Update station fields

    Setting is_active=true is how a hidden station is brought back. When
    only is_active changes the score is left alone, so the station is not
    immediately hidden again by the same feedback.
    """
    station, error = lookup_station(station_ref)
    if error:
        return error

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return error_response('Request body must be a non-empty JSON object', 400)

    db = get_db()
    cursor = db.get_cursor()
    try:
        crud.update_station(cursor, db.conn, station['id'], **data)
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        logger.error(f"Error updating station {station['id']}: {e}", exc_info=True)
        return error_response('Failed to update station', 500)
    finally:
        cursor.close()

    if 'is_active' in data:
        state = 'reactivated' if data['is_active'] else 'deactivated'
        logger.info(f"Station {station['name']} ({station['id']}) manually {state}")

    response = {'success': True}
    if set(data) - {'is_active'}:
        try:
            response['quality'] = serialize_score(get_recalculator().recalculate(station['id']))
        except StationNotFoundError:
            return error_response('Station not found', 404)

    response['station'] = with_tier(db.get_station(station['id']))
    return jsonify(response)


@stations_bp.route('/api/stations/<station_ref>', methods=['DELETE'])
@requires_auth
def api_delete_station(station_ref):
    """Delete a station and its feedback"""
    station, error = lookup_station(station_ref)
    if error:
        return error

    db = get_db()
    cursor = db.get_cursor()
    try:
        deleted = crud.delete_station(cursor, db.conn, station['id'])
    except Exception as e:
        logger.error(f"Error deleting station {station['id']}: {e}", exc_info=True)
        return error_response('Failed to delete station', 500)
    finally:
        cursor.close()

    if not deleted:
        return error_response('Station not found', 404)

    return jsonify({'success': True, 'deleted': station['id']})
