"""
Quality routes for Station Directory API

Score breakdowns, tier browsing, featured stations / editor's picks and
the admin bulk recalculation.
"""

import logging
from flask import Blueprint, jsonify, request

from station_directory.auth import requires_auth
from station_directory.database import queries
from station_directory.recalculation import StationNotFoundError
from station_directory.tiers import (
    TIERS, classify_tier, tier_info, tier_score_range,
    qualifies_for_featured, qualifies_for_editors_pick,
    FEATURED_MIN_SCORE, EDITORS_PICK_MIN_SCORE, EDITORS_PICK_MIN_FEEDBACK
)
from station_directory.api.helpers import (
    get_db, get_recalculator, error_response, get_pagination, pagination_info,
    lookup_station, serialize_score
)
from station_directory.api.routes.stations import with_tier

logger = logging.getLogger(__name__)

quality_bp = Blueprint('quality', __name__)


@quality_bp.route('/api/stations/<station_ref>/quality')
def api_station_quality(station_ref):
    """Fresh score for a station from its unresolved feedback (not persisted)"""
    station, error = lookup_station(station_ref)
    if error:
        return error

    try:
        station, summary, result = get_recalculator().score_station(station['id'])
    except StationNotFoundError:
        return error_response('Station not found', 404)

    overall = result['overall']
    tier = classify_tier(overall)

    return jsonify({
        'success': True,
        'station_id': station['id'],
        'public_id': station['public_id'],
        'quality_score': overall,
        'breakdown': serialize_score(result)['breakdown'],
        'feedback_count': result['feedback_count'],
        'feedback_summary': summary,
        'tier': tier,
        'tier_info': tier_info(tier),
        'featured': qualifies_for_featured(overall),
        'editors_pick': qualifies_for_editors_pick(overall, result['feedback_count']),
        'last_calculated': result['last_calculated'].isoformat()
    })


@quality_bp.route('/api/quality/tiers')
def api_quality_tiers():
    """Tier catalogue with score ranges, display info and station counts"""
    cursor = get_db().get_cursor()
    try:
        tiers = []
        for tier in TIERS:
            min_score, max_score = tier_score_range(tier)
            tiers.append({
                'tier': tier,
                'min_score': min_score,
                'max_score': max_score,
                'info': tier_info(tier),
                'station_count': queries.count_stations_by_score_range(cursor, min_score, max_score)
            })
    finally:
        cursor.close()

    return jsonify({'success': True, 'tiers': tiers})


@quality_bp.route('/api/quality/by-tier/<tier>')
def api_stations_by_tier(tier):
    """Active stations in one tier, best first"""
    score_range = tier_score_range(tier)
    if score_range is None:
        return error_response('Invalid quality tier', 400)

    page, limit = get_pagination()
    min_score, max_score = score_range

    cursor = get_db().get_cursor()
    try:
        result = queries.get_stations_by_score_range(cursor, min_score, max_score, page, limit)
    finally:
        cursor.close()

    return jsonify({
        'success': True,
        'tier': tier,
        'tier_info': tier_info(tier),
        'stations': [with_tier(station) for station in result['items']],
        'pagination': pagination_info(result)
    })


@quality_bp.route('/api/quality/featured')
def api_featured_stations():
    """Active stations good enough to feature"""
    limit = max(1, min(100, request.args.get('limit', 20, type=int)))

    cursor = get_db().get_cursor()
    try:
        stations = queries.get_top_quality_stations(cursor, FEATURED_MIN_SCORE, limit=limit)
    finally:
        cursor.close()

    return jsonify({
        'success': True,
        'stations': [with_tier(station) for station in stations],
        'count': len(stations)
    })


@quality_bp.route('/api/quality/editors-picks')
def api_editors_picks():
    """Active stations qualifying as editor's picks"""
    limit = max(1, min(100, request.args.get('limit', 20, type=int)))

    cursor = get_db().get_cursor()
    try:
        stations = queries.get_top_quality_stations(
            cursor, EDITORS_PICK_MIN_SCORE, min_feedback=EDITORS_PICK_MIN_FEEDBACK, limit=limit
        )
    finally:
        cursor.close()

    return jsonify({
        'success': True,
        'stations': [with_tier(station) for station in stations],
        'count': len(stations)
    })


@quality_bp.route('/api/quality/recalculate-all', methods=['POST'])
@requires_auth
def api_recalculate_all():
    """Recalculate every station's score"""
    try:
        summary = get_recalculator().recalculate_all()
    except Exception as e:
        logger.error(f"Error recalculating all quality scores: {e}", exc_info=True)
        return error_response('Failed to recalculate quality scores', 500)

    return jsonify({
        'success': True,
        'message': f"Updated quality scores for {summary['updated']} stations",
        **summary
    })
