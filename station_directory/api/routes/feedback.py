"""
Feedback routes for Station Directory API

Listeners report problems (or praise) for a station; each report is
stored and the station is rescored from its unresolved feedback. Admins
review pending reports and resolve them, which rescores again without
the resolved report.
"""

import logging
from flask import Blueprint, jsonify, request

from station_directory.auth import requires_auth
from station_directory.database import queries
from station_directory.quality import (
    is_valid_feedback_type, FEEDBACK_TYPES, FEEDBACK_STREAM_BROKEN, FEEDBACK_WRONG_INFO
)
from station_directory.recalculation import StationNotFoundError, FeedbackRateLimitedError
from station_directory.api.helpers import (
    get_db, get_recalculator, get_app_setting, get_client_ip, error_response,
    get_pagination, pagination_info, lookup_station, serialize_score
)

logger = logging.getLogger(__name__)

feedback_bp = Blueprint('feedback', __name__)

# Feedback types an admin can act on (broken stream URL, wrong station info)
ACTIONABLE_FEEDBACK_TYPES = [FEEDBACK_STREAM_BROKEN, FEEDBACK_WRONG_INFO]


@feedback_bp.route('/api/stations/<station_ref>/feedback', methods=['POST'])
def api_submit_feedback(station_ref):
    """Submit feedback for a station

    Body: {"feedback_type": "...", "details": "...", "user_id": 123}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response('Request body must be a JSON object', 400)

    feedback_type = data.get('feedback_type')
    if not is_valid_feedback_type(feedback_type):
        return error_response(
            f"Invalid feedback type. Expected one of: {', '.join(FEEDBACK_TYPES)}", 400
        )

    station, error = lookup_station(station_ref)
    if error:
        return error

    window_minutes = get_app_setting('rate_limits.feedback_window_minutes', 60)

    try:
        feedback_id, result = get_recalculator().submit_feedback(
            station['id'],
            feedback_type,
            ip_address=get_client_ip(),
            details=data.get('details'),
            user_id=data.get('user_id'),
            user_agent=request.headers.get('User-Agent', 'unknown'),
            window_minutes=window_minutes
        )
    except FeedbackRateLimitedError:
        return error_response('Please wait before submitting more feedback for this station', 429)
    except StationNotFoundError:
        return error_response('Station not found', 404)
    except Exception as e:
        logger.error(f"Error submitting station feedback: {e}", exc_info=True)
        return error_response('Failed to submit feedback', 500)

    logger.info(f"Feedback received for station {station['name']}: {feedback_type}")

    return jsonify({
        'success': True,
        'message': 'Feedback submitted successfully',
        'feedback_id': feedback_id,
        'quality_score': result['overall'],
        'tier': result['tier']
    }), 201


@feedback_bp.route('/api/stations/<station_ref>/feedback')
def api_station_feedback(station_ref):
    """Paginated feedback for a station, newest first"""
    station, error = lookup_station(station_ref)
    if error:
        return error

    page, limit = get_pagination()

    cursor = get_db().get_cursor()
    try:
        result = queries.get_feedback_paginated(cursor, station['id'], page, limit)
    finally:
        cursor.close()

    # IP addresses and user agents stay server side
    items = [
        {key: value for key, value in item.items() if key not in ('ip_address', 'user_agent')}
        for item in result['items']
    ]

    return jsonify({
        'success': True,
        'feedback': items,
        'pagination': pagination_info(result)
    })


@feedback_bp.route('/api/feedback/pending')
@requires_auth
def api_pending_feedback():
    """Unresolved actionable feedback for moderation"""
    limit = max(1, min(100, request.args.get('limit', 100, type=int)))

    cursor = get_db().get_cursor()
    try:
        pending = queries.get_pending_feedback(cursor, ACTIONABLE_FEEDBACK_TYPES, limit=limit)
    finally:
        cursor.close()

    return jsonify({'success': True, 'items': pending, 'count': len(pending)})


@feedback_bp.route('/api/feedback/<int:feedback_id>/resolve', methods=['PATCH'])
@requires_auth
def api_resolve_feedback(feedback_id):
    """Resolve (default) or reopen feedback

    Body: {"resolved": true|false}
    """
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return error_response('Request body must be a JSON object', 400)

    resolved = data.get('resolved') is not False

    try:
        feedback, result = get_recalculator().resolve_feedback(feedback_id, resolved)
    except Exception as e:
        logger.error(f"Error resolving feedback {feedback_id}: {e}", exc_info=True)
        return error_response('Failed to resolve feedback', 500)

    if feedback is None:
        return error_response('Feedback not found', 404)

    return jsonify({
        'success': True,
        'feedback_id': feedback_id,
        'resolved': feedback['resolved'],
        'quality': serialize_score(result)
    })
