"""
Flask API package for Station Directory

JSON endpoints for listeners (play, like, feedback, browsing by quality)
and for admins (station management, feedback moderation, bulk
recalculation).

Key Principle: routes stay thin. Scoring lives in quality.py / tiers.py,
persistence in database/, and the read-modify-write of a score in
recalculation.QualityRecalculator.

Shared objects are kept in app.config:
- 'db': StationDatabase (connected)
- 'recalculator': QualityRecalculator
- 'rate_limiter': RateLimitStore for play/like throttling
- 'settings': settings dict
"""

import logging
from datetime import datetime

from flask import Flask, jsonify

from station_directory import get_version
from station_directory.rate_limit import InMemoryRateLimitStore
from station_directory.recalculation import QualityRecalculator
from station_directory.settings import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)


def create_app(database, settings=None, rate_limiter=None):
    """Create the Flask application

    Args:
        database: StationDatabase instance (connected)
        settings: Settings dict (default: DEFAULT_SETTINGS)
        rate_limiter: RateLimitStore (default: new InMemoryRateLimitStore)

    Returns:
        Flask app
    """
    app = Flask(__name__)
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    app.config['VERSION'] = get_version()
    app.config['settings'] = settings if settings is not None else DEFAULT_SETTINGS
    app.config['db'] = database
    app.config['recalculator'] = QualityRecalculator(database)
    app.config['rate_limiter'] = rate_limiter if rate_limiter is not None else InMemoryRateLimitStore()
    app.config['start_time'] = datetime.now()

    from station_directory.api.routes import stations, interactions, feedback, quality

    app.register_blueprint(stations.stations_bp)
    app.register_blueprint(interactions.interactions_bp)
    app.register_blueprint(feedback.feedback_bp)
    app.register_blueprint(quality.quality_bp)

    @app.route('/api/health')
    def health():
        return jsonify({
            'status': 'ok',
            'version': app.config['VERSION'],
            'uptime_seconds': int((datetime.now() - app.config['start_time']).total_seconds())
        })

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({'success': False, 'error': 'Internal server error'}), 500

    logger.info(f"Flask app initialized (database: {database.db_path})")
    return app


def run_app(app, host='0.0.0.0', port=5000, debug=False):
    """Run Flask application

    Args:
        app: Flask app from create_app()
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 5000)
        debug: Enable debug mode (default: False)
    """
    logger.info(f"Starting Station Directory API on {host}:{port}")
    app.run(host=host, port=port, debug=debug, use_reloader=False)
