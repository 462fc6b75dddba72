"""
Command-line interface for Station Directory

This module provides the CLI entry point for all operations:
- Run the API server with the background scheduler
- Bulk quality recalculation
- Score inspection for a single station
- Tier listings
- Admin password setup
- Default settings file creation

Usage:
    python -m station_directory.cli --help
"""

import os
import sys
import getpass
import argparse
import logging

from station_directory.logging_setup import setup_logging
from station_directory.settings import (
    DEFAULT_SETTINGS, load_settings, save_settings, get_setting, get_settings_path
)
from station_directory.database import StationDatabase, queries
from station_directory.recalculation import QualityRecalculator, StationNotFoundError
from station_directory.tiers import TIERS, classify_tier, tier_info, tier_score_range

logger = logging.getLogger(__name__)


def load_database(settings):
    """Open the database configured in settings

    Returns:
        StationDatabase instance (connected)
    """
    db = StationDatabase(get_setting(settings, 'database.file', 'stations.db'))
    db.connect()
    return db


def cmd_recalculate_all(args, settings):
    """Recalculate every station's score

    Usage: --recalculate-all
    """
    db = load_database(settings)
    try:
        summary = QualityRecalculator(db).recalculate_all()
    finally:
        db.close()

    print(f"[OK] Recalculated {summary['updated']}/{summary['total_stations']} stations "
          f"({summary['failed']} failed, {summary['hidden']} hidden)")
    return 0 if summary['failed'] == 0 else 1


def cmd_score(args, settings):
    """Print a station's current score breakdown

    Usage: --score STATION
    """
    db = load_database(settings)
    try:
        station = db.get_station(args.score)
        if station is None:
            print(f"[FAIL] Station not found: {args.score}")
            return 1

        try:
            station, summary, result = QualityRecalculator(db).score_station(station['id'])
        except StationNotFoundError:
            print(f"[FAIL] Station not found: {args.score}")
            return 1
    finally:
        db.close()

    tier = classify_tier(result['overall'])
    info = tier_info(tier)

    print(f"\n{station['name']} (id={station['id']}, public_id={station['public_id']})")
    print(f"  Overall: {result['overall']:.2f}  {info['badge']} {info['name']}")
    print(f"  Active: {'yes' if station['is_active'] else 'no'}")
    print(f"  Unresolved feedback: {summary['total']}")
    for component, value in result['breakdown'].items():
        print(f"    {component:<22} {value:6.2f}")
    print()
    return 0


def cmd_list_tier(args, settings):
    """List active stations in a tier

    Usage: --list-tier TIER [--limit N]
    """
    score_range = tier_score_range(args.list_tier)
    if score_range is None:
        print(f"[FAIL] Unknown tier: {args.list_tier} (expected one of: {', '.join(TIERS)})")
        return 1

    db = load_database(settings)
    cursor = db.get_cursor()
    try:
        result = queries.get_stations_by_score_range(cursor, score_range[0], score_range[1], 1, args.limit)
    finally:
        cursor.close()
        db.close()

    info = tier_info(args.list_tier)
    print(f"\n{info['badge']} {info['name']}: {result['total']} station(s)\n")
    for station in result['items']:
        print(f"  {station['quality_score']:6.2f}  {station['public_id']}  {station['name']}")
    print()
    return 0


def cmd_set_password(args, settings):
    """Create the admin auth file

    Usage: --set-password USER
    """
    from station_directory.auth import hash_password, save_auth_config

    password = getpass.getpass('Admin password: ')
    if not password:
        print("[FAIL] Password must not be empty")
        return 1
    if getpass.getpass('Repeat password: ') != password:
        print("[FAIL] Passwords do not match")
        return 1

    if save_auth_config(args.set_password, hash_password(password)):
        print(f"[OK] Admin user '{args.set_password}' saved")
        return 0

    print("[FAIL] Could not save auth file")
    return 1


def cmd_init_settings(args, settings):
    """Write a settings file with the default values

    Usage: --init-settings [--settings FILE]
    """
    settings_file = args.settings or get_settings_path()
    if os.path.exists(settings_file):
        print(f"[FAIL] Settings file already exists: {settings_file}")
        return 1

    if save_settings(DEFAULT_SETTINGS, settings_file):
        print(f"[OK] Default settings written to {settings_file}")
        return 0

    print(f"[FAIL] Could not write settings file: {settings_file}")
    return 1


def cmd_serve(args, settings):
    """Start the API server and background scheduler

    Usage: --serve [--host HOST] [--port PORT]
    """
    from station_directory.api import create_app, run_app
    from station_directory.scheduler import create_scheduler

    host = args.host or get_setting(settings, 'api.host', '0.0.0.0')
    port = args.port or get_setting(settings, 'api.port', 5000)
    debug = get_setting(settings, 'api.debug', False)

    db = load_database(settings)
    app = create_app(db, settings)

    scheduler = create_scheduler(app.config['recalculator'], app.config['rate_limiter'], settings)
    scheduler.start()

    try:
        run_app(app, host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt received")
    finally:
        logger.info("Shutting down...")
        scheduler.shutdown(wait=True)
        db.close()
        logger.info("Shutdown complete. Goodbye!")

    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        description='Station Directory - station quality scoring and directory API',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument('--settings', metavar='FILE',
                        help='Settings file (default: station_directory_settings.json)')
    parser.add_argument('--init-settings', action='store_true',
                        help='Write a settings file with default values')
    parser.add_argument('--serve', action='store_true',
                        help='Start the API server with the background scheduler')
    parser.add_argument('--recalculate-all', action='store_true',
                        help='Recalculate quality scores for all stations')
    parser.add_argument('--score', metavar='STATION',
                        help='Show the score breakdown for a station (id or public id)')
    parser.add_argument('--list-tier', metavar='TIER', choices=TIERS,
                        help=f"List active stations in a tier ({', '.join(TIERS)})")
    parser.add_argument('--limit', type=int, default=50,
                        help='Maximum stations to list (default: 50)')
    parser.add_argument('--set-password', metavar='USER',
                        help='Create the admin auth file for USER (prompts for password)')
    parser.add_argument('--host', metavar='HOST',
                        help='API host (default: from settings or 0.0.0.0)')
    parser.add_argument('--port', type=int, metavar='PORT',
                        help='API port (default: from settings or 5000)')

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.settings)
    setup_logging(settings)

    if args.serve:
        return cmd_serve(args, settings)
    elif args.recalculate_all:
        return cmd_recalculate_all(args, settings)
    elif args.score:
        return cmd_score(args, settings)
    elif args.list_tier:
        return cmd_list_tier(args, settings)
    elif args.set_password:
        return cmd_set_password(args, settings)
    elif args.init_settings:
        return cmd_init_settings(args, settings)
    else:
        parser.print_help()
        return 0


if __name__ == '__main__':
    sys.exit(main())
