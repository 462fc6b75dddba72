"""
Station Directory - Package Architecture

Station directory backend for an internet radio aggregator, built around a
station quality-scoring engine fed by listener feedback.

Package Structure:
------------------
station_directory/
├── __init__.py           # Package initialization (this file)
├── quality.py            # Feedback aggregation, metadata richness, quality score
├── tiers.py              # Quality tiers and visibility rules (hide/feature/pick)
├── recalculation.py      # Per-station serialized score recalculation
├── rate_limit.py         # Injectable rate-limit store for play/like events
├── public_ids.py         # 8-character public station IDs
├── database/             # SQLite schema, migrations, queries, CRUD
├── api/                  # Flask JSON API (stations, interactions, feedback, quality)
├── scheduler.py          # APScheduler jobs (nightly recalculation, pruning)
├── auth.py               # HTTP Basic auth for admin routes
├── settings.py           # JSON settings with defaults
├── logging_setup.py      # Console + rotating file logging
├── cli.py                # Command-line interface
└── tests/                # Unit tests for the scoring core

Architecture Principles:
-----------------------
1. Scoring is pure - quality.py and tiers.py never touch the database
2. Only unresolved feedback counts toward a score
3. Hiding is one-way - recalculation can hide a station, only an admin un-hides
4. One writer per station - recalculation holds a per-station lock

Data Flow:
---------
    play / like / feedback / resolve / nightly job
        -> QualityRecalculator (lock station)
        -> read station + unresolved feedback
        -> aggregate_feedback -> compute_quality_score
        -> write quality_score, feedback_count
        -> should_hide_station? -> is_active = 0

Usage:
------
# API server + scheduler
python -m station_directory.cli --serve --port 5000

# Recalculate every station
python -m station_directory.cli --recalculate-all

# Inspect one station
python -m station_directory.cli --score aB3dE5fG

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Station Directory Team"


def get_version():
    """Get the package version

    Returns:
        str: The version number
    """
    return __version__


from .database import StationDatabase
from .quality import aggregate_feedback, compute_metadata_richness, compute_quality_score
from .tiers import (
    classify_tier,
    tier_info,
    should_hide_station,
    qualifies_for_editors_pick,
    qualifies_for_featured,
)

__all__ = [
    "StationDatabase",
    "aggregate_feedback",
    "compute_metadata_richness",
    "compute_quality_score",
    "classify_tier",
    "tier_info",
    "should_hide_station",
    "qualifies_for_editors_pick",
    "qualifies_for_featured",
    "__version__",
]
