"""
Station Quality Scoring for Station Directory

This module turns listener feedback and station metadata into a single
0-100 quality score:
- Feedback aggregation (unresolved feedback -> per-type counts)
- Metadata richness (now-playing API, artwork, description, language)
- Weighted overall score with a cold-start fallback for stations that
  have never received feedback

Scoring Weights:
----------------
    overall = stream_reliability   * 0.30
            + audio_quality        * 0.25
            + information_accuracy * 0.20
            + user_satisfaction    * 0.15
            + metadata_richness    * 0.10

Every sub-score lives in [0, 100], so the weighted sum does too.

Cold Start:
-----------
Most stations never receive explicit feedback. When a station has none,
the score is built from fixed base values nudged by popularity
(plays + likes) and stream bitrate instead of falling to zero.

All functions here are pure: no I/O, no shared state. Callers pass in
the unresolved feedback for a station and a station dict (a database row
or any mapping with the same keys).

Usage:
------
    from station_directory.quality import aggregate_feedback, compute_quality_score

    summary = aggregate_feedback(unresolved_feedback)
    result = compute_quality_score(summary, station)
    result['overall']     # 78.4
    result['breakdown']   # {'stream_reliability': ..., ...}
"""

import math
import logging
from datetime import datetime, timezone
from typing import Dict, List, Mapping

logger = logging.getLogger(__name__)


# Feedback types (closed set)
FEEDBACK_STREAM_BROKEN = 'stream_broken'
FEEDBACK_POOR_QUALITY = 'poor_quality'
FEEDBACK_WRONG_INFO = 'wrong_info'
FEEDBACK_GREAT_STATION = 'great_station'
FEEDBACK_MISSING_METADATA = 'missing_metadata'

FEEDBACK_TYPES = (
    FEEDBACK_STREAM_BROKEN,
    FEEDBACK_POOR_QUALITY,
    FEEDBACK_WRONG_INFO,
    FEEDBACK_GREAT_STATION,
    FEEDBACK_MISSING_METADATA,
)

# Component weights (sum to 1.0)
WEIGHTS = {
    'stream_reliability': 0.30,
    'audio_quality': 0.25,
    'information_accuracy': 0.20,
    'user_satisfaction': 0.15,
    'metadata_richness': 0.10,
}

# Cold-start base values
BASE_STREAM_RELIABILITY = 75
BASE_AUDIO_QUALITY = 70
BASE_INFORMATION_ACCURACY = 80
BASE_USER_SATISFACTION = 65


def is_valid_feedback_type(feedback_type):
    """Check a feedback type against the closed set

    Args:
        feedback_type: Feedback type string

    Returns:
        True if known, False otherwise
    """
    return feedback_type in FEEDBACK_TYPES


def empty_feedback_summary():
    """Return an all-zero feedback summary"""
    summary = {'total': 0}
    for feedback_type in FEEDBACK_TYPES:
        summary[feedback_type] = 0
    return summary


def aggregate_feedback(records: List[Mapping]) -> Dict[str, int]:
    """Count feedback records per type

    The caller is responsible for passing unresolved feedback only.
    Records with an unknown type still count toward the total.

    Args:
        records: List of feedback dicts (each with a 'feedback_type' key)

    Returns:
        dict: {'total', 'stream_broken', 'poor_quality', 'wrong_info',
               'great_station', 'missing_metadata'}
    """
    summary = empty_feedback_summary()
    summary['total'] = len(records)

    for record in records:
        feedback_type = record.get('feedback_type')
        if feedback_type in FEEDBACK_TYPES:
            summary[feedback_type] += 1
        else:
            logger.debug(f"Ignoring unknown feedback type in summary: {feedback_type!r}")

    return summary


def _clamp(value, low=0, high=100):
    return max(low, min(high, value))


def compute_metadata_richness(station: Mapping) -> int:
    """Score how complete a station's metadata is

    Scoring (additive):
    - +40 now-playing API configured (URL and type both set)
    - +25 any artwork (local image, logo or favicon)
    - +20 description longer than 50 chars (+10 if longer than 10)
    - +10 language set

    Args:
        station: Station dict

    Returns:
        int: Score in [0, 100]
    """
    score = 0

    if station.get('metadata_api_url') and station.get('metadata_api_type'):
        score += 40

    if station.get('local_image_url') or station.get('logo') or station.get('favicon'):
        score += 25

    description = station.get('description') or ''
    if len(description) > 50:
        score += 20
    elif len(description) > 10:
        score += 10

    if station.get('language'):
        score += 10

    return _clamp(score)


def _feedback_components(summary):
    total = summary['total']

    return {
        'stream_reliability': max(0, 100 - (summary.get(FEEDBACK_STREAM_BROKEN, 0) / total) * 100),
        'audio_quality': max(0, 100 - (summary.get(FEEDBACK_POOR_QUALITY, 0) / total) * 100),
        'information_accuracy': max(0, 100 - (summary.get(FEEDBACK_WRONG_INFO, 0) / total) * 100),
        'user_satisfaction': (summary.get(FEEDBACK_GREAT_STATION, 0) / total) * 100,
    }


def _cold_start_components(station):
    stream_reliability = BASE_STREAM_RELIABILITY
    audio_quality = BASE_AUDIO_QUALITY
    information_accuracy = BASE_INFORMATION_ACCURACY
    user_satisfaction = BASE_USER_SATISFACTION

    clickcount = station.get('clickcount')
    votes = station.get('votes')
    if clickcount and votes:
        popularity = min(100, (clickcount + votes * 2) / 10)
        stream_reliability += popularity * 0.2
        user_satisfaction += popularity * 0.3

    bitrate = station.get('bitrate')
    if bitrate:
        if bitrate >= 128:
            audio_quality += 20
        elif bitrate >= 96:
            audio_quality += 10
        elif bitrate < 64:
            audio_quality -= 20

    return {
        'stream_reliability': _clamp(stream_reliability),
        'audio_quality': _clamp(audio_quality),
        'information_accuracy': _clamp(information_accuracy),
        'user_satisfaction': _clamp(user_satisfaction),
    }


def round_score(value):
    """Round a score to 2 decimal places, halves rounded up"""
    return math.floor(value * 100 + 0.5) / 100


def compute_quality_score(summary: Mapping, station: Mapping) -> Dict:
    """Calculate a station's overall quality score

    Args:
        summary: Feedback summary from aggregate_feedback()
        station: Station dict (metadata, clickcount, votes, bitrate)

    Returns:
        dict: {
            'overall': float in [0, 100], rounded to 2 decimals,
            'breakdown': unrounded sub-scores keyed by component,
            'feedback_count': number of feedback records scored,
            'last_calculated': timezone-aware UTC datetime
        }
    """
    total = summary.get('total', 0)

    if total > 0:
        breakdown = _feedback_components(summary)
    else:
        breakdown = _cold_start_components(station)

    breakdown['metadata_richness'] = compute_metadata_richness(station)

    overall = sum(breakdown[component] * weight for component, weight in WEIGHTS.items())

    return {
        'overall': round_score(overall),
        'breakdown': breakdown,
        'feedback_count': total,
        'last_calculated': datetime.now(timezone.utc),
    }
