"""
Quality tiers and visibility rules for Station Directory

Maps an overall quality score to a named tier and decides whether a
station should be hidden, featured or offered as an editor's pick.

Tiers (lower bound inclusive):
- premium: 90+
- high:    80+
- good:    70+
- fair:    60+
- poor:    below 60

Hiding is one-way: a recalculation can deactivate a station, but only an
admin can turn it back on.
"""

import logging

logger = logging.getLogger(__name__)


TIER_PREMIUM = 'premium'
TIER_HIGH = 'high'
TIER_GOOD = 'good'
TIER_FAIR = 'fair'
TIER_POOR = 'poor'

# Highest tier first: (tier, minimum score)
TIER_THRESHOLDS = (
    (TIER_PREMIUM, 90),
    (TIER_HIGH, 80),
    (TIER_GOOD, 70),
    (TIER_FAIR, 60),
    (TIER_POOR, 0),
)

TIERS = tuple(tier for tier, _ in TIER_THRESHOLDS)

TIER_INFO = {
    TIER_PREMIUM: {
        'name': 'Premium Quality',
        'description': 'Exceptional stations with excellent reliability and rich features',
        'color': '#10b981',
        'badge': '🏆',
    },
    TIER_HIGH: {
        'name': 'High Quality',
        'description': 'Reliable stations with good audio and metadata',
        'color': '#3b82f6',
        'badge': '⭐',
    },
    TIER_GOOD: {
        'name': 'Good Quality',
        'description': 'Solid stations with decent reliability',
        'color': '#6366f1',
        'badge': '✓',
    },
    TIER_FAIR: {
        'name': 'Fair Quality',
        'description': 'Basic stations that work most of the time',
        'color': '#f59e0b',
        'badge': '○',
    },
    TIER_POOR: {
        'name': 'Poor Quality',
        'description': 'Stations with known issues or limited reliability',
        'color': '#ef4444',
        'badge': '⚠️',
    },
}

# Visibility thresholds
HIDE_RULES = (
    # (minimum feedback count, score below which the station is hidden)
    (5, 40),
    (3, 30),
)
EDITORS_PICK_MIN_SCORE = 85
EDITORS_PICK_MIN_FEEDBACK = 3
FEATURED_MIN_SCORE = 70


def classify_tier(score):
    """Map an overall score to its tier name

    Args:
        score: Overall quality score (0-100)

    Returns:
        str: 'premium', 'high', 'good', 'fair' or 'poor'
    """
    for tier, minimum in TIER_THRESHOLDS:
        if score >= minimum:
            return tier
    return TIER_POOR


def tier_info(tier):
    """Get display metadata for a tier

    Unknown tiers fall back to the 'fair' entry.

    Args:
        tier: Tier name

    Returns:
        dict: {'name', 'description', 'color', 'badge'}
    """
    info = TIER_INFO.get(tier)
    if info is None:
        logger.warning(f"Unknown quality tier {tier!r}, using '{TIER_FAIR}'")
        info = TIER_INFO[TIER_FAIR]
    return dict(info)


def tier_score_range(tier):
    """Get the score interval covered by a tier

    Args:
        tier: Tier name

    Returns:
        tuple: (minimum inclusive, maximum exclusive or None for the top tier),
               or None if the tier is unknown
    """
    upper = None
    for name, minimum in TIER_THRESHOLDS:
        if name == tier:
            return minimum, upper
        upper = minimum
    return None


def should_hide_station(score, feedback_count):
    """Decide whether a station should be deactivated

    Hidden when 5+ feedback and score < 40, or 3+ feedback and score < 30.
    """
    for min_feedback, score_floor in HIDE_RULES:
        if feedback_count >= min_feedback and score < score_floor:
            return True
    return False


def qualifies_for_editors_pick(score, feedback_count):
    return score >= EDITORS_PICK_MIN_SCORE and feedback_count >= EDITORS_PICK_MIN_FEEDBACK


def qualifies_for_featured(score):
    return score >= FEATURED_MIN_SCORE
