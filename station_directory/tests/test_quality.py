"""
Unit Tests for Station Quality Scoring

Tests for station_directory.quality module

Run with:
    python -m pytest station_directory/tests/test_quality.py -v
"""

from datetime import datetime

import pytest
from station_directory.quality import (
    aggregate_feedback,
    compute_metadata_richness,
    compute_quality_score,
    empty_feedback_summary,
    is_valid_feedback_type,
    round_score,
    FEEDBACK_TYPES,
    WEIGHTS,
)


RICH_STATION = {
    'metadata_api_url': 'http://api.example.com/nowplaying',
    'metadata_api_type': 'icecast',
    'logo': 'http://example.com/logo.png',
    'description': 'A well described station playing the best pop hits around the clock.',
    'language': 'english',
}


def feedback(*types):
    return [{'feedback_type': t, 'resolved': False} for t in types]


def summary(**counts):
    result = empty_feedback_summary()
    result.update(counts)
    result['total'] = counts.get('total', sum(counts.values()))
    return result


class TestAggregateFeedback:
    """Tests for aggregate_feedback()"""

    def test_empty_list(self):
        assert aggregate_feedback([]) == {
            'total': 0,
            'stream_broken': 0,
            'poor_quality': 0,
            'wrong_info': 0,
            'great_station': 0,
            'missing_metadata': 0,
        }

    def test_counts_per_type(self):
        result = aggregate_feedback(feedback(
            'stream_broken', 'stream_broken', 'great_station', 'wrong_info', 'missing_metadata'
        ))
        assert result['total'] == 5
        assert result['stream_broken'] == 2
        assert result['great_station'] == 1
        assert result['wrong_info'] == 1
        assert result['missing_metadata'] == 1
        assert result['poor_quality'] == 0

    def test_categories_sum_to_total(self):
        records = feedback(*(FEEDBACK_TYPES * 3))
        result = aggregate_feedback(records)
        assert result['total'] == len(records)
        assert sum(result[t] for t in FEEDBACK_TYPES) == result['total']

    def test_unknown_type_counts_toward_total_only(self):
        result = aggregate_feedback(feedback('great_station', 'not_a_type'))
        assert result['total'] == 2
        assert result['great_station'] == 1
        assert sum(result[t] for t in FEEDBACK_TYPES) == 1

    def test_valid_feedback_types(self):
        for feedback_type in FEEDBACK_TYPES:
            assert is_valid_feedback_type(feedback_type)
        assert not is_valid_feedback_type('stream_not_working')
        assert not is_valid_feedback_type(None)


class TestMetadataRichness:
    """Tests for compute_metadata_richness()"""

    def test_empty_station(self):
        assert compute_metadata_richness({}) == 0

    def test_none_fields(self):
        station = {key: None for key in ('metadata_api_url', 'metadata_api_type', 'logo',
                                         'favicon', 'local_image_url', 'description', 'language')}
        assert compute_metadata_richness(station) == 0

    def test_metadata_api_requires_url_and_type(self):
        assert compute_metadata_richness({'metadata_api_url': 'http://x'}) == 0
        assert compute_metadata_richness({'metadata_api_type': 'icecast'}) == 0
        assert compute_metadata_richness({'metadata_api_url': 'http://x', 'metadata_api_type': 'icecast'}) == 40

    @pytest.mark.parametrize('field', ['local_image_url', 'logo', 'favicon'])
    def test_any_image_counts_once(self, field):
        assert compute_metadata_richness({field: 'http://example.com/img.png'}) == 25

    def test_all_images_still_25(self):
        station = {'local_image_url': 'a.png', 'logo': 'b.png', 'favicon': 'c.ico'}
        assert compute_metadata_richness(station) == 25

    def test_description_length_thresholds(self):
        assert compute_metadata_richness({'description': 'x' * 10}) == 0
        assert compute_metadata_richness({'description': 'x' * 11}) == 10
        assert compute_metadata_richness({'description': 'x' * 50}) == 10
        assert compute_metadata_richness({'description': 'x' * 51}) == 20

    def test_language(self):
        assert compute_metadata_richness({'language': 'english'}) == 10

    def test_fully_populated(self):
        assert compute_metadata_richness(RICH_STATION) == 95

    def test_monotonic_as_fields_are_added(self):
        station = {}
        previous = compute_metadata_richness(station)
        for key, value in RICH_STATION.items():
            station[key] = value
            current = compute_metadata_richness(station)
            assert current >= previous
            assert 0 <= current <= 100
            previous = current


class TestQualityScoreWithFeedback:
    """Tests for compute_quality_score() when the station has feedback"""

    def test_single_broken_stream(self):
        result = compute_quality_score(summary(stream_broken=1), {})
        assert result['breakdown']['stream_reliability'] == 0
        assert result['breakdown']['audio_quality'] == 100
        assert result['breakdown']['information_accuracy'] == 100
        assert result['breakdown']['user_satisfaction'] == 0
        assert result['feedback_count'] == 1

    def test_linear_penalty_and_reward(self):
        records = feedback(*(['stream_broken'] * 6 + ['great_station'] * 4))
        result = compute_quality_score(aggregate_feedback(records), {})
        assert result['breakdown']['stream_reliability'] == pytest.approx(40)
        assert result['breakdown']['user_satisfaction'] == pytest.approx(40)
        assert result['feedback_count'] == 10

    def test_popularity_ignored_when_feedback_exists(self):
        base = compute_quality_score(summary(great_station=2), {'bitrate': 32})
        popular = compute_quality_score(summary(great_station=2),
                                        {'clickcount': 5000, 'votes': 500, 'bitrate': 320})
        assert base['overall'] == popular['overall']

    def test_all_great_with_rich_metadata(self):
        result = compute_quality_score(summary(great_station=4), RICH_STATION)
        # 100*.3 + 100*.25 + 100*.2 + 100*.15 + 95*.1
        assert result['overall'] == 99.5

    def test_missing_metadata_feedback_does_not_penalize(self):
        result = compute_quality_score(summary(missing_metadata=3), {})
        assert result['breakdown']['stream_reliability'] == 100
        assert result['breakdown']['user_satisfaction'] == 0
        assert result['overall'] == 75.0


class TestQualityScoreColdStart:
    """Tests for compute_quality_score() with no feedback"""

    def test_bare_station_uses_base_values(self):
        result = compute_quality_score(empty_feedback_summary(), {})
        assert result['breakdown'] == {
            'stream_reliability': 75,
            'audio_quality': 70,
            'information_accuracy': 80,
            'user_satisfaction': 65,
            'metadata_richness': 0,
        }
        # 75*.3 + 70*.25 + 80*.2 + 65*.15
        assert result['overall'] == 65.75
        assert result['feedback_count'] == 0

    def test_popular_rich_high_bitrate_station(self):
        station = dict(RICH_STATION, clickcount=100, votes=50, bitrate=128)
        result = compute_quality_score(empty_feedback_summary(), station)
        assert result['breakdown']['stream_reliability'] == pytest.approx(79)
        assert result['breakdown']['user_satisfaction'] == pytest.approx(71)
        assert result['breakdown']['audio_quality'] == 90
        assert result['overall'] == 82.35
        assert result['overall'] >= 70

    def test_popularity_requires_clicks_and_votes(self):
        no_votes = compute_quality_score(empty_feedback_summary(), {'clickcount': 10000, 'votes': 0})
        no_clicks = compute_quality_score(empty_feedback_summary(), {'clickcount': None, 'votes': 300})
        assert no_votes['breakdown']['stream_reliability'] == 75
        assert no_clicks['breakdown']['user_satisfaction'] == 65

    def test_popularity_capped_and_components_clamped(self):
        result = compute_quality_score(empty_feedback_summary(), {'clickcount': 10 ** 6, 'votes': 10 ** 6})
        assert result['breakdown']['stream_reliability'] == 95
        assert result['breakdown']['user_satisfaction'] == 95

    @pytest.mark.parametrize('bitrate,expected', [
        (320, 90),
        (128, 90),
        (127, 80),
        (96, 80),
        (95, 70),
        (64, 70),
        (63, 50),
        (32, 50),
        (0, 70),
        (None, 70),
    ])
    def test_bitrate_adjustment(self, bitrate, expected):
        result = compute_quality_score(empty_feedback_summary(), {'bitrate': bitrate})
        assert result['breakdown']['audio_quality'] == expected


class TestQualityScoreResult:
    """Shape and bounds of compute_quality_score() output"""

    @pytest.mark.parametrize('counts,station', [
        ({}, {}),
        ({}, dict(RICH_STATION, clickcount=10 ** 9, votes=10 ** 9, bitrate=320)),
        ({'stream_broken': 5, 'poor_quality': 5, 'wrong_info': 5}, {}),
        ({'great_station': 7}, RICH_STATION),
    ])
    def test_overall_in_bounds(self, counts, station):
        result = compute_quality_score(summary(**counts), station)
        assert 0 <= result['overall'] <= 100

    def test_deterministic_apart_from_timestamp(self):
        first = compute_quality_score(summary(poor_quality=1, great_station=2), RICH_STATION)
        second = compute_quality_score(summary(poor_quality=1, great_station=2), RICH_STATION)
        assert first['overall'] == second['overall']
        assert first['breakdown'] == second['breakdown']

    def test_breakdown_is_unrounded(self):
        result = compute_quality_score(summary(great_station=1, stream_broken=2), {})
        assert result['breakdown']['user_satisfaction'] == pytest.approx(100 / 3)
        assert result['breakdown']['user_satisfaction'] != round(100 / 3, 2)

    def test_overall_rounded_to_two_decimals(self):
        result = compute_quality_score(summary(great_station=1, stream_broken=2), {})
        assert result['overall'] == round(result['overall'], 2)

    def test_last_calculated_is_aware_timestamp(self):
        result = compute_quality_score(empty_feedback_summary(), {})
        assert isinstance(result['last_calculated'], datetime)
        assert result['last_calculated'].tzinfo is not None

    def test_weights_sum_to_one(self):
        assert sum(WEIGHTS.values()) == pytest.approx(1.0)

    def test_round_score_rounds_halves_up(self):
        assert round_score(0.125) == 0.13
        assert round_score(0.375) == 0.38
        assert round_score(10 / 3) == 3.33
        assert round_score(65.75) == 65.75
