"""Tests for analytics.activity — tiers, distribution, segments."""
from unittest.mock import patch

import pytest

from workin_analytics.analytics.activity import (
    ActivityLevel,
    activity_distribution,
    classify,
    classify_members,
    segment_members,
)
from workin_analytics.errors import InvariantViolation


class TestClassify:

    @pytest.mark.parametrize('count, expected', [
        (0, ActivityLevel.INACTIVE),
        (1, ActivityLevel.NEW),
        (2, ActivityLevel.NEW),
        (3, ActivityLevel.ACTIVE),
        (5, ActivityLevel.ACTIVE),
        (9, ActivityLevel.ACTIVE),
        (10, ActivityLevel.POWER),
        (12, ActivityLevel.POWER),
    ])
    def test_thresholds(self, count, expected):
        assert classify(count) is expected

    def test_monotonic_in_event_count(self):
        levels = [classify(n) for n in range(30)]
        assert levels == sorted(levels)

    def test_negative_count_clamped_to_inactive(self, caplog):
        assert classify(-3) is ActivityLevel.INACTIVE
        assert 'negative event count' in caplog.text

    def test_negative_count_raises_when_strict(self):
        with patch('workin_analytics.config.STRICT_INVARIANTS', True):
            with pytest.raises(InvariantViolation):
                classify(-1)

    def test_levels_are_ordered(self):
        assert ActivityLevel.INACTIVE < ActivityLevel.NEW < ActivityLevel.ACTIVE < ActivityLevel.POWER
        assert max(ActivityLevel) is ActivityLevel.POWER


class TestClassifyMembers:

    def test_counts_events_per_member(self, make_member, make_event):
        a, b = make_member(id='a'), make_member(id='b')
        events = [make_event('a') for _ in range(3)] + [make_event('b')]
        assert classify_members([a, b], events) == {'a': ActivityLevel.ACTIVE, 'b': ActivityLevel.NEW}

    def test_ignores_events_of_other_members(self, make_member, make_event):
        a = make_member(id='a')
        events = [make_event('z') for _ in range(12)]
        assert classify_members([a], events) == {'a': ActivityLevel.INACTIVE}

    def test_distribution_has_every_level(self):
        dist = activity_distribution([ActivityLevel.NEW, ActivityLevel.NEW])
        assert dist == {'inactive': 0, 'new': 2, 'active': 0, 'power': 0}


class TestSegments:

    def test_segments_cover_population(self, make_member, make_event):
        members = [make_member(id='p', has_cv=True), make_member(id='n'), make_member(id='i')]
        events = [make_event('p') for _ in range(10)] + [make_event('n')]
        segments = {s.segment: s for s in segment_members(members, events)}

        assert segments['Power Users'].user_count == 1
        assert segments['Usuarios Nuevos'].user_count == 1
        assert segments['Usuarios Activos'].user_count == 0
        assert segments['Inactivos'].user_count == 1
        assert segments['Con CV Subido'].user_count == 1
        assert segments['Power Users'].percentage == pytest.approx(100 / 3)

    def test_empty_population_yields_zero_percentages(self):
        assert all(s.percentage == 0 for s in segment_members([], []))
