"""Tests for analytics.rates."""
from unittest.mock import patch

import pytest

from workin_analytics.analytics.rates import (
    check_invariant,
    clamp_percentage,
    mean,
    percentage,
    round_half_up,
    rounded_percentage,
)
from workin_analytics.errors import InvariantViolation


class TestRates:

    @pytest.mark.parametrize('value, expected', [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (0, 0)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_percentage_of_empty_whole_is_zero(self):
        assert percentage(5, 0) == 0.0

    def test_rounded_percentage(self):
        assert rounded_percentage(1, 8) == 13  # 12.5 rounds up

    def test_clamp(self):
        assert clamp_percentage(120) == 100.0
        assert clamp_percentage(-3) == 0.0

    def test_mean_of_nothing_is_zero(self):
        assert mean([]) == 0.0
        assert mean(x for x in [1, 2]) == 1.5


class TestCheckInvariant:

    def test_passes_through_true(self):
        assert check_invariant(True, 'never logged') is True

    def test_logs_and_returns_false(self, caplog):
        assert check_invariant(False, 'bad %s', 'thing') is False
        assert 'Invariant violated: bad thing' in caplog.text

    def test_raises_when_strict(self):
        with patch('workin_analytics.config.STRICT_INVARIANTS', True):
            with pytest.raises(InvariantViolation, match='bad thing'):
                check_invariant(False, 'bad %s', 'thing')
