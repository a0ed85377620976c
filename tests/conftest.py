"""Shared test fixtures."""
import itertools
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from workin_analytics.analytics.aliases import AliasResolver
from workin_analytics.models import CreditAccount, CreditEvent, EventCategory, Member, ScoredArtifact
from workin_analytics.services.alias_loader import BUNDLED_ALIASES_PATH, fetch_alias_table

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def days_ago(days, hours=0):
    return NOW - timedelta(days=days, hours=hours)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def bundled_table():
    return fetch_alias_table(BUNDLED_ALIASES_PATH)


@pytest.fixture
def resolver(bundled_table):
    return AliasResolver(bundled_table)


@pytest.fixture
def mock_redis():
    """Mock Redis client. Returns a MagicMock with common Redis methods."""
    mock = MagicMock()
    mock.get.return_value = None
    mock.setex.return_value = True
    with patch('workin_analytics.extensions._redis_client', mock):
        yield mock


@pytest.fixture
def make_member():
    """Factory fixture — builds a Member with sensible defaults."""
    ids = itertools.count(1)

    def _make(**overrides):
        defaults = dict(
            id=f"u{next(ids)}",
            email='student@example.com',
            display_name='Estudiante',
            university='UPC',
            registered_at=days_ago(60),
        )
        defaults.update(overrides)
        return Member(**defaults)
    return _make


@pytest.fixture
def make_event():
    """Factory fixture — builds a CreditEvent (a tool spend by default)."""
    ids = itertools.count(1)

    def _make(member_id='u1', **overrides):
        defaults = dict(
            id=f"tx{next(ids)}",
            member_id=member_id,
            category=EventCategory.SPEND,
            tool='cv-review',
            amount=1.0,
            created_at=days_ago(5),
            status='completed',
        )
        defaults.update(overrides)
        return CreditEvent(**defaults)
    return _make


@pytest.fixture
def make_purchase(make_event):
    """Factory fixture — a paid package purchase."""
    def _make(member_id='u1', amount=29.9, **overrides):
        defaults = dict(
            category=EventCategory.PURCHASE,
            tool=None,
            amount=10.0,
            package_id='pack-10',
            package_name='Pack 10',
            payment_amount=amount,
        )
        defaults.update(overrides)
        return make_event(member_id, **defaults)
    return _make


@pytest.fixture
def make_review():
    """Factory fixture — builds a ScoredArtifact (CV review)."""
    ids = itertools.count(1)

    def _make(member_id='u1', **overrides):
        defaults = dict(
            id=f"rev{next(ids)}",
            member_id=member_id,
            created_at=days_ago(10),
            position='Analista',
            status='completed',
            score=60.0,
            errors=5,
            verb_level=3,
        )
        defaults.update(overrides)
        return ScoredArtifact(**defaults)
    return _make


@pytest.fixture
def make_account():
    def _make(member_id='u1', **overrides):
        defaults = dict(member_id=member_id, credits=0.0, total_earned=0.0, total_spent=0.0)
        defaults.update(overrides)
        return CreditAccount(**defaults)
    return _make
