"""Tests for analytics.engagement — retention, tool usage, sessions, trends."""
from datetime import timedelta

import pytest

from workin_analytics.analytics.engagement import (
    engagement_analytics,
    engagement_overview,
    engagement_trends,
    retention_windows,
    session_windows,
    tool_popularity,
)


# ---------------------------------------------------------------------------
# retention_windows
# ---------------------------------------------------------------------------

class TestRetention:

    def test_windows_over_eligible_cohort(self, now, make_member):
        members = [
            make_member(registered_at=now - timedelta(days=60), last_activity_at=now - timedelta(days=20)),
            make_member(registered_at=now - timedelta(days=45), last_activity_at=now - timedelta(days=40)),
            make_member(registered_at=now - timedelta(days=31), last_activity_at=None),
            make_member(registered_at=now - timedelta(days=10), last_activity_at=now),
            make_member(registered_at=None, last_activity_at=now),
        ]
        retention = retention_windows(members, now)
        assert retention.total_cohort == 3
        assert retention.day1 == pytest.approx(200 / 3)
        assert retention.day7 == pytest.approx(100 / 3)
        assert retention.day30 == pytest.approx(100 / 3)

    def test_window_boundary_uses_whole_days(self, now, make_member):
        joined = now - timedelta(days=40)
        almost = make_member(registered_at=joined, last_activity_at=joined + timedelta(days=6, hours=23))
        exact = make_member(registered_at=joined, last_activity_at=joined + timedelta(days=7))
        retention = retention_windows([almost, exact], now)
        assert retention.day7 == 50.0

    def test_empty_cohort_yields_zeros(self, now, make_member):
        recent = make_member(registered_at=now - timedelta(days=3))
        retention = retention_windows([recent], now)
        assert (retention.day1, retention.day7, retention.day30, retention.total_cohort) == (0, 0, 0, 0)

    def test_rates_never_exceed_100(self, now, make_member):
        members = [
            make_member(registered_at=now - timedelta(days=90), last_activity_at=now) for _ in range(5)
        ]
        retention = retention_windows(members, now)
        assert retention.day30 <= retention.day7 <= retention.day1 <= 100


# ---------------------------------------------------------------------------
# tool_popularity / session_windows
# ---------------------------------------------------------------------------

class TestToolPopularity:

    def test_counts_only_events_with_a_tool(self, make_event):
        events = [
            make_event('u1', tool='cv-review'),
            make_event('u1', tool='cv-review'),
            make_event('u2', tool='cv-review'),
            make_event('u3', tool='job-match'),
            make_event('u3', tool=None),
        ]
        usage = tool_popularity(events)
        assert [u.tool for u in usage] == ['Análisis CV', 'Búsqueda Empleos']
        assert usage[0].usage_count == 3
        assert usage[0].unique_users == 2
        assert usage[0].average_usage_per_user == 1.5
        assert usage[0].percentage == 75.0

    def test_ties_broken_by_label(self, make_event):
        events = [make_event(tool='interview-simulation'), make_event(tool='job-match')]
        assert [u.tool for u in tool_popularity(events)] == ['Búsqueda Empleos', 'Simulación Entrevista']

    def test_unknown_tool_keeps_raw_name(self, make_event):
        assert tool_popularity([make_event(tool='cover-letter')])[0].tool == 'cover-letter'


class TestSessionWindows:

    def test_active_users_per_window(self, now, make_member):
        members = [
            make_member(last_activity_at=now - timedelta(hours=2)),
            make_member(last_activity_at=now - timedelta(days=3)),
            make_member(last_activity_at=now - timedelta(days=20)),
            make_member(last_activity_at=now - timedelta(days=40)),
            make_member(last_activity_at=None),
        ]
        windows = session_windows(members, now)
        assert [w.active_users for w in windows] == [1, 2, 3]
        assert [w.frequency for w in windows] == ['Diario', 'Semanal', 'Mensual']


# ---------------------------------------------------------------------------
# engagement_trends / engagement_overview
# ---------------------------------------------------------------------------

class TestTrends:

    def test_daily_buckets_oldest_first(self, now, make_member, make_event):
        newcomer = make_member(id='new', registered_at=now - timedelta(hours=1))
        veteran = make_member(id='old', registered_at=now - timedelta(days=90))
        events = [
            make_event('new', created_at=now - timedelta(minutes=30)),
            make_event('old', created_at=now - timedelta(hours=1)),
            make_event('old', created_at=now - timedelta(days=2)),
            make_event('old', created_at=now - timedelta(days=10)),
            make_event('old', created_at=None),
        ]
        trends = engagement_trends([newcomer, veteran], events, now, days=3)

        assert [t.date for t in trends] == ['2024-06-13', '2024-06-14', '2024-06-15']
        today = trends[-1]
        assert (today.active_users, today.new_users, today.returning_users, today.tool_usage) == (2, 1, 1, 2)
        assert trends[0].tool_usage == 1
        assert trends[1].active_users == 0

    def test_defaults_to_thirty_days(self, now):
        assert len(engagement_trends([], [], now)) == 30


class TestOverview:

    def test_churn_is_last_seen_between_14_and_30_days(self, now, make_member, make_event):
        members = [
            make_member(id='u1', last_activity_at=now - timedelta(days=20)),
            make_member(id='u2', last_activity_at=now - timedelta(days=10)),
            make_member(id='u3', last_activity_at=now - timedelta(days=40)),
            make_member(id='u4', last_activity_at=None),
        ]
        events = [make_event('u1'), make_event('u1'), make_event('u1'), make_event('u2')]
        overview = engagement_overview(members, events, now)

        assert overview.total_users == 4
        assert overview.churning_users == 1
        assert overview.churn_rate == 25.0
        assert overview.weekly_active_users == 0
        assert overview.monthly_active_users == 2
        assert overview.average_sessions_per_user == 2.0

    def test_empty_population(self, now):
        overview = engagement_overview([], [], now)
        assert overview.churn_rate == 0.0
        assert overview.average_sessions_per_user == 0.0


class TestEngagementAnalytics:

    def test_bundles_all_sections(self, now, make_member, make_event):
        result = engagement_analytics([make_member(id='u1')], [make_event('u1')], now)
        data = result.to_dict()
        assert data['generated_at'] == now.isoformat()
        assert data['overview']['total_users'] == 1
        assert len(data['trends']) == 30
        assert {s['segment'] for s in data['user_segments']} >= {'Power Users', 'Inactivos'}
