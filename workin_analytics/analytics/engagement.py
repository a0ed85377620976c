"""
Engagement and retention analytics.

Every function takes already-ingested members/events plus an injected `now`;
nothing here reads the clock or the store.
"""
import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from workin_analytics.analytics.activity import Segment, segment_members
from workin_analytics.analytics.rates import percentage
from workin_analytics.config import (
    CHURN_INACTIVE_DAYS,
    RETENTION_COHORT_MIN_AGE_DAYS,
    RETENTION_WINDOWS,
    TOOL_LABELS,
)
from workin_analytics.timeutils import days_between

logger = logging.getLogger('analytics.engagement')


# ── Retention ────────────────────────────────────────────────────────────────

@dataclass
class RetentionMetrics:
    day1: float = 0.0
    day7: float = 0.0
    day30: float = 0.0
    total_cohort: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def retention_windows(members, now: datetime) -> RetentionMetrics:
    """D1/D7/D30 retention for members registered at least 30 days before now.

    A member is retained for window N when their last activity is at least
    N whole days after registration. Members without a registration
    timestamp are outside the cohort; members without last activity are in
    the cohort but never retained.
    """
    cutoff = now - timedelta(days=RETENTION_COHORT_MIN_AGE_DAYS)
    cohort = [m for m in members if m.registered_at is not None and m.registered_at <= cutoff]

    retained = {window: 0 for window in RETENTION_WINDOWS}
    for member in cohort:
        if member.last_activity_at is None:
            continue
        days_active = days_between(member.registered_at, member.last_activity_at)
        for window in RETENTION_WINDOWS:
            if days_active >= window:
                retained[window] += 1

    total = len(cohort)
    return RetentionMetrics(
        day1=percentage(retained[1], total),
        day7=percentage(retained[7], total),
        day30=percentage(retained[30], total),
        total_cohort=total,
    )


# ── Tool popularity ──────────────────────────────────────────────────────────

@dataclass
class ToolUsage:
    tool: str
    usage_count: int
    unique_users: int
    average_usage_per_user: float
    percentage: float


def tool_label(tool: str) -> str:
    return TOOL_LABELS.get(tool, tool)


def tool_popularity(events) -> List[ToolUsage]:
    """Usage per tool, most used first (ties by label)."""
    counts: Dict[str, int] = defaultdict(int)
    users: Dict[str, set] = defaultdict(set)
    for event in events:
        if not event.tool:
            continue
        counts[event.tool] += 1
        if event.member_id:
            users[event.tool].add(event.member_id)

    total_usage = sum(counts.values())
    usage = [
        ToolUsage(
            tool=tool_label(tool),
            usage_count=count,
            unique_users=len(users[tool]),
            average_usage_per_user=(count / len(users[tool])) if users[tool] else 0.0,
            percentage=percentage(count, total_usage),
        )
        for tool, count in counts.items()
    ]
    return sorted(usage, key=lambda u: (-u.usage_count, u.tool))


# ── Session windows ──────────────────────────────────────────────────────────

@dataclass
class SessionWindow:
    time_range: str
    active_users: int
    frequency: str


_SESSION_WINDOWS = [
    (1, 'Últimas 24 horas', 'Diario'),
    (7, 'Últimos 7 días', 'Semanal'),
    (30, 'Últimos 30 días', 'Mensual'),
]


def active_since(members, since: datetime) -> int:
    return sum(1 for m in members if m.last_activity_at is not None and m.last_activity_at >= since)


def session_windows(members, now: datetime) -> List[SessionWindow]:
    members = list(members)
    return [
        SessionWindow(label, active_since(members, now - timedelta(days=days)), frequency)
        for days, label, frequency in _SESSION_WINDOWS
    ]


# ── Daily trends ─────────────────────────────────────────────────────────────

@dataclass
class TrendPoint:
    date: str
    active_users: int
    new_users: int
    returning_users: int
    tool_usage: int


def engagement_trends(members, events, now: datetime, days: int = 30) -> List[TrendPoint]:
    """Per-day activity for the last `days` UTC days, oldest first."""
    today = now.astimezone(timezone.utc).date()
    buckets = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    active: Dict[Any, set] = {day: set() for day in buckets}
    usage: Dict[Any, int] = {day: 0 for day in buckets}
    registered: Dict[Any, set] = {day: set() for day in buckets}

    for event in events:
        if event.created_at is None:
            continue
        day = event.created_at.date()
        if day in usage:
            usage[day] += 1
            if event.member_id:
                active[day].add(event.member_id)

    for member in members:
        if member.registered_at is None:
            continue
        day = member.registered_at.date()
        if day in registered:
            registered[day].add(member.id)

    return [
        TrendPoint(
            date=day.isoformat(),
            active_users=len(active[day]),
            new_users=len(registered[day]),
            returning_users=len(active[day] - registered[day]),
            tool_usage=usage[day],
        )
        for day in buckets
    ]


# ── Overview ─────────────────────────────────────────────────────────────────

@dataclass
class EngagementOverview:
    total_users: int = 0
    weekly_active_users: int = 0
    monthly_active_users: int = 0
    average_sessions_per_user: float = 0.0
    churning_users: int = 0
    churn_rate: float = 0.0


def engagement_overview(members, events, now: datetime) -> EngagementOverview:
    """Active counts plus churn: last seen 14–30 days ago."""
    members = list(members)
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)
    churn_cutoff = now - timedelta(days=CHURN_INACTIVE_DAYS)

    churning = sum(
        1 for m in members
        if m.last_activity_at is not None and month_ago <= m.last_activity_at < churn_cutoff
    )

    sessions: Dict[str, int] = defaultdict(int)
    for event in events:
        if event.member_id:
            sessions[event.member_id] += 1

    return EngagementOverview(
        total_users=len(members),
        weekly_active_users=active_since(members, week_ago),
        monthly_active_users=active_since(members, month_ago),
        average_sessions_per_user=(sum(sessions.values()) / len(sessions)) if sessions else 0.0,
        churning_users=churning,
        churn_rate=percentage(churning, len(members)),
    )


@dataclass
class EngagementAnalytics:
    overview: EngagementOverview
    retention: RetentionMetrics
    tool_popularity: List[ToolUsage]
    user_segments: List[Segment]
    session_patterns: List[SessionWindow]
    trends: List[TrendPoint]
    generated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['generated_at'] = self.generated_at.isoformat()
        return data


def engagement_analytics(members, events, now: datetime) -> EngagementAnalytics:
    members = list(members)
    events = list(events)
    return EngagementAnalytics(
        overview=engagement_overview(members, events, now),
        retention=retention_windows(members, now),
        tool_popularity=tool_popularity(events),
        user_segments=segment_members(members, events),
        session_patterns=session_windows(members, now),
        trends=engagement_trends(members, events, now),
        generated_at=now,
    )
