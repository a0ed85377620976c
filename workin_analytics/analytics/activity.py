"""
Activity classification — one engagement tier per member from their event count.

Single threshold table for every report:
    0 → inactive, 1–2 → new, 3–9 → active, 10+ → power
"""
import enum
import functools
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List

from workin_analytics.analytics.rates import check_invariant, percentage
from workin_analytics.config import ACTIVE_MIN_EVENTS, NEW_MIN_EVENTS, POWER_MIN_EVENTS

logger = logging.getLogger('analytics.activity')


@functools.total_ordering
class ActivityLevel(enum.Enum):
    INACTIVE = 'inactive'
    NEW = 'new'
    ACTIVE = 'active'
    POWER = 'power'

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other):
        if not isinstance(other, ActivityLevel):
            return NotImplemented
        return self.rank < other.rank


def classify(event_count: int) -> ActivityLevel:
    if not check_invariant(event_count >= 0, "negative event count %s", event_count):
        event_count = 0
    if event_count >= POWER_MIN_EVENTS:
        return ActivityLevel.POWER
    if event_count >= ACTIVE_MIN_EVENTS:
        return ActivityLevel.ACTIVE
    if event_count >= NEW_MIN_EVENTS:
        return ActivityLevel.NEW
    return ActivityLevel.INACTIVE


def count_events_by_member(events) -> Counter:
    return Counter(e.member_id for e in events if e.member_id)


def classify_members(members, events) -> Dict[str, ActivityLevel]:
    """member id → level. Events of members outside `members` are ignored."""
    counts = count_events_by_member(events)
    return {m.id: classify(counts.get(m.id, 0)) for m in members}


def activity_distribution(levels: Iterable[ActivityLevel]) -> Dict[str, int]:
    """Count per level, every level present, in engagement order."""
    counts = Counter(levels)
    return {level.value: counts.get(level, 0) for level in ActivityLevel}


# ── Behaviour segments ───────────────────────────────────────────────────────

@dataclass
class Segment:
    segment: str
    user_count: int
    percentage: float
    description: str


_SEGMENT_LABELS = [
    (ActivityLevel.POWER, 'Power Users', '10+ interacciones con herramientas'),
    (ActivityLevel.ACTIVE, 'Usuarios Activos', '3-9 interacciones con herramientas'),
    (ActivityLevel.NEW, 'Usuarios Nuevos', '1-2 interacciones con herramientas'),
]


def segment_members(members, events) -> List[Segment]:
    """Power / active / new / with-CV / inactive segments over the population."""
    members = list(members)
    total = len(members)
    levels = classify_members(members, events)
    distribution = activity_distribution(levels.values())
    cv_uploaders = sum(1 for m in members if m.has_cv)

    segments = [
        Segment(label, distribution[level.value], percentage(distribution[level.value], total), desc)
        for level, label, desc in _SEGMENT_LABELS
    ]
    segments.append(Segment(
        'Con CV Subido', cv_uploaders, percentage(cv_uploaders, total), 'Usuarios que subieron CV',
    ))
    inactive = distribution[ActivityLevel.INACTIVE.value]
    segments.append(Segment(
        'Inactivos', inactive, percentage(inactive, total), 'Sin usar herramientas',
    ))
    return segments
