"""
Cohort metrics — the per-university employability rollup.

Given the members of one canonical university and the credit events of the
whole platform, computes tool totals, profile flags, the top professional
areas, job-readiness indicators, the activity distribution and retention.
Output is fully determined by the inputs and `now`; ranked lists are sorted
explicitly with a name tie-break.
"""
import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from workin_analytics.analytics.activity import ActivityLevel, activity_distribution, classify_members
from workin_analytics.analytics.engagement import RetentionMetrics, retention_windows
from workin_analytics.analytics.normalization import normalize
from workin_analytics.analytics.rates import rounded_percentage
from workin_analytics.config import TOP_AREAS_LIMIT, UNSPECIFIED_ENTITY
from workin_analytics.models import Tool

logger = logging.getLogger('analytics.cohort')

OTHER_AREA = 'Otros'


# ── Area keyword rules (first match wins) ────────────────────────────────────

CAREER_AREA_RULES: List[Tuple[str, Sequence[str]]] = [
    ('Tecnología', ('sistemas', 'software', 'computación')),
    ('Administración y Negocios', ('administración', 'negocios', 'gestión')),
    ('Ingeniería', ('ingeniería',)),
    ('Comunicación y Marketing', ('comunicación', 'marketing', 'publicidad')),
    ('Recursos Humanos', ('psicología', 'recursos humanos')),
    ('Legal', ('derecho', 'legal')),
    ('Finanzas', ('finanzas', 'contabilidad', 'economía')),
]

POSITION_AREA_RULES: List[Tuple[str, Sequence[str]]] = [
    ('Tecnología', ('desarrollador', 'programador', 'frontend', 'backend', 'fullstack', 'software')),
    ('Administración y Negocios', ('administr', 'gestión', 'coordinador', 'supervisor')),
    ('Recursos Humanos', ('recursos humanos', 'rrhh', 'psicología', 'talento')),
    ('Comunicación y Marketing', ('marketing', 'comunicación', 'publicidad', 'social media')),
    ('Finanzas', ('finanzas', 'contabilidad', 'controller', 'tesorería')),
    ('Ventas', ('ventas', 'comercial', 'business')),
    ('Ingeniería', ('ingeniería', 'técnico')),
]


def map_to_area(text: Optional[str], rules: Sequence[Tuple[str, Sequence[str]]]) -> str:
    """Case- and accent-insensitive keyword containment, first rule wins."""
    norm = normalize(text)
    if not norm:
        return OTHER_AREA
    for area, keywords in rules:
        if any(normalize(keyword) in norm for keyword in keywords):
            return area
    return OTHER_AREA


def derive_area(member) -> str:
    """One area per member: career, else position, else first interested role."""
    if member.career:
        return map_to_area(member.career, CAREER_AREA_RULES)
    if member.position:
        return map_to_area(member.position, POSITION_AREA_RULES)
    if member.interested_roles:
        return map_to_area(member.interested_roles[0], POSITION_AREA_RULES)
    return OTHER_AREA


@dataclass
class AreaCount:
    area: str
    count: int
    percentage: int


def top_areas(members, limit: int = TOP_AREAS_LIMIT) -> List[AreaCount]:
    members = list(members)
    total = len(members)
    counts = Counter(derive_area(m) for m in members)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]
    return [AreaCount(area, count, rounded_percentage(count, total)) for area, count in ranked]


# ── Job-readiness indicators ─────────────────────────────────────────────────

@dataclass
class PreparationIndicators:
    cv_aligned_percentage: int = 0
    high_performance_interviews_percentage: int = 0
    job_match_percentage: int = 0


def preparation_indicators(members, events) -> PreparationIndicators:
    """CV completeness, repeat interview practice and job-match adoption.

    `events` must already be restricted to the cohort.
    """
    members = list(members)
    total = len(members)
    if total == 0:
        return PreparationIndicators()

    aligned = sum(
        1 for m in members if m.has_cv and m.cv_data_integrated and m.skills and m.cv_experience
    )
    interviews = Counter(e.member_id for e in events if e.uses(Tool.INTERVIEW_SIMULATION))
    repeat_interviewers = sum(1 for count in interviews.values() if count > 1)
    job_matchers = {e.member_id for e in events if e.uses(Tool.JOB_MATCH)}

    return PreparationIndicators(
        cv_aligned_percentage=rounded_percentage(aligned, total),
        high_performance_interviews_percentage=rounded_percentage(repeat_interviewers, total),
        job_match_percentage=rounded_percentage(len(job_matchers), total),
    )


# ── Cohort rollup ────────────────────────────────────────────────────────────

@dataclass
class ActivityBreakdown:
    inactive_users: int = 0
    new_users: int = 0
    active_users: int = 0
    power_users: int = 0


@dataclass
class CohortMetrics:
    university_name: str
    generated_at: datetime
    students_evaluated: int = 0
    job_searches: int = 0
    cv_analyzed: int = 0
    interviews_simulated: int = 0
    cv_created: int = 0
    students_with_cv: int = 0
    profile_completed: int = 0
    onboarding_completed: int = 0
    top_areas: List[AreaCount] = field(default_factory=list)
    preparation_indicators: PreparationIndicators = field(default_factory=PreparationIndicators)
    activity_level: ActivityBreakdown = field(default_factory=ActivityBreakdown)
    retention: RetentionMetrics = field(default_factory=RetentionMetrics)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['generated_at'] = self.generated_at.isoformat()
        return data


def cohort_events(members, events) -> list:
    """Events that belong to one of `members`."""
    ids = {m.id for m in members}
    return [e for e in events if e.member_id in ids]


def aggregate_cohort(members, events, now: datetime, entity: Optional[str] = None) -> CohortMetrics:
    """Roll up one cohort. Events of members outside the cohort are ignored."""
    members = list(members)
    events = cohort_events(members, events)
    name = entity or UNSPECIFIED_ENTITY

    if not members:
        logger.info("Cohort %r has no members, returning empty metrics", name)
        return CohortMetrics(university_name=name, generated_at=now)

    tools = Counter(e.tool for e in events if e.tool)
    levels = activity_distribution(classify_members(members, events).values())

    metrics = CohortMetrics(
        university_name=name,
        generated_at=now,
        students_evaluated=len(members),
        job_searches=tools.get(Tool.JOB_MATCH.value, 0),
        cv_analyzed=tools.get(Tool.CV_REVIEW.value, 0),
        interviews_simulated=tools.get(Tool.INTERVIEW_SIMULATION.value, 0),
        cv_created=tools.get(Tool.CV_CREATION.value, 0),
        students_with_cv=sum(1 for m in members if m.has_cv),
        profile_completed=sum(1 for m in members if m.profile_completed),
        onboarding_completed=sum(1 for m in members if m.onboarding_completed),
        top_areas=top_areas(members),
        preparation_indicators=preparation_indicators(members, events),
        activity_level=ActivityBreakdown(
            inactive_users=levels[ActivityLevel.INACTIVE.value],
            new_users=levels[ActivityLevel.NEW.value],
            active_users=levels[ActivityLevel.ACTIVE.value],
            power_users=levels[ActivityLevel.POWER.value],
        ),
        retention=retention_windows(members, now),
    )
    logger.debug("Cohort %r: %d members, %d events", name, len(members), len(events))
    return metrics
