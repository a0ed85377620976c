"""
Per-student drill-down: activity timeline, CV evolution, skills progression
and impact metrics.

Milestones come from three collections (members, credit events, CV reviews)
with independent ordering, so the timeline is always re-sorted by timestamp.
"""
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from workin_analytics.analytics.activity import ActivityLevel, classify
from workin_analytics.analytics.engagement import tool_label
from workin_analytics.analytics.rates import round_half_up
from workin_analytics.models import Tool
from workin_analytics.timeutils import days_between

logger = logging.getLogger('analytics.timeline')

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _by_time(artifacts) -> list:
    """Oldest first; undated artifacts keep their relative order at the front."""
    return sorted(artifacts, key=lambda a: a.created_at or _EPOCH)


# ── Timeline ─────────────────────────────────────────────────────────────────

@dataclass
class TimelineEvent:
    date: datetime
    activity: str
    type: str
    details: str
    impact: Optional[str] = None


def synthesize_timeline(member, events, artifacts) -> List[TimelineEvent]:
    """Registration, CV upload, each CV analysis and each tool use, oldest first."""
    entries: List[TimelineEvent] = []
    dropped = 0

    def add(date, *args):
        nonlocal dropped
        if date is None:
            dropped += 1
            return
        entries.append(TimelineEvent(date, *args))

    add(member.registered_at, 'Registro en MyWorkIn', 'registration',
        'Se registró en la plataforma', 'Inicio del journey')

    if member.cv_uploaded_at is not None:
        add(member.cv_uploaded_at, 'Subida de CV', 'cv_upload',
            f"Subió CV: {member.cv_file_name or 'archivo'}", 'Primer paso hacia análisis')

    for index, artifact in enumerate(_by_time(artifacts), start=1):
        impact = f"Score obtenido: {artifact.score:g}%" if artifact.score else 'Análisis completado'
        add(artifact.created_at, f"Análisis CV #{index}", 'analysis',
            f"Análisis para: {artifact.position}", impact)

    for event in events:
        if not event.tool:
            continue
        add(event.created_at, f"Uso de {tool_label(event.tool)}", 'tool_use',
            event.description or 'Herramienta utilizada',
            'Completado exitosamente' if event.status == 'completed' else None)

    if dropped:
        logger.warning("Timeline for member %s: dropped %d entries without timestamp", member.id, dropped)

    # sorted() is stable: equal timestamps keep insertion order
    return sorted(entries, key=lambda e: e.date)


# ── CV evolution ─────────────────────────────────────────────────────────────

@dataclass
class ArtifactSnapshot:
    file_name: str
    upload_date: Optional[datetime]
    score: Optional[float]
    errors: int
    verb_level: int


@dataclass
class Improvement:
    score_change: float = 0
    error_reduction: int = 0
    verb_improvement: int = 0
    overall_progress: int = 0


@dataclass
class EvolutionSummary:
    original: ArtifactSnapshot
    improved: Optional[ArtifactSnapshot] = None
    improvement: Improvement = field(default_factory=Improvement)


def synthesize_evolution(artifacts, member=None) -> Optional[EvolutionSummary]:
    """First vs. last scored CV review. None when there are no reviews.

    overall_progress is the plain mean of the three deltas; the sub-scores
    are not weighted against each other.
    """
    ordered = _by_time(artifacts)
    if not ordered:
        return None

    first, last = ordered[0], ordered[-1]
    file_name = member.cv_file_name if member is not None else None
    upload_date = member.cv_uploaded_at if member is not None else None

    original = ArtifactSnapshot(
        file_name=file_name or 'CV Original',
        upload_date=upload_date or first.created_at,
        score=first.score,
        errors=first.errors,
        verb_level=first.verb_level,
    )
    if len(ordered) == 1:
        return EvolutionSummary(original=original)

    score_change = (last.score or 0) - (first.score or 0)
    error_reduction = first.errors - last.errors
    verb_improvement = last.verb_level - first.verb_level
    return EvolutionSummary(
        original=original,
        improved=ArtifactSnapshot(
            file_name=file_name or 'CV Mejorado',
            upload_date=last.created_at,
            score=last.score,
            errors=last.errors,
            verb_level=last.verb_level,
        ),
        improvement=Improvement(
            score_change=score_change,
            error_reduction=error_reduction,
            verb_improvement=verb_improvement,
            overall_progress=round_half_up((score_change + error_reduction + verb_improvement) / 3),
        ),
    )


# ── Skills progression ───────────────────────────────────────────────────────

@dataclass
class SkillsProgression:
    before: List[str]
    after: List[str]
    added: List[str]
    improved: List[str] = field(default_factory=list)


def skills_progression(member, artifacts) -> Optional[SkillsProgression]:
    """Profile skills vs. technical skills extracted by the latest CV review."""
    ordered = _by_time(artifacts)
    if not member.skills and not ordered:
        return None

    before = list(member.skills)
    after = ordered[-1].technical_skills if ordered else []

    def known(skill):
        skill = skill.lower()
        return any(skill in orig.lower() or orig.lower() in skill for orig in before)

    return SkillsProgression(before=before, after=after, added=[s for s in after if not known(s)])


# ── Impact metrics ───────────────────────────────────────────────────────────

COMPLETENESS_STEP = 25


@dataclass
class ProfileCompleteness:
    before: int
    after: int
    improvement: int


@dataclass
class EngagementPattern:
    first_week: int = 0
    second_week: int = 0
    third_week: int = 0
    fourth_week: int = 0
    trend: str = 'stable'


@dataclass
class ToolAdoption:
    first_tool: str = 'ninguna'
    first_tool_date: Optional[datetime] = None
    total_tools_used: int = 0
    days_between_tools: int = 0


@dataclass
class ImpactMetrics:
    profile_completeness: ProfileCompleteness
    engagement_pattern: EngagementPattern
    tool_adoption: ToolAdoption


def profile_completeness(member) -> ProfileCompleteness:
    before = COMPLETENESS_STEP if member.email else 0
    after = before + COMPLETENESS_STEP * sum([
        member.has_cv,
        member.profile_completed,
        bool(member.skills),
    ])
    return ProfileCompleteness(before=before, after=after, improvement=after - before)


def weekly_pattern(member, events) -> EngagementPattern:
    """Events in each of the first four weeks after registration."""
    weeks = [0, 0, 0, 0]
    if member.registered_at is not None:
        for event in events:
            if event.created_at is None:
                continue
            week = (event.created_at - member.registered_at) // timedelta(weeks=1)
            if 0 <= week < 4:
                weeks[week] += 1

    trend = 'stable'
    if weeks[3] > weeks[0]:
        trend = 'increasing'
    elif weeks[3] < weeks[0]:
        trend = 'decreasing'
    return EngagementPattern(*weeks, trend=trend)


def tool_adoption(member, events, now: datetime) -> ToolAdoption:
    tool_events = sorted(
        (e for e in events if e.tool and e.created_at is not None),
        key=lambda e: e.created_at,
    )
    first = tool_events[0] if tool_events else None
    first_date = first.created_at if first else member.registered_at

    days = 0
    if len(events) > 1 and first_date is not None:
        days = days_between(first_date, now)

    return ToolAdoption(
        first_tool=first.tool if first else 'ninguna',
        first_tool_date=first_date,
        total_tools_used=len({e.tool for e in events if e.tool}),
        days_between_tools=days,
    )


def impact_metrics(member, events, now: datetime) -> ImpactMetrics:
    events = list(events)
    return ImpactMetrics(
        profile_completeness=profile_completeness(member),
        engagement_pattern=weekly_pattern(member, events),
        tool_adoption=tool_adoption(member, events, now),
    )


# ── Student drill-down ───────────────────────────────────────────────────────

@dataclass
class ToolUsageCounts:
    cv_analysis: int = 0
    job_matches: int = 0
    interviews: int = 0
    total_activities: int = 0


@dataclass
class StudentDetail:
    id: str
    name: str
    email: str
    university: str
    registration_date: Optional[datetime]
    last_activity: Optional[datetime]
    status: str
    has_cv: bool
    cv_file_name: Optional[str]
    cv_file_url: Optional[str]
    cv_uploaded_at: Optional[datetime]
    profile_completed: bool
    onboarding_completed: bool
    tool_usage: ToolUsageCounts
    activity_level: ActivityLevel
    activity_timeline: List[TimelineEvent]
    impact_metrics: ImpactMetrics
    cv_evolution: Optional[EvolutionSummary] = None
    skills_progression: Optional[SkillsProgression] = None
    cv_analysis_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['activity_level'] = self.activity_level.value
        return data


def build_student_detail(member, events, artifacts, now: datetime) -> StudentDetail:
    """Assemble the drill-down record. `events`/`artifacts` belong to `member`."""
    events = list(events)
    artifacts = list(artifacts)
    return StudentDetail(
        id=member.id,
        name=member.display_name or 'Nombre no disponible',
        email=member.email or 'Email no disponible',
        university=member.university,
        registration_date=member.registered_at,
        last_activity=member.last_activity_at,
        status=member.status,
        has_cv=member.has_cv,
        cv_file_name=member.cv_file_name,
        cv_file_url=member.cv_file_url,
        cv_uploaded_at=member.cv_uploaded_at,
        # the drill-down counts a legacy onboarding flag as a completed profile
        profile_completed=member.profile_completed or member.legacy_onboarding_completed,
        onboarding_completed=member.onboarding_completed,
        tool_usage=ToolUsageCounts(
            cv_analysis=sum(1 for e in events if e.uses(Tool.CV_REVIEW)),
            job_matches=sum(1 for e in events if e.uses(Tool.JOB_MATCH)),
            interviews=sum(1 for e in events if e.uses(Tool.INTERVIEW_SIMULATION)),
            total_activities=len(events),
        ),
        activity_level=classify(len(events)),
        activity_timeline=synthesize_timeline(member, events, artifacts),
        impact_metrics=impact_metrics(member, events, now),
        cv_evolution=synthesize_evolution(artifacts, member),
        skills_progression=skills_progression(member, artifacts),
        cv_analysis_count=len(artifacts),
    )


def order_by_activity(details: List[StudentDetail]) -> List[StudentDetail]:
    """Most engaged first; stable within a level."""
    return sorted(details, key=lambda d: d.activity_level, reverse=True)
