"""
Activation analytics — how registered members reach their first CV upload.

A member is *activated* once they have a CV on file.
"""
import logging
from collections import Counter
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from workin_analytics.analytics.funnel import FunnelStage, activation_funnel_stages, build_funnel
from workin_analytics.analytics.rates import mean, percentage
from workin_analytics.timeutils import days_between

logger = logging.getLogger('analytics.activation')


def _days_to_activation(member) -> Optional[int]:
    if member.registered_at is None or member.cv_uploaded_at is None:
        return None
    return days_between(member.registered_at, member.cv_uploaded_at)


# ── Per-university breakdowns ────────────────────────────────────────────────

@dataclass
class UniversityShare:
    university: str
    users: int
    percentage: float


def university_distribution(members, resolver) -> List[UniversityShare]:
    """Members per canonical university, largest first (ties by name)."""
    members = list(members)
    counts = Counter(resolver.resolve_many(m.university for m in members))
    shares = [UniversityShare(name, count, percentage(count, len(members))) for name, count in counts.items()]
    return sorted(shares, key=lambda s: (-s.users, s.university))


@dataclass
class UniversityActivation:
    university: str
    total_users: int
    activated_users: int
    activation_rate: float
    avg_time_to_activation: Optional[float] = None


def university_activation(members, resolver) -> List[UniversityActivation]:
    """Activation rate and mean days-to-activation per canonical university."""
    rows = []
    for name, group in resolver.group_by_entity(members).items():
        activated = [m for m in group if m.has_cv]
        durations = [d for d in map(_days_to_activation, activated) if d is not None]
        rows.append(UniversityActivation(
            university=name,
            total_users=len(group),
            activated_users=len(activated),
            activation_rate=percentage(len(activated), len(group)),
            avg_time_to_activation=mean(durations) if durations else None,
        ))
    return sorted(rows, key=lambda r: (-r.total_users, r.university))


# ── Per-member timing ────────────────────────────────────────────────────────

@dataclass
class TimeToActivation:
    member_id: str
    registration_date: Optional[datetime]
    activation_date: Optional[datetime]
    days_to_activation: Optional[int]
    activated: bool


def time_to_activation(members) -> List[TimeToActivation]:
    return [
        TimeToActivation(
            member_id=m.id,
            registration_date=m.registered_at,
            activation_date=m.cv_uploaded_at,
            days_to_activation=_days_to_activation(m),
            activated=m.has_cv,
        )
        for m in members
    ]


@dataclass
class OnboardingAnalysis:
    total_users: int = 0
    completed_onboarding: int = 0
    skipped_onboarding: int = 0
    skip_rate: float = 0.0


def onboarding_analysis(members) -> OnboardingAnalysis:
    members = list(members)
    skipped = sum(1 for m in members if m.onboarding_skipped)
    return OnboardingAnalysis(
        total_users=len(members),
        completed_onboarding=sum(1 for m in members if m.onboarding_completed),
        skipped_onboarding=skipped,
        skip_rate=percentage(skipped, len(members)),
    )


# ── Summary ──────────────────────────────────────────────────────────────────

@dataclass
class CriticalMetrics:
    total_users: int = 0
    activated_users: int = 0
    overall_activation_rate: float = 0.0
    avg_days_to_activation: float = 0.0
    verification_rate: float = 0.0


def activation_summary(funnel: List[FunnelStage], timings: List[TimeToActivation]) -> CriticalMetrics:
    """Headline numbers read off the activation funnel (stage 3 = CV uploaded)."""
    if not funnel:
        return CriticalMetrics()
    total = funnel[0].count
    activated = funnel[3].count if len(funnel) > 3 else 0
    return CriticalMetrics(
        total_users=total,
        activated_users=activated,
        overall_activation_rate=percentage(activated, total),
        avg_days_to_activation=mean(t.days_to_activation for t in timings if t.days_to_activation is not None),
        verification_rate=funnel[1].percentage if len(funnel) > 1 else 0.0,
    )


@dataclass
class ActivationAnalytics:
    funnel_steps: List[FunnelStage]
    university_breakdown: List[UniversityActivation]
    university_distribution: List[UniversityShare]
    time_to_activation: List[TimeToActivation]
    onboarding: OnboardingAnalysis
    critical_metrics: CriticalMetrics

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def activation_analytics(members, reviews, resolver) -> ActivationAnalytics:
    members = list(members)
    funnel = build_funnel(activation_funnel_stages(reviews), members)
    timings = time_to_activation(members)
    summary = activation_summary(funnel, timings)
    logger.info(
        "Activation: %d/%d members activated (%.1f%%)",
        summary.activated_users, summary.total_users, summary.overall_activation_rate,
    )
    return ActivationAnalytics(
        funnel_steps=funnel,
        university_breakdown=university_activation(members, resolver),
        university_distribution=university_distribution(members, resolver),
        time_to_activation=timings,
        onboarding=onboarding_analysis(members),
        critical_metrics=summary,
    )
