"""
Platform-wide headline numbers for the admin dashboard.
"""
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from workin_analytics.analytics.engagement import active_since
from workin_analytics.models import EventCategory, Tool
from workin_analytics.timeutils import start_of_month

logger = logging.getLogger('analytics.dashboard')

ACTIVE_WINDOW_DAYS = 30
_JOB_MATCH_CATEGORIES = (EventCategory.SPEND, EventCategory.CONFIRM)


@dataclass
class DashboardStats:
    # members
    total_users: int = 0
    active_users: int = 0
    new_users_this_month: int = 0
    # credits and transactions
    total_credits_distributed: float = 0.0
    total_credits_spent: float = 0.0
    total_revenue: float = 0.0
    monthly_revenue: float = 0.0
    pending_transactions: int = 0
    # services
    total_cv_analysis: int = 0
    monthly_cv_analysis: int = 0
    total_job_matches: int = 0
    monthly_job_matches: int = 0
    total_interviews: int = 0
    # jobs
    total_jobs: int = 0
    active_jobs: int = 0
    monthly_job_applications: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _is_completed_purchase(event) -> bool:
    return event.category is EventCategory.PURCHASE and event.status == 'completed'


def _is_job_match(event) -> bool:
    return event.uses(Tool.JOB_MATCH) and event.category in _JOB_MATCH_CATEGORIES


def dashboard_stats(members, accounts, events, reviews, jobs, interviews, now: datetime) -> DashboardStats:
    """Totals plus current-UTC-month figures for every collection."""
    members, accounts, events = list(members), list(accounts), list(events)
    reviews, jobs, interviews = list(reviews), list(jobs), list(interviews)
    month_start = start_of_month(now.astimezone(timezone.utc))

    def this_month(moment) -> bool:
        return moment is not None and moment >= month_start

    revenue_events = [e for e in events if _is_completed_purchase(e)]
    job_matches = [e for e in events if _is_job_match(e)]

    stats = DashboardStats(
        total_users=len(members),
        active_users=active_since(members, now - timedelta(days=ACTIVE_WINDOW_DAYS)),
        new_users_this_month=sum(1 for m in members if this_month(m.registered_at)),
        total_credits_distributed=sum(a.total_earned for a in accounts),
        total_credits_spent=sum(a.total_spent for a in accounts),
        total_revenue=sum(e.payment_amount or 0 for e in revenue_events),
        monthly_revenue=sum(e.payment_amount or 0 for e in revenue_events if this_month(e.created_at)),
        pending_transactions=sum(1 for e in events if e.status == 'pending'),
        total_cv_analysis=len(reviews),
        monthly_cv_analysis=sum(1 for r in reviews if this_month(r.created_at)),
        total_job_matches=len(job_matches),
        monthly_job_matches=sum(1 for e in job_matches if this_month(e.created_at)),
        total_interviews=len(interviews),
        total_jobs=len(jobs),
        active_jobs=sum(1 for j in jobs if j.status == 'active'),
        monthly_job_applications=sum(j.applications for j in jobs if this_month(j.created_at)),
    )
    logger.debug("Dashboard stats: %s", stats)
    return stats
