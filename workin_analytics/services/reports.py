"""
University reports service — the I/O facade over the analytics core.

Each call fetches the collections it needs once, ingests them into typed
records, and hands in-memory lists plus `clock()` to the pure aggregators.
"""
import logging
from collections import defaultdict
from typing import Callable, Dict, List

from workin_analytics.analytics.activation import ActivationAnalytics, activation_analytics
from workin_analytics.analytics.cohort import CohortMetrics, aggregate_cohort
from workin_analytics.analytics.dashboard import DashboardStats, dashboard_stats
from workin_analytics.analytics.engagement import EngagementAnalytics, engagement_analytics
from workin_analytics.analytics.monetization import MonetizationAnalytics, monetization_analytics
from workin_analytics.analytics.timeline import StudentDetail, build_student_detail, order_by_activity
from workin_analytics.config import COLLECTIONS, UNIVERSITY_KEYS
from workin_analytics.errors import MissingDataError, UnknownUniversityError
from workin_analytics.models import CreditAccount, CreditEvent, Interview, Job, Member, ScoredArtifact
from workin_analytics.reports import render_text_report
from workin_analytics.timeutils import utc_now

logger = logging.getLogger('services.reports')


def _group_by_member(records) -> Dict[str, list]:
    grouped: Dict[str, list] = defaultdict(list)
    for record in records:
        grouped[record.member_id].append(record)
    return grouped


class UniversityReportsService:
    """Read-only reports for the configured universities (UPC, ULIMA, UTP, UPN)."""

    def __init__(self, store, resolver, clock: Callable = utc_now):
        self.store = store
        self.resolver = resolver
        self.clock = clock

    # ── Ingestion ────────────────────────────────────────────────────────────

    def _fetch(self, kind: str):
        collection = COLLECTIONS[kind]
        docs = self.store.fetch_all(collection)
        if not docs:
            raise MissingDataError(f"collection {collection!r} is empty")
        return docs

    def _load(self, kind: str, model) -> list:
        try:
            docs = self._fetch(kind)
        except MissingDataError as e:
            logger.warning("%s, continuing with no %s", e, kind, extra={'collection': COLLECTIONS[kind]})
            return []
        return [model.from_document(doc_id, data) for doc_id, data in docs]

    def members(self) -> List[Member]:
        return self._load('members', Member)

    def events(self) -> List[CreditEvent]:
        return self._load('events', CreditEvent)

    def reviews(self) -> List[ScoredArtifact]:
        return self._load('reviews', ScoredArtifact)

    # ── Universities ─────────────────────────────────────────────────────────

    @staticmethod
    def university_name(key: str) -> str:
        """Canonical name for a report key. Raises UnknownUniversityError."""
        name = UNIVERSITY_KEYS.get((key or '').strip().upper())
        if name is None:
            raise UnknownUniversityError(key)
        return name

    def _cohort(self, key: str):
        name = self.university_name(key)
        cohort = self.resolver.members_of(self.members(), name)
        logger.info("%s: %d students", name, len(cohort), extra={'university': name})
        return name, cohort

    def get_university_metrics(self, key: str) -> CohortMetrics:
        name, cohort = self._cohort(key)
        return aggregate_cohort(cohort, self.events(), self.clock(), entity=name)

    def get_students_by_university(self, key: str) -> List[StudentDetail]:
        """Drill-down records for every student, most active first."""
        _name, cohort = self._cohort(key)
        if not cohort:
            return []
        now = self.clock()
        events = _group_by_member(self.events())
        reviews = _group_by_member(self.reviews())
        details = [build_student_detail(m, events.get(m.id, []), reviews.get(m.id, []), now) for m in cohort]
        return order_by_activity(details)

    def export_text_report(self, key: str) -> str:
        return render_text_report(self.get_university_metrics(key))

    # ── Platform-wide analytics ──────────────────────────────────────────────

    def get_activation_analytics(self) -> ActivationAnalytics:
        return activation_analytics(self.members(), self.reviews(), self.resolver)

    def get_engagement_analytics(self) -> EngagementAnalytics:
        return engagement_analytics(self.members(), self.events(), self.clock())

    def get_monetization_analytics(self) -> MonetizationAnalytics:
        return monetization_analytics(
            self.members(), self._load('accounts', CreditAccount), self.events(), self.clock(),
        )

    def get_dashboard_stats(self) -> DashboardStats:
        return dashboard_stats(
            members=self.members(),
            accounts=self._load('accounts', CreditAccount),
            events=self.events(),
            reviews=self.reviews(),
            jobs=self._load('jobs', Job),
            interviews=self._load('interviews', Interview),
            now=self.clock(),
        )
