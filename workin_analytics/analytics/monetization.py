"""
Monetization analytics: conversion to paid, credit balances, revenue and
purchase behaviour.

Two definitions of "purchase" coexist in the ledger:
    conversion — any purchase-type row, package or payment amount
    revenue    — purchase-type rows with a positive payment amount
Month buckets are UTC calendar months labelled YYYY-MM.
"""
import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from dateutil.relativedelta import relativedelta

from workin_analytics.analytics.rates import mean, percentage
from workin_analytics.models import EventCategory
from workin_analytics.timeutils import days_between, start_of_month

logger = logging.getLogger('analytics.monetization')

MONTHS_OF_HISTORY = 12
LTV_MULTIPLIER = 2.5
UNKNOWN_PACKAGE_ID = 'unknown'
UNKNOWN_PACKAGE_NAME = 'Paquete Desconocido'


def month_buckets(now: datetime, count: int = MONTHS_OF_HISTORY) -> List[Tuple[str, datetime, datetime]]:
    """(label, start, end) for the last `count` UTC months, oldest first, current month last."""
    current = start_of_month(now.astimezone(timezone.utc))
    buckets = []
    for offset in range(count - 1, -1, -1):
        start = current - relativedelta(months=offset)
        buckets.append((start.strftime('%Y-%m'), start, start + relativedelta(months=1)))
    return buckets


def _in_month(moment, start, end) -> bool:
    return moment is not None and start <= moment < end


def _by_member(events) -> Dict[str, list]:
    grouped: Dict[str, list] = defaultdict(list)
    for event in events:
        grouped[event.member_id].append(event)
    return grouped


def _chronological(events) -> list:
    return sorted((e for e in events if e.created_at is not None), key=lambda e: e.created_at)


# ── Conversion ───────────────────────────────────────────────────────────────

@dataclass
class MonthlyConversions:
    month: str
    conversions: int
    rate: float


@dataclass
class ConversionMetrics:
    total_users: int = 0
    free_users: int = 0
    paid_users: int = 0
    conversion_rate: float = 0.0
    average_days_to_conversion: float = 0.0
    conversions_by_month: List[MonthlyConversions] = field(default_factory=list)


def conversion_metrics(members, events, now: datetime) -> ConversionMetrics:
    members = list(members)
    conversions = [e for e in events if e.is_conversion]
    per_member = _by_member(conversions)
    registered = {m.id: m.registered_at for m in members}

    days_to_convert = []
    for member_id, member_events in per_member.items():
        ordered = _chronological(member_events)
        joined = registered.get(member_id)
        if not ordered or joined is None:
            continue
        days = days_between(joined, ordered[0].created_at)
        if days >= 0:
            days_to_convert.append(days)

    by_month = []
    for label, start, end in month_buckets(now):
        converted = {e.member_id for e in conversions if _in_month(e.created_at, start, end)}
        joined = sum(1 for m in members if _in_month(m.registered_at, start, end))
        by_month.append(MonthlyConversions(label, len(converted), percentage(len(converted), joined)))

    paid = len(per_member)
    return ConversionMetrics(
        total_users=len(members),
        free_users=max(len(members) - paid, 0),
        paid_users=paid,
        conversion_rate=percentage(paid, len(members)),
        average_days_to_conversion=mean(days_to_convert),
        conversions_by_month=by_month,
    )


# ── Credits ──────────────────────────────────────────────────────────────────

@dataclass
class CreditBucket:
    range: str
    user_count: int = 0
    percentage: float = 0.0


@dataclass
class CreditAnalytics:
    total_credits_distributed: float = 0.0
    total_credits_spent: float = 0.0
    average_credits_per_user: float = 0.0
    credit_utilization_rate: float = 0.0
    users_out_of_credits: int = 0
    users_with_unused_credits: int = 0
    average_credits_consumed_per_session: float = 0.0
    credit_distribution: List[CreditBucket] = field(default_factory=list)


# (label, inclusive upper bound); the last bucket is open-ended
_CREDIT_RANGES = [
    ('0 créditos', 0),
    ('1-5 créditos', 5),
    ('6-10 créditos', 10),
    ('11-20 créditos', 20),
    ('21+ créditos', None),
]


def _credit_bucket(credits: float) -> int:
    for index, (_label, upper) in enumerate(_CREDIT_RANGES):
        if upper is None or credits <= upper:
            return index
    return len(_CREDIT_RANGES) - 1


def credit_analytics(accounts, events) -> CreditAnalytics:
    accounts = list(accounts)
    earned = sum(a.total_earned for a in accounts)
    spent = sum(a.total_spent for a in accounts)
    consumption = [
        e.amount for e in events
        if e.category in (EventCategory.RESERVE, EventCategory.SPEND)
    ]

    buckets = [CreditBucket(label) for label, _upper in _CREDIT_RANGES]
    for account in accounts:
        buckets[_credit_bucket(max(account.credits, 0))].user_count += 1
    for bucket in buckets:
        bucket.percentage = percentage(bucket.user_count, len(accounts))

    return CreditAnalytics(
        total_credits_distributed=earned,
        total_credits_spent=spent,
        average_credits_per_user=(earned / len(accounts)) if accounts else 0.0,
        credit_utilization_rate=percentage(spent, earned),
        users_out_of_credits=sum(1 for a in accounts if a.credits <= 0),
        users_with_unused_credits=sum(1 for a in accounts if a.credits > 0),
        average_credits_consumed_per_session=mean(consumption),
        credit_distribution=buckets,
    )


# ── Revenue ──────────────────────────────────────────────────────────────────

@dataclass
class MonthlyRevenue:
    month: str
    revenue: float
    transactions: int


@dataclass
class PackageRevenue:
    package_id: str
    package_name: str
    total_revenue: float
    transaction_count: int
    average_value: float


@dataclass
class RevenueMetrics:
    total_revenue: float = 0.0
    monthly_recurring_revenue: float = 0.0
    average_revenue_per_user: float = 0.0
    average_revenue_per_paid_user: float = 0.0
    estimated_lifetime_value: float = 0.0
    revenue_by_month: List[MonthlyRevenue] = field(default_factory=list)
    revenue_by_package: List[PackageRevenue] = field(default_factory=list)


def _package_stats(purchases) -> Dict[str, Dict[str, Any]]:
    stats: Dict[str, Dict[str, Any]] = {}
    for event in purchases:
        package_id = event.package_id or UNKNOWN_PACKAGE_ID
        entry = stats.setdefault(package_id, {
            'name': event.package_name or UNKNOWN_PACKAGE_NAME, 'revenue': 0.0, 'count': 0,
        })
        entry['revenue'] += event.payment_amount or 0
        entry['count'] += 1
    return stats


def revenue_metrics(members, events, now: datetime) -> RevenueMetrics:
    """Totals over paid purchases; MRR is the current month's revenue, LTV = ARPPU x 2.5."""
    total_users = len(list(members))
    purchases = [e for e in events if e.is_purchase]
    total = sum(e.payment_amount for e in purchases)
    payers = len({e.member_id for e in purchases})
    arppu = (total / payers) if payers else 0.0

    by_month = []
    for label, start, end in month_buckets(now):
        monthly = [e for e in purchases if _in_month(e.created_at, start, end)]
        by_month.append(MonthlyRevenue(label, sum(e.payment_amount for e in monthly), len(monthly)))

    by_package = [
        PackageRevenue(package_id, s['name'], s['revenue'], s['count'], s['revenue'] / s['count'])
        for package_id, s in _package_stats(purchases).items()
    ]
    by_package.sort(key=lambda p: (-p.total_revenue, p.package_id))

    return RevenueMetrics(
        total_revenue=total,
        monthly_recurring_revenue=by_month[-1].revenue if by_month else 0.0,
        average_revenue_per_user=(total / total_users) if total_users else 0.0,
        average_revenue_per_paid_user=arppu,
        estimated_lifetime_value=arppu * LTV_MULTIPLIER,
        revenue_by_month=by_month,
        revenue_by_package=by_package,
    )


# ── Purchase patterns ────────────────────────────────────────────────────────

@dataclass
class PackagePopularity:
    package_id: str
    package_name: str
    purchases: int
    revenue: float
    popularity: float


@dataclass
class PurchasePatterns:
    most_popular_package: str = 'N/A'
    average_transaction_value: float = 0.0
    repurchase_rate: float = 0.0
    average_days_between_purchases: float = 0.0
    purchase_time_distribution: List[Dict[str, int]] = field(default_factory=list)
    package_popularity: List[PackagePopularity] = field(default_factory=list)


def purchase_patterns(events) -> PurchasePatterns:
    purchases = [e for e in events if e.is_purchase]
    if not purchases:
        return PurchasePatterns()

    popularity = [
        PackagePopularity(package_id, s['name'], s['count'], s['revenue'], percentage(s['count'], len(purchases)))
        for package_id, s in _package_stats(purchases).items()
    ]
    popularity.sort(key=lambda p: (-p.purchases, p.package_id))

    per_member = _by_member(purchases)
    repeat_buyers = sum(1 for rows in per_member.values() if len(rows) > 1)

    hours = [{'hour': hour, 'purchases': 0} for hour in range(24)]
    for event in purchases:
        if event.created_at is not None:
            hours[event.created_at.astimezone(timezone.utc).hour]['purchases'] += 1

    gaps = []
    for rows in per_member.values():
        ordered = _chronological(rows)
        gaps.extend(days_between(a.created_at, b.created_at) for a, b in zip(ordered, ordered[1:]))

    return PurchasePatterns(
        most_popular_package=popularity[0].package_name,
        average_transaction_value=mean(e.payment_amount for e in purchases),
        repurchase_rate=percentage(repeat_buyers, len(per_member)),
        average_days_between_purchases=mean(gaps),
        purchase_time_distribution=hours,
        package_popularity=popularity,
    )


@dataclass
class MonetizationAnalytics:
    conversion: ConversionMetrics
    credits: CreditAnalytics
    revenue: RevenueMetrics
    purchase_patterns: PurchasePatterns
    generated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['generated_at'] = self.generated_at.isoformat()
        return data


def monetization_analytics(members, accounts, events, now: datetime) -> MonetizationAnalytics:
    members = list(members)
    events = list(events)
    result = MonetizationAnalytics(
        conversion=conversion_metrics(members, events, now),
        credits=credit_analytics(accounts, events),
        revenue=revenue_metrics(members, events, now),
        purchase_patterns=purchase_patterns(events),
        generated_at=now,
    )
    logger.info(
        "Monetization: %d paid of %d members, revenue %.2f",
        result.conversion.paid_users, result.conversion.total_users, result.revenue.total_revenue,
    )
    return result
