"""
CreditEvent — one row of the append-only `creditTransactions` ledger.
"""
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from workin_analytics.models import fields
from workin_analytics.timeutils import coerce_timestamp


class EventCategory(str, enum.Enum):
    PURCHASE = 'purchase'
    SPEND = 'spend'
    BONUS = 'bonus'
    RESERVE = 'reserve'
    CONFIRM = 'confirm'
    REVERT = 'revert'
    REFUND = 'refund'


class Tool(str, enum.Enum):
    CV_REVIEW = 'cv-review'
    JOB_MATCH = 'job-match'
    INTERVIEW_SIMULATION = 'interview-simulation'
    CV_CREATION = 'cv-creation'


def _category(value: Any) -> Optional[EventCategory]:
    try:
        return EventCategory(str(value).strip().lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class CreditEvent:
    id: str
    member_id: str
    category: Optional[EventCategory] = None
    tool: Optional[str] = None
    amount: float = 0.0
    description: str = ''
    created_at: Optional[datetime] = None
    status: Optional[str] = None
    package_id: Optional[str] = None
    package_name: Optional[str] = None
    payment_amount: Optional[float] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> 'CreditEvent':
        data = data or {}
        tool = fields.text(data, 'tool').lower() or None
        return cls(
            id=doc_id,
            member_id=fields.text(data, 'userId'),
            category=_category(data.get('type')) if data.get('type') else None,
            tool=tool,
            amount=fields.number(data.get('amount')),
            description=fields.text(data, 'description'),
            created_at=coerce_timestamp(data.get('createdAt'), 'createdAt', doc_id),
            status=fields.text(data, 'status').lower() or None,
            package_id=fields.text(data, 'packageId') or None,
            package_name=fields.text(data, 'packageName') or None,
            payment_amount=fields.optional_number(data.get('paymentAmount')),
        )

    def uses(self, tool: Tool) -> bool:
        return self.tool == tool.value

    @property
    def is_purchase(self) -> bool:
        """Paid purchase with a positive payment amount."""
        return self.category is EventCategory.PURCHASE and (self.payment_amount or 0) > 0

    @property
    def is_conversion(self) -> bool:
        """Any sign the member paid: purchase type, package or payment amount."""
        return (
            self.category is EventCategory.PURCHASE
            or bool(self.package_id)
            or bool(self.payment_amount)
        )
