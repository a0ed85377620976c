"""
Secondary collections used by the dashboard: jobs, interviews, credit accounts.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from workin_analytics.models import fields
from workin_analytics.timeutils import coerce_timestamp


@dataclass(frozen=True)
class Job:
    id: str
    title: str = ''
    company: str = ''
    status: str = 'draft'
    applications: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> 'Job':
        data = data or {}
        return cls(
            id=doc_id,
            title=fields.text(data, 'title'),
            company=fields.text(data, 'company'),
            status=fields.text(data, 'status', default='draft').lower(),
            applications=max(0, fields.integer(data.get('applications'))),
            created_at=coerce_timestamp(data.get('createdAt'), 'createdAt', doc_id),
        )


@dataclass(frozen=True)
class Interview:
    id: str
    member_id: str = ''
    position: str = ''
    status: str = 'scheduled'
    score: Optional[float] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> 'Interview':
        data = data or {}
        return cls(
            id=doc_id,
            member_id=fields.text(data, 'userId', 'candidateId'),
            position=fields.text(data, 'position', 'jobTitle'),
            status=fields.text(data, 'status', default='scheduled').lower(),
            score=fields.optional_number(data.get('score')),
            created_at=coerce_timestamp(data.get('createdAt'), 'createdAt', doc_id),
        )


@dataclass(frozen=True)
class CreditAccount:
    member_id: str
    credits: float = 0.0
    total_earned: float = 0.0
    total_spent: float = 0.0

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> 'CreditAccount':
        data = data or {}
        return cls(
            member_id=fields.text(data, 'userId', default=doc_id),
            credits=fields.number(data.get('credits')),
            total_earned=fields.number(data.get('totalEarned')),
            total_spent=fields.number(data.get('totalSpent')),
        )
