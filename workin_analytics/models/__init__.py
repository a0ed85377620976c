from workin_analytics.models.member import Member
from workin_analytics.models.event import CreditEvent, EventCategory, Tool
from workin_analytics.models.review import ScoredArtifact
from workin_analytics.models.catalog import CreditAccount, Interview, Job

__all__ = [
    'Member',
    'CreditEvent',
    'EventCategory',
    'Tool',
    'ScoredArtifact',
    'CreditAccount',
    'Interview',
    'Job',
]
