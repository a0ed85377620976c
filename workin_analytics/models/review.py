"""
ScoredArtifact — a CV review from the `cvReviews` collection.

The analysis payload (`result`) is kept verbatim; the handful of sub-scores
the reports use are lifted into typed fields at ingestion.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from workin_analytics.models import fields
from workin_analytics.timeutils import coerce_timestamp

MAX_VERB_LEVEL = 10


@dataclass(frozen=True)
class ScoredArtifact:
    id: str
    member_id: str
    created_at: Optional[datetime] = None
    position: str = 'No especificado'
    status: str = 'unknown'
    file_name: Optional[str] = None
    score: Optional[float] = None
    errors: int = 0
    verb_level: int = 0
    result: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> 'ScoredArtifact':
        data = data or {}
        result = data.get('result') if isinstance(data.get('result'), dict) else {}

        score = fields.optional_number(fields.nested(result, 'mainly_analysis', 'porcentaje'))
        if score is None:
            score = fields.optional_number(data.get('score'))

        verb_level = fields.integer(fields.nested(result, 'verbos_impact', 'nivel'))

        return cls(
            id=doc_id,
            member_id=fields.text(data, 'userId'),
            created_at=coerce_timestamp(data.get('createdAt'), 'createdAt', doc_id),
            position=fields.text(data, 'position', default='No especificado'),
            status=fields.text(data, 'status', default='unknown'),
            file_name=fields.text(data, 'fileName') or None,
            score=score,
            errors=max(0, fields.integer(fields.nested(result, 'spelling', 'errores'))),
            verb_level=min(max(verb_level, 0), MAX_VERB_LEVEL),
            result=result,
        )

    @property
    def technical_skills(self) -> List[str]:
        return fields.str_list(fields.nested(self.result, 'extractedData', 'skills', 'technical'))
