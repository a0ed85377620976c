"""
Member — a registered MyWorkIn user (student), read from the `users` collection.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from workin_analytics.models import fields
from workin_analytics.timeutils import coerce_timestamp


@dataclass(frozen=True)
class Member:
    id: str
    email: str = ''
    display_name: str = ''
    university: str = ''
    career: str = ''
    position: str = ''
    interested_roles: List[str] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)
    status: str = 'unknown'
    registered_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None
    has_cv: bool = False
    profile_completed: bool = False
    onboarding_completed: bool = False
    onboarding_skipped: bool = False
    # top-level onboardingCompleted only, without the nested onboarding.completed
    legacy_onboarding_completed: bool = False
    verified: bool = False
    cv_file_name: Optional[str] = None
    cv_file_url: Optional[str] = None
    cv_uploaded_at: Optional[datetime] = None
    cv_data_integrated: bool = False
    cv_experience: bool = False

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> 'Member':
        data = data or {}
        onboarding = data.get('onboarding') if isinstance(data.get('onboarding'), dict) else {}
        cv_file_name = fields.text(data, 'cvFileName') or None
        legacy_onboarding = fields.truthy(data.get('onboardingCompleted'))

        registered_at = coerce_timestamp(data.get('createdAt'), 'createdAt', doc_id)
        if registered_at is None:
            registered_at = coerce_timestamp(
                fields.nested(data, 'metadata', 'creationTime'), 'metadata.creationTime', doc_id,
            )

        last_activity_at = None
        for key in ('updatedAt', 'lastLogin', 'lastLoginAt'):
            last_activity_at = coerce_timestamp(data.get(key), key, doc_id)
            if last_activity_at is not None:
                break

        return cls(
            id=doc_id,
            email=fields.text(data, 'email'),
            display_name=fields.text(data, 'displayName', 'name'),
            university=data.get('university') if isinstance(data.get('university'), str) else '',
            career=fields.text(data, 'career'),
            position=fields.text(data, 'position'),
            interested_roles=fields.str_list(data.get('interestedRoles')),
            skills=fields.str_list(data.get('skills')),
            status=fields.text(data, 'status', default='unknown'),
            registered_at=registered_at,
            last_activity_at=last_activity_at,
            has_cv=fields.truthy(data.get('hasCV')) or bool(cv_file_name),
            profile_completed=fields.truthy(data.get('profileCompleted')),
            onboarding_completed=fields.flag(onboarding.get('completed')) or legacy_onboarding,
            onboarding_skipped=fields.flag(onboarding.get('skipped')),
            legacy_onboarding_completed=legacy_onboarding,
            verified=fields.flag(data.get('verified')),
            cv_file_name=cv_file_name,
            cv_file_url=fields.text(data, 'cvFileUrl') or None,
            cv_uploaded_at=coerce_timestamp(data.get('cvUploadedAt'), 'cvUploadedAt', doc_id),
            cv_data_integrated=fields.truthy(data.get('cvDataIntegrated')),
            cv_experience=fields.truthy(data.get('cvExperience')),
        )
