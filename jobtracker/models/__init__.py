# Record and draft models
from jobtracker.models.application import (
    ApplicationPayload,
    ApplicationRecord,
    ApplicationStatus,
    MatchTier,
    build_payload,
    match_tier,
)
from jobtracker.models.draft import DraftForm, DRAFT_FIELDS

__all__ = [
    "ApplicationPayload",
    "ApplicationRecord",
    "ApplicationStatus",
    "MatchTier",
    "build_payload",
    "match_tier",
    "DraftForm",
    "DRAFT_FIELDS",
]
