"""
Application record model.

Mirrors one row of the remote `applications` table and converts a raw
DraftForm into the payload that gets inserted.
"""
import datetime as dt
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from jobtracker.errors import ValidationError
from jobtracker.models.draft import DraftForm


class ApplicationStatus(str, Enum):
    APPLIED = "Applied"
    INTERVIEWING = "Interviewing"
    OFFER = "Offer"
    REJECTED = "Rejected"
    WITHDRAWN = "Withdrawn"


VALID_STATUSES = {s.value for s in ApplicationStatus}

# Statuses counted as having reached the interview stage
INTERVIEW_STATUSES = {ApplicationStatus.INTERVIEWING, ApplicationStatus.OFFER}

MATCH_MIN = 0
MATCH_MAX = 100

OPTIONAL_TEXT_FIELDS = ("salary", "tags", "link", "notes")


class MatchTier(str, Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"


def match_tier(score: int) -> MatchTier:
    """Bucket a match score for display: >=75 strong, >=60 moderate, else weak"""
    if score >= 75:
        return MatchTier.STRONG
    if score >= 60:
        return MatchTier.MODERATE
    return MatchTier.WEAK


class ApplicationPayload(BaseModel):
    """Insert payload: everything except the server-assigned id and created_at"""
    date: dt.date
    company: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    match: int = Field(..., ge=MATCH_MIN, le=MATCH_MAX)
    status: ApplicationStatus = ApplicationStatus.APPLIED
    followup: Optional[dt.date] = None
    salary: Optional[str] = None
    tags: Optional[str] = None
    link: Optional[str] = None
    notes: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        """JSON-ready row; absent optionals stay null"""
        return self.model_dump(mode="json")


class ApplicationRecord(ApplicationPayload):
    """One persisted application as returned by the store"""
    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    created_at: Optional[dt.datetime] = None

    @property
    def match_tier(self) -> MatchTier:
        return match_tier(self.match)

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json")
        data["match_tier"] = self.match_tier.value
        return data


def _parse_date(field: str, raw: str, required: bool) -> Optional[dt.date]:
    value = raw.strip()
    if not value:
        if required:
            raise ValidationError(field, "is required")
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        raise ValidationError(field, f"'{value}' is not a valid date (YYYY-MM-DD)")


def _parse_match(raw: str) -> int:
    value = raw.strip()
    if not value:
        raise ValidationError("match", "is required")
    try:
        score = int(value)
    except ValueError:
        raise ValidationError("match", f"'{value}' is not a whole number")
    if not MATCH_MIN <= score <= MATCH_MAX:
        raise ValidationError("match", f"must be between {MATCH_MIN} and {MATCH_MAX}")
    return score


def build_payload(draft: DraftForm) -> ApplicationPayload:
    """
    Validate a draft and coerce it into an insert payload.

    Raises ValidationError naming the first offending field. Empty optional
    text becomes None so the store never receives a zero-length string.
    """
    company = draft.company.strip()
    if not company:
        raise ValidationError("company", "is required")
    role = draft.role.strip()
    if not role:
        raise ValidationError("role", "is required")

    status = draft.status.strip() or ApplicationStatus.APPLIED.value
    if status not in VALID_STATUSES:
        raise ValidationError("status", f"invalid status: {status}")

    optional = {}
    for name in OPTIONAL_TEXT_FIELDS:
        optional[name] = getattr(draft, name) or None

    return ApplicationPayload(
        date=_parse_date("date", draft.date, required=True),
        company=company,
        role=role,
        match=_parse_match(draft.match),
        status=ApplicationStatus(status),
        followup=_parse_date("followup", draft.followup, required=False),
        **optional,
    )
