import datetime as dt
from dataclasses import dataclass, fields, replace
from typing import Optional, Tuple

from jobtracker.errors import ValidationError


@dataclass(frozen=True)
class DraftForm:
    """
    Editable staging copy of a new application.

    Every field is kept as the raw text the user typed; nothing is coerced
    until the draft is turned into a payload.
    """
    date: str = ""
    company: str = ""
    role: str = ""
    match: str = ""
    status: str = "Applied"
    followup: str = ""
    salary: str = ""
    tags: str = ""
    link: str = ""
    notes: str = ""

    @classmethod
    def empty(cls, today: Optional[dt.date] = None) -> "DraftForm":
        """Fresh draft with the date pre-filled."""
        return cls(date=(today or dt.date.today()).isoformat())

    def with_field(self, name: str, value) -> "DraftForm":
        """Return a copy with one field replaced."""
        if name not in DRAFT_FIELDS:
            raise ValidationError(name, "unknown field")
        return replace(self, **{name: "" if value is None else str(value)})

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in DRAFT_FIELDS}


DRAFT_FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(DraftForm))
