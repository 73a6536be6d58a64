"""Derived statistics over the current application list."""
import math
from dataclasses import dataclass, asdict
from typing import Dict, Sequence

from jobtracker.models.application import (
    ApplicationRecord,
    ApplicationStatus,
    INTERVIEW_STATUSES,
)


@dataclass(frozen=True)
class DerivedStats:
    total: int = 0
    interviews: int = 0
    response_rate: int = 0
    avg_match: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)"""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def compute_stats(records: Sequence[ApplicationRecord]) -> DerivedStats:
    total = len(records)
    if total == 0:
        return DerivedStats()

    interviews = sum(1 for r in records if r.status in INTERVIEW_STATUSES)
    responded = sum(1 for r in records if r.status != ApplicationStatus.APPLIED)
    match_sum = sum(r.match for r in records)

    return DerivedStats(
        total=total,
        interviews=interviews,
        response_rate=round_half_away(responded * 100 / total),
        avg_match=round_half_away(match_sum / total),
    )
