"""
CSV export of the current application list.

Every value is double-quoted. Embedded quotes are doubled (RFC 4180), so a
note containing `"` or a newline round-trips through a spreadsheet intact.
The header row is written bare.
"""
import csv
import datetime as dt
import io
from dataclasses import dataclass
from typing import Optional, Sequence

from jobtracker.models.application import ApplicationRecord

CSV_MEDIA_TYPE = "text/csv"

HEADERS = [
    "Date",
    "Company",
    "Role",
    "Match Score",
    "Status",
    "Follow-up",
    "Salary",
    "Tags",
    "Link",
    "Notes",
]

COLUMNS = ["date", "company", "role", "match", "status", "followup", "salary", "tags", "link", "notes"]


@dataclass(frozen=True)
class CsvExport:
    filename: str
    content: bytes
    media_type: str = CSV_MEDIA_TYPE


def export_filename(today: Optional[dt.date] = None) -> str:
    return f"job-applications-{(today or dt.date.today()).isoformat()}.csv"


def _cell(value) -> str:
    if value is None:
        return ""
    if hasattr(value, "value"):  # enums
        return str(value.value)
    if isinstance(value, dt.date):
        return value.isoformat()
    return str(value)


def render_csv(records: Sequence[ApplicationRecord]) -> str:
    """Header plus one quoted row per record, in the given order."""
    buf = io.StringIO()
    buf.write(",".join(HEADERS) + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for record in records:
        writer.writerow([_cell(getattr(record, col)) for col in COLUMNS])
    return buf.getvalue()


def export_csv(records: Sequence[ApplicationRecord], today: Optional[dt.date] = None) -> Optional[CsvExport]:
    """Build the download for `records`; None when there is nothing to export."""
    if not records:
        return None
    return CsvExport(
        filename=export_filename(today),
        content=render_csv(records).encode("utf-8"),
    )
