from dataclasses import dataclass
from datetime import datetime

from fitscore.analysis.models import Report


@dataclass(frozen=True)
class ReportRecord:
    """One persisted analysis, as read back from the document store."""

    id: str
    user_id: str
    file_url: str
    file_name: str
    timestamp: datetime
    status: str
    report: Report
