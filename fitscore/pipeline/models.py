from dataclasses import dataclass

from fitscore.analysis.models import AnalysisOutcome

ANONYMOUS_USER = "anonymous"


@dataclass(frozen=True)
class UploadRequest:
    """One document upload, alive only for the duration of a pipeline run."""

    payload: bytes | None
    file_name: str
    mime_type: str
    user_id: str | None = None

    @property
    def owner(self) -> str:
        user_id = (self.user_id or "").strip()
        return user_id or ANONYMOUS_USER


@dataclass(frozen=True)
class StoredObject:
    """Reference to an upload once it is durably written to the blob store."""

    key: str
    reference: str
    mime_type: str
    file_name: str
    user_id: str


@dataclass(frozen=True)
class PipelineResult:
    """What one pipeline run hands back to the HTTP layer."""

    stored: StoredObject
    outcome: AnalysisOutcome
    report_id: str | None = None
