from dataclasses import asdict
from datetime import timezone
from typing import Any

from psycopg_pool import ConnectionPool

from fitscore.analysis.models import AnalysisOutcome, Recommendations, Report
from fitscore.analysis.validator import CATEGORIES, DEFAULT_SUMMARY
from fitscore.config.settings import Settings
from fitscore.database.document_store import BaseDocumentStore, PostgresDocumentStore
from fitscore.database.models import DocumentRecord, OrderBy
from fitscore.ledger.models import ReportRecord
from fitscore.logging.logger import Log
from fitscore.pipeline.bounded import run_bounded
from fitscore.pipeline.exceptions import PersistenceError
from fitscore.pipeline.models import StoredObject

REPORTS_COLLECTION = "reports"
HISTORY_LIMIT = 10


class ReportLedger:
    """Append-only per-user record of analysis outcomes."""

    def __init__(
        self,
        *,
        store: BaseDocumentStore,
        timeout_seconds: float,
    ) -> None:
        self._store = store
        self._timeout_seconds = timeout_seconds

    async def record(
        self,
        user_id: str,
        *,
        outcome: AnalysisOutcome,
        stored: StoredObject,
    ) -> str | None:
        """Write one record and return its id, or None if the write failed.

        Write failures are logged and swallowed: the caller still returns the
        analysis to the client.
        """
        document = {
            "userId": user_id,
            "fileUrl": stored.reference,
            "fileName": stored.file_name,
            "status": outcome.status,
            **report_to_document(outcome.report),
        }
        try:
            report_id = await run_bounded(
                self._store.insert,
                REPORTS_COLLECTION,
                document,
                timeout_seconds=self._timeout_seconds,
            )
        except TimeoutError:
            Log.error(
                f"Saving report for user {user_id} timed out after {self._timeout_seconds}s"
            )
            return None
        except Exception as exc:
            Log.exception(f"Error saving report for user {user_id}: {exc}")
            return None

        Log.info(f"Saved report {report_id} for user {user_id}")
        return report_id

    async def history(self, user_id: str) -> list[ReportRecord]:
        """Return up to HISTORY_LIMIT records for the user, newest first.

        Raises:
            PersistenceError: if the document store cannot be queried.
        """
        try:
            documents = await run_bounded(
                self._store.query,
                REPORTS_COLLECTION,
                {"userId": user_id},
                OrderBy(field="timestamp", descending=True),
                HISTORY_LIMIT,
                timeout_seconds=self._timeout_seconds,
            )
        except TimeoutError as exc:
            raise PersistenceError(f"History query for user {user_id} timed out") from exc
        except Exception as exc:
            raise PersistenceError(f"History query for user {user_id} failed: {exc}") from exc

        records = [record_from_document(doc) for doc in documents[:HISTORY_LIMIT]]
        Log.info(f"Loaded {len(records)} history records for user {user_id}")
        return records


def report_to_document(report: Report) -> dict[str, Any]:
    return {
        "score": report.score,
        "summary": report.summary,
        "vitals": dict(report.vitals),
        "recommendations": asdict(report.recommendations),
    }


def record_from_document(document: DocumentRecord) -> ReportRecord:
    """Build a ReportRecord; fields older records lack default to empty."""
    data = document.data
    raw_recommendations = data.get("recommendations")
    if not isinstance(raw_recommendations, dict):
        raw_recommendations = {}
    recommendations = Recommendations(
        **{
            category: list(raw_recommendations.get(category) or [])
            for category in CATEGORIES
        }
    )
    vitals = data.get("vitals")
    report = Report(
        score=int(data.get("score") or 0),
        summary=data.get("summary") or DEFAULT_SUMMARY,
        vitals=dict(vitals) if isinstance(vitals, dict) else {},
        recommendations=recommendations,
    )
    timestamp = document.timestamp
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return ReportRecord(
        id=document.id,
        user_id=str(data.get("userId", "")),
        file_url=str(data.get("fileUrl", "")),
        file_name=str(data.get("fileName", "")),
        timestamp=timestamp,
        status=str(data.get("status", "analyzed")),
        report=report,
    )


def build_ledger(settings: Settings, pool: ConnectionPool) -> ReportLedger:
    """Build a ReportLedger backed by PostgreSQL."""
    return ReportLedger(
        store=PostgresDocumentStore(pool),
        timeout_seconds=settings.ledger_write_timeout_seconds,
    )
