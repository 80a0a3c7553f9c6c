from dataclasses import asdict
from typing import Any

from fitscore.analysis.models import Report
from fitscore.ledger.models import ReportRecord
from fitscore.pipeline.models import PipelineResult


def report_fields(report: Report) -> dict[str, Any]:
    return {
        "score": report.score,
        "summary": report.summary,
        "vitals": dict(report.vitals),
        "recommendations": asdict(report.recommendations),
    }


def upload_response(result: PipelineResult) -> dict[str, Any]:
    """Body of a 200 upload response, analyzed or degraded alike."""
    return {
        "status": result.outcome.status,
        **report_fields(result.outcome.report),
        "reportId": result.report_id,
        "fileUrl": result.stored.reference,
        "fileName": result.stored.file_name,
    }


def history_item(record: ReportRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "date": record.timestamp.date().isoformat(),
        "timestamp": record.timestamp.isoformat(),
        "fileName": record.file_name,
        "fileUrl": record.file_url,
        "status": record.status,
        **report_fields(record.report),
    }
