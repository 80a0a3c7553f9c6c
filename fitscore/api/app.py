from fastapi import FastAPI, File, Form, UploadFile
from fastapi.responses import JSONResponse

from fitscore.api.responder import SingleResponse
from fitscore.api.serializers import history_item, upload_response
from fitscore.ledger.report_ledger import ReportLedger
from fitscore.logging.logger import Log
from fitscore.pipeline.exceptions import PersistenceError, StorageError, ValidationError
from fitscore.pipeline.models import UploadRequest
from fitscore.pipeline.pipeline import ReportPipeline


def create_app(pipeline: ReportPipeline, ledger: ReportLedger, debug: bool = False) -> FastAPI:
    """HTTP surface over the report pipeline and the report ledger."""
    app = FastAPI(title="FitScore AI", debug=debug)

    @app.get("/_health")
    def health():
        return {"status": "ok"}

    @app.post("/upload")
    async def upload(
        report: UploadFile | None = File(None),
        user_id: str | None = Form(None, alias="userId"),
    ):
        responder = SingleResponse()
        payload = await report.read() if report is not None else None
        request = UploadRequest(
            payload=payload,
            file_name=(report.filename if report is not None else None) or "",
            mime_type=(report.content_type if report is not None else None) or "",
            user_id=user_id,
        )

        try:
            result = await pipeline.run(request)
        except ValidationError as exc:
            return responder.send(
                JSONResponse(status_code=400, content={"status": "error", "message": str(exc)})
            )
        except StorageError as exc:
            Log.error(f"Upload aborted: {exc}")
            return responder.send(
                JSONResponse(
                    status_code=500,
                    content={"status": "error", "message": "Upload failed", "error": str(exc)},
                )
            )

        return responder.send(JSONResponse(status_code=200, content=upload_response(result)))

    @app.get("/history/{user_id}")
    async def history(user_id: str):
        responder = SingleResponse()
        try:
            records = await ledger.history(user_id)
        except PersistenceError as exc:
            Log.error(f"History unavailable: {exc}")
            return responder.send(
                JSONResponse(
                    status_code=503,
                    content={"status": "error", "message": "History is unavailable"},
                )
            )
        return responder.send(
            JSONResponse(status_code=200, content=[history_item(r) for r in records])
        )

    return app
