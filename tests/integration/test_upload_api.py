"""End-to-end HTTP tests over the full pipeline with in-memory collaborators."""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from fitscore.analysis.exceptions import AnalysisNetworkError
from fitscore.analysis.invoker import AnalysisInvoker
from fitscore.analysis.models import FALLBACK_SUMMARY
from fitscore.analysis.normalizer import Normalizer
from fitscore.api.app import create_app
from fitscore.ledger.report_ledger import ReportLedger
from fitscore.pipeline.gateway import IngestionGateway
from fitscore.pipeline.models import UploadRequest
from fitscore.pipeline.pipeline import ReportPipeline

_ANSWER = {
    "score": 82,
    "summary": "Mild cholesterol elevation.",
    "vitals": {"Cholesterol": "215 mg/dL", "Blood Pressure": "118/76 mmHg"},
    "recommendations": {
        "diet": ["Swap butter for olive oil"],
        "exercise": ["Brisk walk 30 minutes daily"],
        "lifestyle": ["Recheck lipids in 3 months"],
    },
}


def _build_pipeline(blob_store, inference_client, document_store) -> tuple[ReportPipeline, ReportLedger]:
    ledger = ReportLedger(store=document_store, timeout_seconds=5.0)
    pipeline = ReportPipeline(
        gateway=IngestionGateway(blob_store=blob_store, timeout_seconds=5.0),
        invoker=AnalysisInvoker(
            client=inference_client,
            normalizer=Normalizer(),
            timeout_seconds=5.0,
        ),
        ledger=ledger,
    )
    return pipeline, ledger


def _client(blob_store, inference_client, document_store) -> TestClient:
    pipeline, ledger = _build_pipeline(blob_store, inference_client, document_store)
    return TestClient(create_app(pipeline, ledger))


def _upload(client: TestClient, content: bytes, user_id: str | None = "u1", name: str = "labs.pdf"):
    data = {"userId": user_id} if user_id is not None else {}
    return client.post(
        "/upload",
        files={"report": (name, content, "application/pdf")},
        data=data,
    )


class TestUpload:
    def test_returns_analysis_with_report_id(
        self, blob_store, inference_client, document_store, sample_pdf_bytes
    ) -> None:
        inference_client.answer = "```json\n" + json.dumps(_ANSWER) + "\n```"
        client = _client(blob_store, inference_client, document_store)

        response = _upload(client, sample_pdf_bytes)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "analyzed"
        assert body["score"] == 82
        assert body["vitals"] == _ANSWER["vitals"]
        assert body["recommendations"] == _ANSWER["recommendations"]
        assert body["reportId"] == "1"
        assert body["fileName"] == "labs.pdf"
        assert body["fileUrl"].startswith("mem://")
        assert body["fileUrl"].endswith("-labs.pdf")

    def test_each_collaborator_is_called_once(
        self, blob_store, inference_client, document_store, sample_pdf_bytes
    ) -> None:
        inference_client.answer = json.dumps(_ANSWER)
        _upload(_client(blob_store, inference_client, document_store), sample_pdf_bytes)

        assert blob_store.calls == 1
        assert inference_client.calls == 1
        assert document_store.inserts == 1
        reference, mime_type, _instruction = inference_client.requests[0]
        assert reference.endswith("-labs.pdf")
        assert mime_type == "application/pdf"

    def test_missing_file_returns_400_without_side_effects(
        self, blob_store, inference_client, document_store
    ) -> None:
        client = _client(blob_store, inference_client, document_store)

        response = client.post("/upload", data={"userId": "u1"})

        assert response.status_code == 400
        assert response.json() == {"status": "error", "message": "No file uploaded"}
        assert blob_store.calls == 0
        assert inference_client.calls == 0
        assert document_store.inserts == 0

    def test_empty_file_returns_400(self, blob_store, inference_client, document_store) -> None:
        response = _upload(_client(blob_store, inference_client, document_store), b"")

        assert response.status_code == 400
        assert blob_store.calls == 0

    def test_inference_failure_degrades_to_fallback(
        self, blob_store, inference_client, document_store, sample_pdf_bytes
    ) -> None:
        inference_client.error = AnalysisNetworkError("quota exceeded")
        client = _client(blob_store, inference_client, document_store)

        response = _upload(client, sample_pdf_bytes)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["score"] == 0
        assert body["vitals"] == {}
        assert body["recommendations"] == {"diet": [], "exercise": [], "lifestyle": []}
        assert body["summary"] == FALLBACK_SUMMARY
        assert body["reportId"] == "1"
        assert document_store.documents[0].data["status"] == "degraded"

    def test_malformed_answer_degrades_to_fallback(
        self, blob_store, inference_client, document_store, sample_pdf_bytes
    ) -> None:
        inference_client.answer = "The report shows healthy values overall."
        response = _upload(_client(blob_store, inference_client, document_store), sample_pdf_bytes)

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["score"] == 0

    def test_blob_failure_returns_500_and_skips_analysis(
        self, failing_blob_store, inference_client, document_store, sample_pdf_bytes
    ) -> None:
        client = _client(failing_blob_store, inference_client, document_store)

        response = _upload(client, sample_pdf_bytes)

        assert response.status_code == 500
        body = response.json()
        assert body["status"] == "error"
        assert body["message"] == "Upload failed"
        assert "bucket unavailable" in body["error"]
        assert inference_client.calls == 0
        assert document_store.inserts == 0

    def test_ledger_failure_still_returns_analysis(
        self, blob_store, inference_client, failing_document_store, sample_pdf_bytes
    ) -> None:
        inference_client.answer = json.dumps(_ANSWER)
        client = _client(blob_store, inference_client, failing_document_store)

        response = _upload(client, sample_pdf_bytes)

        assert response.status_code == 200
        assert response.json()["score"] == 82
        assert response.json()["reportId"] is None

    def test_missing_user_is_recorded_as_anonymous(
        self, blob_store, inference_client, document_store, sample_pdf_bytes
    ) -> None:
        inference_client.answer = json.dumps(_ANSWER)
        _upload(_client(blob_store, inference_client, document_store), sample_pdf_bytes, user_id=None)

        assert document_store.documents[0].data["userId"] == "anonymous"


class TestHistory:
    def test_returns_ten_newest_of_fifteen(
        self, blob_store, inference_client, document_store, sample_pdf_bytes
    ) -> None:
        inference_client.answer = json.dumps(_ANSWER)
        client = _client(blob_store, inference_client, document_store)
        for i in range(15):
            _upload(client, sample_pdf_bytes, name=f"report-{i}.pdf")

        response = client.get("/history/u1")

        assert response.status_code == 200
        items = response.json()
        assert len(items) == 10
        assert [item["fileName"] for item in items] == [
            f"report-{i}.pdf" for i in range(14, 4, -1)
        ]
        assert [item["timestamp"] for item in items] == sorted(
            (item["timestamp"] for item in items), reverse=True
        )

    def test_item_shape(
        self, blob_store, inference_client, document_store, sample_pdf_bytes
    ) -> None:
        inference_client.answer = json.dumps(_ANSWER)
        client = _client(blob_store, inference_client, document_store)
        _upload(client, sample_pdf_bytes)

        item = client.get("/history/u1").json()[0]

        assert item["id"] == "1"
        assert item["date"] == "2025-01-01"
        assert item["score"] == 82
        assert item["summary"] == _ANSWER["summary"]
        assert item["vitals"] == _ANSWER["vitals"]
        assert item["recommendations"] == _ANSWER["recommendations"]
        assert item["status"] == "analyzed"

    def test_unknown_user_returns_empty_list(
        self, blob_store, inference_client, document_store
    ) -> None:
        response = _client(blob_store, inference_client, document_store).get("/history/ghost")

        assert response.status_code == 200
        assert response.json() == []

    def test_query_failure_returns_503(self, blob_store, inference_client, document_store) -> None:
        def broken_query(*args: object) -> list:
            raise RuntimeError("connection reset")

        document_store.query = broken_query
        response = _client(blob_store, inference_client, document_store).get("/history/u1")

        assert response.status_code == 503
        assert response.json()["status"] == "error"


class TestConcurrentUploads:
    @pytest.mark.parametrize("rounds", [5])
    def test_users_never_see_each_others_records(
        self, blob_store, inference_client, document_store, sample_pdf_bytes, rounds: int
    ) -> None:
        inference_client.answer = json.dumps(_ANSWER)
        pipeline, ledger = _build_pipeline(blob_store, inference_client, document_store)

        async def scenario() -> tuple[list, list]:
            uploads = [
                UploadRequest(
                    payload=sample_pdf_bytes,
                    file_name=f"{user}-{i}.pdf",
                    mime_type="application/pdf",
                    user_id=user,
                )
                for i in range(rounds)
                for user in ("alice", "bob")
            ]
            await asyncio.gather(*(pipeline.run(upload) for upload in uploads))
            return await ledger.history("alice"), await ledger.history("bob")

        alice, bob = asyncio.run(scenario())

        assert len(alice) == rounds
        assert len(bob) == rounds
        assert {record.user_id for record in alice} == {"alice"}
        assert {record.user_id for record in bob} == {"bob"}
        assert all(record.file_name.startswith("alice-") for record in alice)


def test_health(blob_store, inference_client, document_store) -> None:
    response = _client(blob_store, inference_client, document_store).get("/_health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_debug_flag_reaches_the_app(blob_store, inference_client, document_store) -> None:
    pipeline, ledger = _build_pipeline(blob_store, inference_client, document_store)
    assert create_app(pipeline, ledger, debug=True).debug is True
    assert create_app(pipeline, ledger).debug is False
