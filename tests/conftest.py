import io
import itertools
import threading
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from fitscore.analysis.client_base import BaseInferenceClient
from fitscore.database.document_store import BaseDocumentStore
from fitscore.database.models import DocumentRecord, OrderBy
from fitscore.storage.base import BaseBlobStore
from fitscore.storage.exceptions import BlobStoreError


class FakeBlobStore(BaseBlobStore):
    """Keeps objects in a dict and counts put() calls."""

    def __init__(self, fail: bool = False) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.calls = 0
        self.fail = fail

    def put(self, key: str, data: bytes, mime_type: str) -> str:
        self.calls += 1
        if self.fail:
            raise BlobStoreError("bucket unavailable")
        self.objects[key] = (data, mime_type)
        return f"mem://{key}"


class FakeInferenceClient(BaseInferenceClient):
    """Returns a canned answer, or raises the configured error."""

    def __init__(self, answer: str = "", error: Exception | None = None) -> None:
        self.answer = answer
        self.error = error
        self.requests: list[tuple[str, str, str]] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def infer(self, reference: str, mime_type: str, instruction: str) -> str:
        self.requests.append((reference, mime_type, instruction))
        if self.error is not None:
            raise self.error
        return self.answer


class InMemoryDocumentStore(BaseDocumentStore):
    """Append-only document store with a monotonically increasing clock."""

    def __init__(self, fail_inserts: bool = False) -> None:
        self.documents: list[DocumentRecord] = []
        self.inserts = 0
        self.queries = 0
        self.fail_inserts = fail_inserts
        self._ids = itertools.count(1)
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)
        self._lock = threading.Lock()

    def insert(self, collection: str, record: dict[str, Any]) -> str:
        with self._lock:
            self.inserts += 1
            if self.fail_inserts:
                raise RuntimeError("document store unavailable")
            self._clock += timedelta(minutes=1)
            document = DocumentRecord(
                id=str(next(self._ids)),
                collection=collection,
                timestamp=self._clock,
                data=dict(record),
            )
            self.documents.append(document)
            return document.id

    def query(
        self,
        collection: str,
        filters: dict[str, Any],
        order_by: OrderBy,
        limit: int,
    ) -> list[DocumentRecord]:
        with self._lock:
            self.queries += 1
            matches = [
                doc
                for doc in self.documents
                if doc.collection == collection
                and all(doc.data.get(k) == v for k, v in filters.items())
            ]
        matches.sort(key=lambda doc: doc.timestamp, reverse=order_by.descending)
        return matches[:limit]


@pytest.fixture()
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture()
def failing_blob_store() -> FakeBlobStore:
    return FakeBlobStore(fail=True)


@pytest.fixture()
def inference_client() -> FakeInferenceClient:
    return FakeInferenceClient()


@pytest.fixture()
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture()
def failing_document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(fail_inserts=True)


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal two-page lab report PDF."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Blood Pressure: 120/80 mmHg")
    c.showPage()
    c.drawString(72, 720, "Cholesterol: 180 mg/dL")
    c.save()
    return buf.getvalue()
