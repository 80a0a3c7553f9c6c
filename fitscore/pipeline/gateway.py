import mimetypes
import re
import time
import uuid
from collections.abc import Callable

from fitscore.logging.logger import Log
from fitscore.pipeline.bounded import run_bounded
from fitscore.pipeline.exceptions import StorageError, ValidationError
from fitscore.pipeline.models import StoredObject, UploadRequest
from fitscore.storage.base import BaseBlobStore

DEFAULT_MIME_TYPE = "application/octet-stream"
_MAX_NAME_LENGTH = 100
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_file_name(file_name: str) -> str:
    """Reduce an uploaded file name to a filesystem- and URL-safe form."""
    base = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    safe = _UNSAFE_NAME_CHARS.sub("_", base).lstrip(".")
    safe = safe[-_MAX_NAME_LENGTH:].strip("_")
    return safe or "upload"


def resolve_mime_type(declared: str | None, file_name: str) -> str:
    declared = (declared or "").split(";", 1)[0].strip().lower()
    if declared and declared != DEFAULT_MIME_TYPE:
        return declared
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or DEFAULT_MIME_TYPE


class IngestionGateway:
    """Validates an upload and writes it durably before any analysis happens."""

    def __init__(
        self,
        *,
        blob_store: BaseBlobStore,
        timeout_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._blob_store = blob_store
        self._timeout_seconds = timeout_seconds
        self._clock = clock

    def object_key(self, file_name: str) -> str:
        """Time-prefixed key; the random part keeps same-millisecond uploads apart."""
        millis = int(self._clock() * 1000)
        return f"{millis}-{uuid.uuid4().hex[:8]}-{sanitize_file_name(file_name)}"

    async def store(self, upload: UploadRequest) -> StoredObject:
        """Write the upload to the blob store.

        Raises:
            ValidationError: if the upload has no payload; nothing is written.
            StorageError: if the write fails or does not finish in time.
        """
        if not upload.payload:
            Log.warning("No file uploaded in the request")
            raise ValidationError("No file uploaded")

        key = self.object_key(upload.file_name)
        mime_type = resolve_mime_type(upload.mime_type, upload.file_name)
        Log.info(f"Uploading {len(upload.payload)} bytes as {key} ({mime_type})")
        try:
            reference = await run_bounded(
                self._blob_store.put,
                key,
                upload.payload,
                mime_type,
                timeout_seconds=self._timeout_seconds,
            )
        except TimeoutError as exc:
            Log.error(f"Blob write for {key} did not finish in {self._timeout_seconds}s")
            raise StorageError(f"Upload of {key} timed out") from exc
        except Exception as exc:
            Log.error(f"Blob write for {key} failed: {exc}")
            raise StorageError(str(exc)) from exc

        Log.info(f"Upload successful: {reference}")
        return StoredObject(
            key=key,
            reference=reference,
            mime_type=mime_type,
            file_name=upload.file_name or "upload",
            user_id=upload.owner,
        )
