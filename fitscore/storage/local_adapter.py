import json
from pathlib import Path

from fitscore.storage.base import BaseBlobStore
from fitscore.storage.exceptions import BlobStoreError

REFERENCE_SCHEME = "local://"


class LocalBlobStore(BaseBlobStore):
    """Stores uploads as files under a root directory.

    Objects live at ``{files_root}/{key}`` with the declared mime type kept in
    a ``{key}.meta.json`` sidecar. References look like ``local://{key}``.
    """

    def __init__(self, files_root: Path) -> None:
        self._files_root = files_root

    def put(self, key: str, data: bytes, mime_type: str) -> str:
        path = self._resolve_key(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            path.with_name(f"{path.name}.meta.json").write_text(
                json.dumps({"mime_type": mime_type, "size_bytes": len(data)}),
                encoding="utf-8",
            )
        except OSError as exc:
            raise BlobStoreError(f"Failed to write {key}: {exc}") from exc
        return f"{REFERENCE_SCHEME}{key}"

    def read(self, reference: str) -> bytes:
        """Read the bytes behind a reference returned by put.

        Raises:
            BlobStoreError: if the reference is foreign or unreadable.
        """
        if not reference.startswith(REFERENCE_SCHEME):
            raise BlobStoreError(f"Not a local blob reference: {reference}")
        path = self._resolve_key(reference[len(REFERENCE_SCHEME):])
        try:
            return path.read_bytes()
        except OSError as exc:
            raise BlobStoreError(f"Failed to read {reference}: {exc}") from exc

    def _resolve_key(self, key: str) -> Path:
        root = self._files_root.resolve()
        path = (root / key).resolve()
        if not path.is_relative_to(root) or path == root:
            raise BlobStoreError(f"Key escapes the storage root: {key}")
        return path
