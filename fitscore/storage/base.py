from abc import ABC, abstractmethod


class BaseBlobStore(ABC):
    """Contract for durable binary storage addressed by key."""

    @abstractmethod
    def put(self, key: str, data: bytes, mime_type: str) -> str:
        """Durably write bytes under key.

        Returns:
            Opaque reference to the stored object.

        Raises:
            BlobStoreError: if the write fails for any reason.
        """
