class BlobStoreError(OSError):
    """Raised when the blob store cannot write or read an object."""
