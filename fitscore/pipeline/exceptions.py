class PipelineError(Exception):
    """Base exception for all report pipeline errors."""


class ValidationError(PipelineError):
    """Raised when an upload request carries no file payload."""


class StorageError(PipelineError):
    """Raised when the uploaded file cannot be durably written to the blob store."""


class PersistenceError(PipelineError):
    """Raised when the document store cannot write or read report records."""
