class AnalysisError(Exception):
    """Raised when a report cannot be analyzed."""


class AnalysisValidationError(AnalysisError):
    """Raised when the model answer does not have the shape of a report."""


class AnalysisNetworkError(AnalysisError):
    """Raised when the inference provider call fails due to network/infrastructure issues."""
