from abc import ABC, abstractmethod


class BaseInferenceClient(ABC):
    """Contract for provider-specific multimodal inference clients."""

    @abstractmethod
    def infer(self, reference: str, mime_type: str, instruction: str) -> str:
        """Send one stored document plus an instruction; return the answer text.

        Args:
            reference: Blob store reference of the document.
            mime_type: Declared mime type of the document.
            instruction: Natural-language task description.

        Raises:
            AnalysisError: on any failure.
        """
