"""Multimodal analysis of a stored medical report."""

from fitscore.analysis.client_base import BaseInferenceClient
from fitscore.analysis.models import AnalysisOutcome
from fitscore.analysis.normalizer import Normalizer
from fitscore.analysis.prompt_loader import load_instruction
from fitscore.logging.logger import Log
from fitscore.pipeline.bounded import run_bounded
from fitscore.pipeline.models import StoredObject


class AnalysisInvoker:
    """Asks the inference service about one stored document, exactly once.

    Failures of the external call never propagate: they degrade into the
    fallback outcome, the same way an unusable answer does.
    """

    def __init__(
        self,
        *,
        client: BaseInferenceClient,
        normalizer: Normalizer,
        timeout_seconds: float,
        instruction: str | None = None,
    ) -> None:
        self._client = client
        self._normalizer = normalizer
        self._timeout_seconds = timeout_seconds
        self._instruction = instruction if instruction is not None else load_instruction()

    @property
    def instruction(self) -> str:
        return self._instruction

    async def analyze(self, stored: StoredObject) -> AnalysisOutcome:
        Log.info(f"Analyzing {stored.reference} ({stored.mime_type})")
        try:
            raw = await run_bounded(
                self._client.infer,
                stored.reference,
                stored.mime_type,
                self._instruction,
                timeout_seconds=self._timeout_seconds,
            )
        except TimeoutError:
            Log.error(
                f"Inference for {stored.reference} timed out after {self._timeout_seconds}s"
            )
            return self._normalizer.degrade("Inference timed out")
        except Exception as exc:
            Log.error(f"Inference for {stored.reference} failed: {exc}")
            return self._normalizer.degrade(f"Inference failed: {exc}")

        return self._normalizer.normalize(raw)
