"""Turns raw model output into an analysis outcome."""

import json
import re

from fitscore.analysis.exceptions import AnalysisError
from fitscore.analysis.models import AnalysisOutcome, Analyzed, Degraded, fallback_report
from fitscore.analysis.validator import coerce_report
from fitscore.logging.logger import Log

_FENCED_BLOCK = re.compile(r"```[\w+.-]*[ \t]*\n?(.*?)\n?[ \t]*```", re.DOTALL)
_LEADING_FENCE = re.compile(r"^```[\w+.-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```$")


def strip_fences(raw: str) -> str:
    """Remove code fence markers the model may wrap around its answer.

    Handles a complete fenced block, a lone opening or closing fence, and
    text with no fences at all.
    """
    cleaned = raw.strip()
    block = _FENCED_BLOCK.search(cleaned)
    if block is not None:
        return block.group(1).strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned.rstrip(), count=1)
    return cleaned.strip()


def parse_json_object(raw: str) -> dict[str, object]:
    """Parse model output into a JSON object.

    Raises:
        AnalysisError: if no JSON object can be recovered.
    """
    cleaned = strip_fences(raw)
    try:
        parsed = json.loads(cleaned)
    except RecursionError as exc:
        raise AnalysisError("Invalid JSON response: nesting too deep") from exc
    except ValueError as exc:
        parsed = _parse_embedded_object(cleaned, exc)

    if not isinstance(parsed, dict):
        raise AnalysisError("JSON response must be an object")
    return parsed


def _parse_embedded_object(text: str, original: ValueError) -> object:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise AnalysisError(f"Invalid JSON response: {original}") from original
    try:
        return json.loads(text[start : end + 1])
    except RecursionError as exc:
        raise AnalysisError("Invalid JSON response: nesting too deep") from exc
    except ValueError as exc:
        raise AnalysisError(f"Invalid JSON response: {exc}") from exc


class Normalizer:
    """Validates raw inference text into a report, degrading on any failure."""

    def normalize(self, raw: str) -> AnalysisOutcome:
        """Return Analyzed for a usable answer, otherwise the fallback outcome."""
        Log.debug(f"Inference raw response:\n{raw}")
        if not isinstance(raw, str) or not raw.strip():
            return self.degrade("Inference returned an empty response")
        try:
            report = coerce_report(parse_json_object(raw))
        except AnalysisError as exc:
            return self.degrade(str(exc))

        Log.info(
            f"Normalization complete: score {report.score}, "
            f"{len(report.vitals)} vitals"
        )
        return Analyzed(report=report)

    def degrade(self, reason: str) -> Degraded:
        Log.warning(f"Analysis degraded to fallback report: {reason}")
        return Degraded(report=fallback_report(), reason=reason)
