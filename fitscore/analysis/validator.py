"""Coerces a parsed model answer into a Report.

Missing fields are defaulted; present fields of the wrong type are rejected.
"""

import json
import math
from typing import Any

from fitscore.analysis.exceptions import AnalysisValidationError
from fitscore.analysis.models import Recommendations, Report

MAX_SUMMARY_LENGTH = 280
DEFAULT_SUMMARY = "No summary available."
MISSING_VITAL = "N/A"
CATEGORIES = ("diet", "exercise", "lifestyle")


def coerce_report(data: dict[str, Any]) -> Report:
    """Build a Report from raw parsed JSON.

    Raises:
        AnalysisValidationError: if a present field has an unusable type.
    """
    if not isinstance(data, dict):
        raise AnalysisValidationError("Report must be a JSON object")
    vitals = _build_vitals(data.get("vitals"))
    _merge_legacy_vitals(vitals, data)
    return Report(
        score=_build_score(data.get("score")),
        summary=_build_summary(data.get("summary")),
        vitals=vitals,
        recommendations=_build_recommendations(
            data.get("recommendations"), data.get("dietPlan")
        ),
    )


def _build_score(raw: Any) -> int:
    if raw is None:
        return 0
    if isinstance(raw, bool):
        raise AnalysisValidationError("'score' must be a number")
    if isinstance(raw, str):
        try:
            raw = float(raw.strip().rstrip("%"))
        except ValueError as exc:
            raise AnalysisValidationError(f"'score' is not numeric: {raw!r}") from exc
    if isinstance(raw, int):
        # JSON integers are unbounded; compare before any float conversion.
        return max(0, min(100, raw))
    if not isinstance(raw, (int, float)) or math.isnan(raw):
        raise AnalysisValidationError("'score' must be a number")
    if math.isinf(raw):
        return 100 if raw > 0 else 0
    return max(0, min(100, round(raw)))


def _build_summary(raw: Any) -> str:
    if raw is None:
        return DEFAULT_SUMMARY
    if not isinstance(raw, str):
        raise AnalysisValidationError("'summary' must be a string")
    summary = raw.strip()
    if not summary:
        return DEFAULT_SUMMARY
    if len(summary) > MAX_SUMMARY_LENGTH:
        summary = summary[: MAX_SUMMARY_LENGTH - 3].rstrip() + "..."
    return summary


def _build_vitals(raw: Any) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise AnalysisValidationError("'vitals' must be an object")
    vitals: dict[str, str] = {}
    for label, value in raw.items():
        name = str(label).strip()
        if not name:
            continue
        vitals[name] = _vital_to_text(value)
    return vitals


def _vital_to_text(value: Any) -> str:
    if value is None:
        return MISSING_VITAL
    if isinstance(value, str):
        return value.strip() or MISSING_VITAL
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float) and not math.isfinite(value):
        return MISSING_VITAL
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _merge_legacy_vitals(vitals: dict[str, str], data: dict[str, Any]) -> None:
    """Fold the flat bmi/bmiStatus fields of older answers into vitals."""
    for key, label in (("bmi", "BMI"), ("bmiStatus", "BMI Status")):
        value = data.get(key)
        if value is None or label in vitals:
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0:
            continue
        vitals[label] = _vital_to_text(value)


def _build_recommendations(raw: Any, legacy_diet: Any) -> Recommendations:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise AnalysisValidationError("'recommendations' must be an object")
    lists = {
        category: _build_items(raw.get(category), f"recommendations.{category}")
        for category in CATEGORIES
    }
    if "diet" not in raw and legacy_diet is not None:
        lists["diet"] = _build_items(legacy_diet, "dietPlan")
    return Recommendations(**lists)


def _build_items(raw: Any, path: str) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise AnalysisValidationError(f"'{path}' must be a list")
    items: list[str] = []
    for index, item in enumerate(raw):
        if isinstance(item, str):
            text = item.strip()
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            text = str(item)
        else:
            raise AnalysisValidationError(
                f"'{path}' item at index {index} must be a string"
            )
        if text:
            items.append(text)
    return items
