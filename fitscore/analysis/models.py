from dataclasses import dataclass, field
from typing import Literal

FALLBACK_SUMMARY = (
    "We could not analyze this report right now. The file was saved; "
    "please try again later."
)


@dataclass(frozen=True)
class Recommendations:
    """Recommendation lists, one per fixed category."""

    diet: list[str] = field(default_factory=list)
    exercise: list[str] = field(default_factory=list)
    lifestyle: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Report:
    """Structured health assessment derived from one document."""

    score: int
    summary: str
    vitals: dict[str, str] = field(default_factory=dict)
    recommendations: Recommendations = field(default_factory=Recommendations)


@dataclass(frozen=True)
class Analyzed:
    """The model answer was parsed into a report."""

    report: Report
    status: Literal["analyzed"] = "analyzed"


@dataclass(frozen=True)
class Degraded:
    """Analysis failed; the report is the fallback report."""

    report: Report
    reason: str = ""
    status: Literal["degraded"] = "degraded"


AnalysisOutcome = Analyzed | Degraded


def fallback_report() -> Report:
    """Report-shaped value returned when analysis is unavailable."""
    return Report(score=0, summary=FALLBACK_SUMMARY)
