from pathlib import Path

from fitscore.analysis.exceptions import AnalysisError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_instruction(path: Path | None = None) -> str:
    """Load the analysis instruction sent alongside every document.

    Args:
        path: Path to the instruction file.
              Defaults to the bundled analysis_prompt.txt.

    Returns:
        The instruction text, stripped of surrounding whitespace.

    Raises:
        AnalysisError: if the file cannot be read or is empty.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "analysis_prompt.txt"
    try:
        text = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise AnalysisError(f"Failed to load analysis instruction: {exc}") from exc
    if not text:
        raise AnalysisError(f"Analysis instruction is empty: {path}")
    return text
