"""Scoring and best-commit selection."""

from .models import (
    EMPTY_RECORD,
    Comparison,
    FileComparison,
    FileState,
    RunResult,
    RunState,
    ScoreRecord,
    TerminationReason,
)
from .scorer import compare_indices, score_commit
from .selector import select_best

__all__ = [
    "Comparison",
    "EMPTY_RECORD",
    "FileComparison",
    "FileState",
    "RunResult",
    "RunState",
    "ScoreRecord",
    "TerminationReason",
    "compare_indices",
    "score_commit",
    "select_best",
]
