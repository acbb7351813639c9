"""Identify the commit an archive's files were taken from."""

from treematch.cli import ArgumentError, main
from treematch.index import DigestIndex, IgnoreRule
from treematch.report import DiffRenderError
from treematch.scoring import RunResult, ScoreRecord, TerminationReason, score_commit, select_best
from treematch.sources import ExtractionError, HistoryAccessError

__version__ = "0.1.0"

__all__ = [
    "ArgumentError",
    "DiffRenderError",
    "DigestIndex",
    "ExtractionError",
    "HistoryAccessError",
    "IgnoreRule",
    "RunResult",
    "ScoreRecord",
    "TerminationReason",
    "__version__",
    "main",
    "score_commit",
    "select_best",
]
