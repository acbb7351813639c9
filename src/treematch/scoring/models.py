"""Typed models for scoring and run selection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FileState(str, Enum):
    """Outcome for one path of a commit index."""

    SAME = "same"
    DIFFER = "differ"
    NOT_IN_ARCHIVE = "not_in_archive"


class TerminationReason(str, Enum):
    """Why a selection run stopped."""

    PERFECT_MATCH = "perfect_match"
    EXHAUSTED = "exhausted"
    LIMIT_EXCEEDED = "limit_exceeded"
    NO_COMMITS = "no_commits"


@dataclass(slots=True, frozen=True)
class ScoreRecord:
    """Similarity of one commit's tree to the archive."""

    commit: str | None
    score: float
    compared: int
    matching: int
    nonmatching: int

    @classmethod
    def from_counts(cls, commit: str | None, matching: int, nonmatching: int) -> ScoreRecord:
        compared = matching + nonmatching
        score = matching / compared if compared > 0 else 0.0
        return cls(
            commit=commit,
            score=score,
            compared=compared,
            matching=matching,
            nonmatching=nonmatching,
        )

    @property
    def is_perfect(self) -> bool:
        return self.score == 1.0


EMPTY_RECORD = ScoreRecord(commit=None, score=0.0, compared=0, matching=0, nonmatching=0)


@dataclass(slots=True, frozen=True)
class FileComparison:
    """Per-path observation emitted in sorted path order."""

    path: str
    state: FileState


@dataclass(slots=True, frozen=True)
class Comparison:
    """Score record plus the observations that produced it."""

    record: ScoreRecord
    files: tuple[FileComparison, ...]

    def paths_in(self, state: FileState) -> tuple[str, ...]:
        return tuple(item.path for item in self.files if item.state is state)


@dataclass(slots=True)
class RunState:
    """Mutable selection state, owned by one selection loop."""

    best: ScoreRecord = EMPTY_RECORD
    max_matching: int = 0
    evaluated: int = 0
    early_exit: bool = False


@dataclass(slots=True, frozen=True)
class RunResult:
    """Final outcome of a selection run."""

    best: ScoreRecord | None
    records: tuple[ScoreRecord, ...]
    reason: TerminationReason
    evaluated: int

    @property
    def matched(self) -> bool:
        return self.reason is TerminationReason.PERFECT_MATCH
