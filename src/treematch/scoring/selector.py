"""Best-commit selection across a commit sequence."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from treematch.scoring.models import (
    Comparison,
    RunResult,
    RunState,
    ScoreRecord,
    TerminationReason,
)
from treematch.scoring.scorer import compare_indices

IndexCommit = Callable[[str], Mapping[str, str]]
ComparisonCallback = Callable[[Comparison], None]


def select_best(
    archive_index: Mapping[str, str],
    commits: Iterable[str],
    index_commit: IndexCommit,
    *,
    limit: int | None = None,
    on_comparison: ComparisonCallback | None = None,
) -> RunResult:
    """Score commits in order until a perfect match, the limit, or exhaustion.

    Ties keep the first commit seen: the best record is replaced only on a
    strictly higher score. Errors from `index_commit` propagate unchanged.
    """
    if limit is not None and limit < 1:
        raise ValueError("limit must be a positive integer")
    state = RunState()
    records: list[ScoreRecord] = []
    first_record: ScoreRecord | None = None
    iterator = iter(commits)
    try:
        for commit in iterator:
            if limit is not None and state.evaluated >= limit:
                return RunResult(
                    best=None,
                    records=tuple(records),
                    reason=TerminationReason.LIMIT_EXCEEDED,
                    evaluated=state.evaluated,
                )
            comparison = compare_indices(commit, archive_index, index_commit(commit))
            record = comparison.record
            state.evaluated += 1
            records.append(record)
            if first_record is None:
                first_record = record
            if on_comparison is not None:
                on_comparison(comparison)

            state.max_matching = max(state.max_matching, record.matching)
            if record.is_perfect and record.matching >= state.max_matching:
                state.early_exit = True
                state.best = record
                break
            if record.score > state.best.score:
                state.best = record
    finally:
        close = getattr(iterator, "close", None)
        if close is not None:
            close()

    if state.early_exit:
        reason = TerminationReason.PERFECT_MATCH
    elif state.evaluated == 0:
        return RunResult(
            best=None,
            records=(),
            reason=TerminationReason.NO_COMMITS,
            evaluated=0,
        )
    else:
        reason = TerminationReason.EXHAUSTED
    best = state.best if state.best.commit is not None else first_record
    return RunResult(
        best=best,
        records=tuple(records),
        reason=reason,
        evaluated=state.evaluated,
    )
