from __future__ import annotations

from collections.abc import Iterator

import pytest

from treematch.scoring import Comparison, TerminationReason, select_best
from treematch.sources import HistoryAccessError

ARCHIVE = {"a.txt": "X", "b.txt": "Y", "c.txt": "Z", "d.txt": "W"}


def _indexer(trees: dict[str, dict[str, str]], seen: list[str]):
    def index_commit(commit: str) -> dict[str, str]:
        seen.append(commit)
        return trees[commit]

    return index_commit


def test_perfect_match_stops_the_scan() -> None:
    trees = {
        "c1": {"a.txt": "X", "b.txt": "changed"},
        "c2": dict(ARCHIVE),
        "c3": dict(ARCHIVE),
    }
    seen: list[str] = []

    result = select_best(ARCHIVE, ["c1", "c2", "c3"], _indexer(trees, seen))

    assert result.reason is TerminationReason.PERFECT_MATCH
    assert result.matched
    assert result.best is not None
    assert result.best.commit == "c2"
    assert seen == ["c1", "c2"]
    assert [record.commit for record in result.records] == ["c1", "c2"]


def test_equal_scores_keep_the_first_commit() -> None:
    trees = {
        "new": {"a.txt": "X", "b.txt": "bad"},
        "old": {"c.txt": "Z", "d.txt": "bad"},
        "older": {"a.txt": "bad", "b.txt": "bad"},
    }
    seen: list[str] = []

    result = select_best(ARCHIVE, ["new", "old", "older"], _indexer(trees, seen))

    assert result.reason is TerminationReason.EXHAUSTED
    assert result.best is not None
    assert result.best.commit == "new"
    assert result.best.score == 0.5
    assert result.evaluated == 3


def test_strictly_better_score_replaces_best() -> None:
    trees = {
        "c1": {"a.txt": "X", "b.txt": "bad", "c.txt": "bad"},
        "c2": {"a.txt": "X", "b.txt": "Y", "c.txt": "bad"},
    }

    result = select_best(ARCHIVE, ["c1", "c2"], _indexer(trees, []))

    assert result.best is not None
    assert result.best.commit == "c2"


def test_limit_exceeded_fails_even_if_next_commit_matches() -> None:
    trees = {
        "c1": {"a.txt": "bad"},
        "c2": {"a.txt": "X", "b.txt": "bad"},
        "c3": dict(ARCHIVE),
    }
    seen: list[str] = []

    result = select_best(ARCHIVE, ["c1", "c2", "c3"], _indexer(trees, seen), limit=2)

    assert result.reason is TerminationReason.LIMIT_EXCEEDED
    assert result.best is None
    assert result.evaluated == 2
    assert seen == ["c1", "c2"]


def test_history_shorter_than_limit_reports_closest() -> None:
    trees = {"c1": {"a.txt": "bad"}, "c2": {"a.txt": "X", "b.txt": "bad"}}

    result = select_best(ARCHIVE, ["c1", "c2"], _indexer(trees, []), limit=2)

    assert result.reason is TerminationReason.EXHAUSTED
    assert result.best is not None
    assert result.best.commit == "c2"


def test_perfect_match_within_limit_wins() -> None:
    trees = {"c1": {"a.txt": "bad"}, "c2": dict(ARCHIVE)}

    result = select_best(ARCHIVE, ["c1", "c2", "c3"], _indexer(trees, []), limit=2)

    assert result.reason is TerminationReason.PERFECT_MATCH
    assert result.best is not None
    assert result.best.commit == "c2"


def test_empty_history_reports_no_commits() -> None:
    result = select_best(ARCHIVE, [], _indexer({}, []))

    assert result.reason is TerminationReason.NO_COMMITS
    assert result.best is None
    assert result.records == ()


def test_all_zero_scores_report_first_commit_as_closest() -> None:
    trees = {"c1": {"other.txt": "1"}, "c2": {"a.txt": "bad"}}

    result = select_best(ARCHIVE, ["c1", "c2"], _indexer(trees, []))

    assert result.reason is TerminationReason.EXHAUSTED
    assert result.best is not None
    assert result.best.commit == "c1"
    assert result.best.score == 0.0


def test_perfect_match_dominated_by_higher_match_count_does_not_stop() -> None:
    trees = {
        "c1": {"a.txt": "X", "b.txt": "Y", "c.txt": "Z", "d.txt": "bad"},
        "c2": {"a.txt": "X"},
        "c3": {"a.txt": "X", "b.txt": "Y"},
    }
    seen: list[str] = []

    result = select_best(ARCHIVE, ["c1", "c2", "c3"], _indexer(trees, seen))

    assert seen == ["c1", "c2", "c3"]
    assert result.reason is TerminationReason.EXHAUSTED
    assert result.best is not None
    assert result.best.commit == "c2"


def test_callback_sees_every_comparison_in_order() -> None:
    trees = {"c1": {"a.txt": "bad"}, "c2": dict(ARCHIVE)}
    observed: list[Comparison] = []

    select_best(ARCHIVE, ["c1", "c2"], _indexer(trees, []), on_comparison=observed.append)

    assert [item.record.commit for item in observed] == ["c1", "c2"]


def test_history_errors_abort_the_run() -> None:
    def index_commit(commit: str) -> dict[str, str]:
        raise HistoryAccessError("bad object", commit=commit)

    with pytest.raises(HistoryAccessError):
        select_best(ARCHIVE, ["c1", "c2"], index_commit)


def test_commit_sequence_is_closed_on_early_exit() -> None:
    closed: list[bool] = []

    def commits() -> Iterator[str]:
        try:
            yield "c1"
            yield "c2"
        finally:
            closed.append(True)

    result = select_best(ARCHIVE, commits(), lambda commit: dict(ARCHIVE))

    assert result.best is not None
    assert result.best.commit == "c1"
    assert closed == [True]


def test_non_positive_limit_is_rejected() -> None:
    with pytest.raises(ValueError):
        select_best(ARCHIVE, ["c1"], lambda commit: {}, limit=0)
