"""Digest comparison between an archive index and one commit index."""

from __future__ import annotations

from collections.abc import Mapping

from treematch.scoring.models import Comparison, FileComparison, FileState, ScoreRecord


def compare_indices(
    commit: str,
    archive_index: Mapping[str, str],
    commit_index: Mapping[str, str],
) -> Comparison:
    """Compare every commit path against the archive, in sorted path order.

    The commit index drives iteration. Paths missing from the archive are
    noted but never counted: packaging may legitimately leave files out.
    """
    matching = 0
    nonmatching = 0
    files: list[FileComparison] = []
    for path in sorted(commit_index):
        archive_digest = archive_index.get(path)
        if archive_digest is None:
            files.append(FileComparison(path=path, state=FileState.NOT_IN_ARCHIVE))
            continue
        if archive_digest == commit_index[path]:
            matching += 1
            files.append(FileComparison(path=path, state=FileState.SAME))
            continue
        nonmatching += 1
        files.append(FileComparison(path=path, state=FileState.DIFFER))
    return Comparison(
        record=ScoreRecord.from_counts(commit, matching=matching, nonmatching=nonmatching),
        files=tuple(files),
    )


def score_commit(
    commit: str,
    archive_index: Mapping[str, str],
    commit_index: Mapping[str, str],
) -> ScoreRecord:
    """Return only the score record for a commit."""
    return compare_indices(commit, archive_index, commit_index).record
