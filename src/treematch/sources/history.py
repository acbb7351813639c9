"""Commit sequence selection for a matching run."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from treematch.sources.repository import RepositoryAccessor


def enumerate_commits(
    repository: RepositoryAccessor,
    *,
    commit: str | None = None,
    rev_args: Sequence[str] = (),
) -> Iterator[str]:
    """Return a lazy, newest-first commit id sequence.

    An explicit commit yields exactly one id. Otherwise the repository history
    query is streamed; re-invoke to restart it. Limits are applied by the
    consumer, which simply stops iterating.
    """
    if commit is not None:
        return iter((repository.resolve_commit(commit),))
    return repository.iter_history(rev_args)
