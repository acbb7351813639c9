"""Deterministic digest index construction for archives and commits."""

from __future__ import annotations

import os
from pathlib import Path

from treematch.index.hashing import ContentHasher
from treematch.index.models import NO_IGNORE, DigestIndex, IgnoreRule
from treematch.sources.repository import RepositoryAccessor


def build_archive_index(
    root: Path,
    hasher: ContentHasher,
    ignore: IgnoreRule = NO_IGNORE,
    source: str | None = None,
) -> DigestIndex:
    """Hash every regular file under an extracted archive root."""
    resolved_root = root.resolve()
    entries: dict[str, str] = {}
    for relative, full_path in _walk_regular_files(resolved_root):
        if ignore.matches(relative):
            continue
        entries[relative] = hasher.digest_file(full_path)
    return DigestIndex(
        source=source or str(resolved_root),
        entries=entries,
        root=resolved_root,
    )


def build_commit_index(
    repository: RepositoryAccessor,
    commit: str,
    ignore: IgnoreRule = NO_IGNORE,
) -> DigestIndex:
    """Index a commit's tree using blob ids as digests; no blob is read."""
    entries: dict[str, str] = {}
    for entry in repository.list_tree(commit):
        if ignore.matches(entry.path):
            continue
        entries[entry.path] = entry.object_id
    return DigestIndex(source=commit, entries=entries)


def _walk_regular_files(root: Path) -> list[tuple[str, Path]]:
    """Walk the tree with sorted entries and no symlink following."""
    output: list[tuple[str, Path]] = []
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        with os.scandir(current) as entries:
            ordered_entries = sorted(entries, key=lambda item: item.name)
        for entry in reversed(ordered_entries):
            full_path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                stack.append(full_path)
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            output.append((full_path.relative_to(root).as_posix(), full_path))
    output.sort(key=lambda item: item[0])
    return output
