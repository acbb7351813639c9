from __future__ import annotations

import io
import tarfile
from collections.abc import Iterator, Sequence
from pathlib import Path

import pytest

from treematch.index import GitBlobHasher, TreeEntry
from treematch.sources import HistoryAccessError


class FakeRepository:
    """In-memory RepositoryAccessor keyed by commit id, newest commit first."""

    def __init__(self, commits: list[tuple[str, dict[str, bytes]]]) -> None:
        self._order = [commit for commit, _ in commits]
        self._trees = {commit: files for commit, files in commits}
        self._hasher = GitBlobHasher("sha1")
        self.listed: list[str] = []

    def object_format(self) -> str:
        return "sha1"

    def iter_history(self, rev_args: Sequence[str] = ()) -> Iterator[str]:
        yield from self._order

    def resolve_commit(self, commit: str) -> str:
        if commit not in self._trees:
            raise HistoryAccessError(f"Unknown commit: {commit}", commit=commit)
        return commit

    def list_tree(self, commit: str) -> list[TreeEntry]:
        if commit not in self._trees:
            raise HistoryAccessError(f"Unknown commit: {commit}", commit=commit)
        self.listed.append(commit)
        return [
            TreeEntry(path=path, mode="100644", object_id=self._hasher.digest_bytes(data))
            for path, data in sorted(self._trees[commit].items())
        ]

    def read_blob(self, commit: str, path: str) -> bytes:
        return self._trees[commit][path]


def write_tarball(path: Path, files: dict[str, bytes], prefix: str = "pkg-1.0") -> Path:
    """Write a gzip tarball whose members sit under one leading directory."""
    with tarfile.open(path, mode="w:gz") as bundle:
        for name, data in sorted(files.items()):
            info = tarfile.TarInfo(name=f"{prefix}/{name}" if prefix else name)
            info.size = len(data)
            bundle.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture
def make_tarball(tmp_path: Path):
    def _make(files: dict[str, bytes], prefix: str = "pkg-1.0", name: str = "pkg.tar.gz") -> Path:
        return write_tarball(tmp_path / name, files, prefix=prefix)

    return _make
