"""Repository access backed by the git command line."""

from __future__ import annotations

import subprocess
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Protocol

from treematch.index.hashing import SUPPORTED_OBJECT_FORMATS
from treematch.index.models import TreeEntry

REGULAR_FILE_MODES = frozenset({"100644", "100755"})


class HistoryAccessError(Exception):
    """Raised when history, tree, or blob lookup fails for a commit."""

    def __init__(self, message: str, commit: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.commit = commit


class RepositoryAccessor(Protocol):
    """Protocol implemented by commit history and tree providers."""

    def object_format(self) -> str:
        """Return the digest algorithm used for blob ids."""

    def iter_history(self, rev_args: Sequence[str] = ()) -> Iterator[str]:
        """Yield commit ids newest first."""

    def resolve_commit(self, commit: str) -> str:
        """Return the full id for a commit-ish, or raise HistoryAccessError."""

    def list_tree(self, commit: str) -> list[TreeEntry]:
        """Return regular-file entries tracked at a commit."""

    def read_blob(self, commit: str, path: str) -> bytes:
        """Return raw bytes of a path at a commit."""


class GitRepository:
    """RepositoryAccessor implementation that shells out to git."""

    def __init__(self, root: Path, git_executable: str = "git") -> None:
        self._root = root.resolve()
        self._git_executable = git_executable

    @property
    def root(self) -> Path:
        return self._root

    def object_format(self) -> str:
        try:
            value = self._git_text(["rev-parse", "--show-object-format"]).strip()
        except HistoryAccessError:
            return "sha1"
        if value not in SUPPORTED_OBJECT_FORMATS:
            return "sha1"
        return value

    def iter_history(self, rev_args: Sequence[str] = ()) -> Iterator[str]:
        """Stream `git log` ids so large histories are consumed lazily."""
        # A repository without commits has no history to stream from HEAD.
        if not rev_args and not self.has_head():
            return
        command = [self._git_executable, "log", "--format=%H", *rev_args]
        try:
            process = subprocess.Popen(
                command,
                cwd=self._root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as exc:
            raise HistoryAccessError(f"Unable to run git: {exc}") from exc
        assert process.stdout is not None
        finished = False
        try:
            for raw_line in process.stdout:
                commit = raw_line.strip()
                if commit:
                    yield commit
            finished = True
        finally:
            if not finished:
                process.terminate()
            process.stdout.close()
            stderr = process.stderr.read() if process.stderr is not None else ""
            if process.stderr is not None:
                process.stderr.close()
            returncode = process.wait()
        if returncode != 0:
            raise HistoryAccessError(stderr.strip() or "git log failed")

    def has_head(self) -> bool:
        """Return True once HEAD points at a commit.

        Outside a repository git reports an error, which is raised instead.
        """
        try:
            completed = subprocess.run(
                [self._git_executable, "rev-parse", "--verify", "-q", "HEAD"],
                cwd=self._root,
                check=False,
                capture_output=True,
            )
        except OSError as exc:
            raise HistoryAccessError(f"Unable to run git: {exc}") from exc
        if completed.returncode == 0:
            return True
        message = completed.stderr.decode("utf-8", errors="replace").strip()
        if message:
            raise HistoryAccessError(message)
        return False

    def resolve_commit(self, commit: str) -> str:
        try:
            output = self._git_text(
                ["rev-parse", "--verify", "--quiet", f"{commit}^{{commit}}"], commit=commit
            )
        except HistoryAccessError as exc:
            raise HistoryAccessError(f"Unknown commit: {commit}", commit=commit) from exc
        resolved = output.strip()
        if not resolved:
            raise HistoryAccessError(f"Unknown commit: {commit}", commit=commit)
        return resolved

    def list_tree(self, commit: str) -> list[TreeEntry]:
        """Parse `git ls-tree -r -z` output, keeping regular-file blobs only."""
        output = self._git_bytes(["ls-tree", "-r", "--full-tree", "-z", commit], commit=commit)
        entries: list[TreeEntry] = []
        for raw_record in output.split(b"\x00"):
            if not raw_record:
                continue
            header, separator, raw_path = raw_record.partition(b"\t")
            if not separator:
                raise HistoryAccessError(f"Malformed ls-tree record for {commit}", commit=commit)
            mode, object_type, object_id = header.decode("ascii").split(" ", 2)
            if object_type != "blob" or mode not in REGULAR_FILE_MODES:
                continue
            entries.append(
                TreeEntry(
                    path=raw_path.decode("utf-8", errors="surrogateescape"),
                    mode=mode,
                    object_id=object_id,
                )
            )
        return entries

    def read_blob(self, commit: str, path: str) -> bytes:
        return self._git_bytes(["cat-file", "blob", f"{commit}:{path}"], commit=commit)

    def _git_bytes(self, args: list[str], commit: str | None = None) -> bytes:
        try:
            completed = subprocess.run(
                [self._git_executable, *args],
                cwd=self._root,
                check=False,
                capture_output=True,
            )
        except OSError as exc:
            raise HistoryAccessError(f"Unable to run git: {exc}", commit=commit) from exc
        if completed.returncode != 0:
            message = completed.stderr.decode("utf-8", errors="replace").strip()
            raise HistoryAccessError(message or f"git {args[0]} failed", commit=commit)
        return completed.stdout

    def _git_text(self, args: list[str], commit: str | None = None) -> str:
        return self._git_bytes(args, commit=commit).decode("utf-8", errors="replace")
