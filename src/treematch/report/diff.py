"""Unified diff rendering for files whose digests differ."""

from __future__ import annotations

import difflib
import subprocess
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

DIFF_HEADER_LINES = 2
NO_NEWLINE_MARKER = "\\ No newline at end of file"


class DiffRenderError(Exception):
    """Raised when the external diff program fails."""


@dataclass(slots=True, frozen=True)
class DiffStat:
    """Added/removed body line counts of one unified diff."""

    removed: int
    added: int


class DiffRenderer(Protocol):
    """Protocol implemented by unified diff producers."""

    def render(self, old: bytes, new: bytes, old_label: str, new_label: str) -> str:
        """Return unified diff text, empty when contents are equal."""


class DifflibRenderer:
    """Render diffs in-process with difflib, keeping line endings significant."""

    def __init__(self, context_lines: int = 3) -> None:
        self._context_lines = context_lines

    def render(self, old: bytes, new: bytes, old_label: str, new_label: str) -> str:
        lines = difflib.unified_diff(
            _split_lines(old),
            _split_lines(new),
            fromfile=old_label,
            tofile=new_label,
            n=self._context_lines,
            lineterm="",
        )
        output: list[str] = []
        for index, line in enumerate(lines):
            if index < DIFF_HEADER_LINES or line.startswith("@@"):
                output.append(line)
                continue
            if line.endswith("\n"):
                output.append(line[:-1])
                continue
            output.append(line)
            output.append(NO_NEWLINE_MARKER)
        return "\n".join(output)


class ExternalDiffRenderer:
    """Render diffs with the `diff -u` program and user-supplied options."""

    def __init__(self, options: Sequence[str] = (), diff_executable: str = "diff") -> None:
        self._options = tuple(options)
        self._diff_executable = diff_executable

    def render(self, old: bytes, new: bytes, old_label: str, new_label: str) -> str:
        with tempfile.TemporaryDirectory(prefix="treematch-diff-") as workdir:
            old_path = Path(workdir) / "old"
            new_path = Path(workdir) / "new"
            old_path.write_bytes(old)
            new_path.write_bytes(new)
            command = [
                self._diff_executable,
                "-u",
                *self._options,
                "--label",
                old_label,
                "--label",
                new_label,
                str(old_path),
                str(new_path),
            ]
            try:
                completed = subprocess.run(command, check=False, capture_output=True)
            except OSError as exc:
                raise DiffRenderError(f"Unable to run {self._diff_executable}: {exc}") from exc
        # diff exits 1 when inputs differ.
        if completed.returncode not in (0, 1):
            message = completed.stderr.decode("utf-8", errors="replace").strip()
            raise DiffRenderError(message or f"{self._diff_executable} failed")
        return _decode(completed.stdout).rstrip("\n")


def count_diff_lines(diff_text: str) -> DiffStat:
    """Count '+'/'-' body lines, skipping the two file header lines."""
    removed = 0
    added = 0
    for line in diff_text.split("\n")[DIFF_HEADER_LINES:]:
        if line.startswith("-"):
            removed += 1
        elif line.startswith("+"):
            added += 1
    return DiffStat(removed=removed, added=added)


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _split_lines(data: bytes) -> list[str]:
    """Split on LF only; each line keeps its terminator, CR included."""
    text = _decode(data)
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines
