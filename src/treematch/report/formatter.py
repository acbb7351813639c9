"""Fixed-format text output for score records and per-file observations."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from treematch.config import OutputConfig
from treematch.logging import DebugChannel, get_debug_channel
from treematch.report.diff import DiffRenderer, DifflibRenderer, count_diff_lines
from treematch.scoring.models import Comparison, FileState, RunResult, ScoreRecord

ReadCommitBlob = Callable[[str, str], bytes]


def format_record(record: ScoreRecord) -> str:
    """Render `<commit> <score> (<nonmatching>/<compared> files differ)`."""
    return (
        f"{record.commit} {record.score:.7f} "
        f"({record.nonmatching}/{record.compared} files differ)"
    )


def format_diff_stat_line(path: str, diff_text: str) -> str:
    stat = count_diff_lines(diff_text)
    return f"  {path} -{stat.removed},+{stat.added}"


@dataclass(slots=True)
class _Block:
    record: ScoreRecord
    lines: list[str] = field(default_factory=list)


class Reporter:
    """Write score records as computed, or sorted by score once the run ends."""

    def __init__(
        self,
        output: OutputConfig,
        out_stream: TextIO,
        *,
        archive_root: Path | None = None,
        read_commit_blob: ReadCommitBlob | None = None,
        renderer: DiffRenderer | None = None,
        debug: DebugChannel | None = None,
    ) -> None:
        self._output = output
        self._out = out_stream
        self._archive_root = archive_root
        self._read_commit_blob = read_commit_blob
        self._renderer = renderer or DifflibRenderer()
        self._debug = debug
        self._deferred: list[_Block] = []

    def on_comparison(self, comparison: Comparison) -> None:
        """Selector callback: render one commit's record and observations."""
        block = self._render(comparison)
        if self._output.sort:
            self._deferred.append(block)
            return
        self._write_block(block)

    def finish(self, result: RunResult) -> None:
        """Flush deferred records ascending by score, then the run summary."""
        if self._output.sort:
            for block in sorted(self._deferred, key=lambda item: item.record.score):
                self._write_block(block)
            self._deferred.clear()
        if result.best is None:
            return
        if result.matched:
            self._write(f"match: {result.best.commit}")
            return
        self._write(f"closest: {format_record(result.best)}")

    def _render(self, comparison: Comparison) -> _Block:
        record = comparison.record
        block = _Block(record=record, lines=[format_record(record)])
        debug = self._debug or get_debug_channel()
        for item in comparison.files:
            if item.state is FileState.NOT_IN_ARCHIVE:
                debug.emit(f"not in tar: {item.path}", level=2)
                continue
            if item.state is FileState.SAME:
                if self._output.show_match:
                    block.lines.append(f"  same {item.path}")
                continue
            if self._output.show_no_match:
                block.lines.append(f"  differ {item.path}")
            if self._output.diff != "none" and record.commit is not None:
                block.lines.extend(self._render_diff(record.commit, item.path))
        return block

    def _render_diff(self, commit: str, path: str) -> list[str]:
        if self._archive_root is None or self._read_commit_blob is None:
            raise ValueError("Diff output needs an archive root and a commit blob reader.")
        old = self._read_commit_blob(commit, path)
        new = (self._archive_root / path).read_bytes()
        diff_text = self._renderer.render(old, new, f"{commit}:{path}", f"archive:{path}")
        if self._output.diff == "line":
            return [format_diff_stat_line(path, diff_text)]
        return diff_text.split("\n") if diff_text else []

    def _write_block(self, block: _Block) -> None:
        for line in block.lines:
            self._write(line)

    def _write(self, line: str) -> None:
        self._out.write(f"{line}\n")
        self._out.flush()
