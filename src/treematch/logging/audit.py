"""Structured JSONL audit log for matching runs."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from treematch.scoring.models import RunResult, ScoreRecord


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """One line of the run audit log."""

    timestamp: str
    run_id: str
    event: str
    commit: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    stamp = datetime.now(tz=UTC).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def build_run_id(archive: Path) -> str:
    """Return a run identifier derived from the archive name and start time."""
    stamp = datetime.now(tz=UTC).strftime("%Y%m%dT%H%M%S%fZ")
    return f"{archive.name}-{stamp}"


def record_metadata(record: ScoreRecord) -> dict[str, object]:
    return {
        "score": record.score,
        "compared": record.compared,
        "matching": record.matching,
        "nonmatching": record.nonmatching,
    }


class JsonlAuditLogger:
    """Append-only JSONL audit logger."""

    def __init__(self, path: Path, run_id: str) -> None:
        self._path = path
        self._run_id = run_id
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append one event as one JSON object per line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")

    def log(self, event: str, commit: str | None = None, **metadata: object) -> None:
        self.append(
            AuditEvent(
                timestamp=utc_timestamp(),
                run_id=self._run_id,
                event=event,
                commit=commit,
                metadata=dict(metadata),
            )
        )

    def log_record(self, record: ScoreRecord) -> None:
        self.log("score", commit=record.commit, **record_metadata(record))

    def log_result(self, result: RunResult) -> None:
        best = result.best
        self.log(
            "run_end",
            commit=best.commit if best is not None else None,
            reason=result.reason.value,
            evaluated=result.evaluated,
            best=record_metadata(best) if best is not None else None,
        )

    def log_fatal(self, message: str) -> None:
        """Close the run after an error that stopped it before a result."""
        self.log("run_end", reason="fatal", error=message)
