"""Path resolution helpers for scratch-directory writes."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")


class PathBlockedError(Exception):
    """Raised when an archive member name would escape the scratch root."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def split_member_name(name: str) -> list[str]:
    """Split an archive member name into normalized POSIX segments."""
    normalized = name.replace("\\", "/")
    return [part for part in normalized.split("/") if part not in ("", ".")]


def strip_leading_components(name: str, count: int) -> str | None:
    """Drop `count` leading segments; None when nothing is left."""
    parts = split_member_name(name)
    if len(parts) <= count:
        return None
    return "/".join(parts[count:])


def resolve_scratch_path(scratch_root: Path, candidate: str) -> Path:
    """Resolve a member path under the scratch root with sandbox enforcement."""
    root = scratch_root.resolve()
    normalized = candidate.replace("\\", "/")

    if not normalized:
        raise PathBlockedError(
            reason="Member path is empty.",
            hint="Lower --strip-components so member names keep at least one segment.",
        )

    if normalized.startswith("/") or WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        raise PathBlockedError(
            reason=f"Absolute member path is blocked: {candidate}",
            hint="Repack the archive with relative member names.",
        )

    parts = split_member_name(normalized)
    if any(part == ".." for part in parts):
        raise PathBlockedError(
            reason=f"Member path traversal is blocked: {candidate}",
            hint="Remove '..' segments from archive member names.",
        )

    resolved = (root / Path(*parts)).resolve(strict=False)
    if not resolved.is_relative_to(root):
        raise PathBlockedError(
            reason=f"Member path escapes the scratch directory: {candidate}",
            hint="Check the archive for symlinked parent directories.",
        )
    return resolved
