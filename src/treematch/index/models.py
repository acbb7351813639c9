"""Typed models for per-tree digest indices."""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType


@dataclass(slots=True, frozen=True)
class IgnoreRule:
    """Optional path filter shared by archive and commit indexing."""

    pattern: str | None = None
    _compiled: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.pattern is None:
            return
        try:
            compiled = re.compile(self.pattern)
        except re.error as exc:
            raise ValueError(f"Invalid ignore pattern {self.pattern!r}: {exc}") from exc
        object.__setattr__(self, "_compiled", compiled)

    def matches(self, relative_path: str) -> bool:
        """Return True when the path should be left out of indexing."""
        if self._compiled is None:
            return False
        return self._compiled.search(relative_path) is not None


NO_IGNORE = IgnoreRule()


@dataclass(slots=True, frozen=True)
class TreeEntry:
    """One regular file tracked at a commit."""

    path: str
    mode: str
    object_id: str


@dataclass(slots=True, frozen=True, eq=False)
class DigestIndex(Mapping[str, str]):
    """Immutable path -> digest mapping for one file tree snapshot."""

    source: str
    entries: Mapping[str, str]
    root: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __getitem__(self, path: str) -> str:
        return self.entries[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DigestIndex):
            return NotImplemented
        return dict(self.entries) == dict(other.entries)

    def sorted_paths(self) -> list[str]:
        """Return indexed paths in deterministic order."""
        return sorted(self.entries)
