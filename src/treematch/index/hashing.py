"""Content digests compatible with git object ids."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Protocol

SUPPORTED_OBJECT_FORMATS = ("sha1", "sha256")
_CHUNK_BYTES = 1024 * 128


class ContentHasher(Protocol):
    """Protocol implemented by content digest providers."""

    name: str

    def digest_bytes(self, data: bytes) -> str:
        """Return the hex digest for in-memory content."""

    def digest_file(self, path: Path) -> str:
        """Return the hex digest for on-disk content."""


class GitBlobHasher:
    """Hash file content the way `git hash-object` does."""

    def __init__(self, object_format: str = "sha1") -> None:
        if object_format not in SUPPORTED_OBJECT_FORMATS:
            raise ValueError(f"Unsupported object format: {object_format}")
        self.name = f"git-blob-{object_format}"
        self._object_format = object_format

    @property
    def object_format(self) -> str:
        return self._object_format

    def digest_bytes(self, data: bytes) -> str:
        digest = self._start(len(data))
        digest.update(data)
        return digest.hexdigest()

    def digest_file(self, path: Path) -> str:
        """Hash in chunked reads; the blob header needs the size up front."""
        size = path.stat().st_size
        digest = self._start(size)
        with path.open("rb") as handle:
            while True:
                chunk = handle.read(_CHUNK_BYTES)
                if not chunk:
                    break
                digest.update(chunk)
        return digest.hexdigest()

    def _start(self, size: int) -> hashlib._Hash:
        digest = hashlib.new(self._object_format)
        digest.update(b"blob %d\x00" % size)
        return digest
