"""Archive extraction into a run-scoped scratch directory."""

from __future__ import annotations

import atexit
import shutil
import tarfile
import tempfile
from pathlib import Path
from types import TracebackType
from typing import Protocol

from treematch.security import PathBlockedError, resolve_scratch_path, strip_leading_components

_COPY_CHUNK_BYTES = 1024 * 128


class ExtractionError(Exception):
    """Raised when an archive cannot be materialized into files."""

    def __init__(self, message: str, archive: Path | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.archive = archive


class ArchiveExtractor(Protocol):
    """Protocol implemented by archive unpackers."""

    def extract(self, archive: Path, destination: Path, strip_components: int) -> int:
        """Materialize regular files under destination; return the file count."""


class ScratchDirectory:
    """Temporary directory removed on close and, as a fallback, at exit."""

    def __init__(self, prefix: str = "treematch-") -> None:
        self._path = Path(tempfile.mkdtemp(prefix=prefix))
        self._closed = False
        atexit.register(self.close)

    @property
    def path(self) -> Path:
        return self._path

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        shutil.rmtree(self._path, ignore_errors=True)
        atexit.unregister(self.close)

    def __enter__(self) -> ScratchDirectory:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


class TarArchiveExtractor:
    """Extract tar archives (any compression tarfile detects) with tar-style stripping."""

    def extract(self, archive: Path, destination: Path, strip_components: int) -> int:
        if strip_components < 0:
            raise ValueError("strip_components must be >= 0")
        if not archive.is_file():
            raise ExtractionError(f"Archive not found: {archive}", archive=archive)
        written = 0
        try:
            with tarfile.open(archive, mode="r:*") as bundle:
                for member in bundle:
                    if not (member.isfile() or member.islnk()):
                        continue
                    stripped = strip_leading_components(member.name, strip_components)
                    if stripped is None:
                        continue
                    target = resolve_scratch_path(destination, stripped)
                    source = bundle.extractfile(member)
                    if source is None:
                        continue
                    target.parent.mkdir(parents=True, exist_ok=True)
                    with source, target.open("wb") as handle:
                        shutil.copyfileobj(source, handle, _COPY_CHUNK_BYTES)
                    written += 1
        except PathBlockedError as exc:
            raise ExtractionError(f"{exc.reason} {exc.hint}", archive=archive) from exc
        except (tarfile.TarError, EOFError, OSError) as exc:
            raise ExtractionError(f"Unable to extract {archive}: {exc}", archive=archive) from exc
        if written == 0:
            raise ExtractionError(f"Archive produced no files: {archive}", archive=archive)
        return written
