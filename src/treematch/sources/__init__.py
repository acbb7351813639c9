"""External collaborators: archives and repository history."""

from .archive import ArchiveExtractor, ExtractionError, ScratchDirectory, TarArchiveExtractor
from .history import enumerate_commits
from .repository import GitRepository, HistoryAccessError, RepositoryAccessor

__all__ = [
    "ArchiveExtractor",
    "ExtractionError",
    "GitRepository",
    "HistoryAccessError",
    "RepositoryAccessor",
    "ScratchDirectory",
    "TarArchiveExtractor",
    "enumerate_commits",
]
