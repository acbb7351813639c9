"""Digest index building package."""

from .builder import build_archive_index, build_commit_index
from .hashing import SUPPORTED_OBJECT_FORMATS, ContentHasher, GitBlobHasher
from .models import NO_IGNORE, DigestIndex, IgnoreRule, TreeEntry

__all__ = [
    "ContentHasher",
    "DigestIndex",
    "GitBlobHasher",
    "IgnoreRule",
    "NO_IGNORE",
    "SUPPORTED_OBJECT_FORMATS",
    "TreeEntry",
    "build_archive_index",
    "build_commit_index",
]
