"""Sandboxing and path safety primitives."""

from .paths import (
    PathBlockedError,
    resolve_scratch_path,
    split_member_name,
    strip_leading_components,
)

__all__ = [
    "PathBlockedError",
    "resolve_scratch_path",
    "split_member_name",
    "strip_leading_components",
]
