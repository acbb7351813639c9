"""Text reporting for matching runs."""

from .diff import (
    DiffRenderError,
    DiffRenderer,
    DiffStat,
    DifflibRenderer,
    ExternalDiffRenderer,
    count_diff_lines,
)
from .formatter import Reporter, format_diff_stat_line, format_record

__all__ = [
    "DiffRenderError",
    "DiffRenderer",
    "DiffStat",
    "DifflibRenderer",
    "ExternalDiffRenderer",
    "Reporter",
    "count_diff_lines",
    "format_diff_stat_line",
    "format_record",
]
