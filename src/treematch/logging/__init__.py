"""Diagnostics and structured logging utilities."""

from .audit import AuditEvent, JsonlAuditLogger, build_run_id, record_metadata, utc_timestamp
from .debug import DebugChannel, configure_debug, get_debug_channel, install_toggle_handler

__all__ = [
    "AuditEvent",
    "DebugChannel",
    "JsonlAuditLogger",
    "build_run_id",
    "configure_debug",
    "get_debug_channel",
    "install_toggle_handler",
    "record_metadata",
    "utc_timestamp",
]
