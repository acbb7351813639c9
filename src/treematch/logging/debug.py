"""Process-wide debug channel with a signal-driven verbosity toggle."""

from __future__ import annotations

import signal
import sys
from typing import TextIO

TOGGLE_SIGNAL_NAME = "SIGUSR1"


class DebugChannel:
    """Leveled diagnostics written to stderr.

    The level is read only when a message is emitted, so a toggle arriving
    between steps never splits a line already being written.
    """

    def __init__(self, level: int = 0, stream: TextIO | None = None) -> None:
        self._level = max(level, 0)
        self._restore_level = self._level or 1
        self._stream = stream

    @property
    def level(self) -> int:
        return self._level

    def set_level(self, level: int) -> None:
        self._level = max(level, 0)
        if self._level:
            self._restore_level = self._level

    def enabled(self, level: int = 1) -> bool:
        return self._level >= level

    def emit(self, message: str, level: int = 1) -> None:
        if self._level < level:
            return
        stream = self._stream or sys.stderr
        stream.write(f"debug: {message}\n")
        stream.flush()

    def toggle(self) -> int:
        """Flip between silent and the last non-zero level; return the new level."""
        if self._level:
            self._restore_level = self._level
            self._level = 0
        else:
            self._level = self._restore_level
        return self._level


_channel = DebugChannel()


def get_debug_channel() -> DebugChannel:
    """Return the process-wide debug channel."""
    return _channel


def configure_debug(level: int, stream: TextIO | None = None) -> DebugChannel:
    """Reset the process-wide channel at startup."""
    global _channel
    _channel = DebugChannel(level=level, stream=stream)
    return _channel


def install_toggle_handler(channel: DebugChannel | None = None) -> bool:
    """Bind SIGUSR1 to the channel toggle where the platform provides it."""
    signum = getattr(signal, TOGGLE_SIGNAL_NAME, None)
    if signum is None:
        return False
    target = channel or get_debug_channel()

    def _handle(_signum: int, _frame: object) -> None:
        target.toggle()

    signal.signal(signum, _handle)
    return True
