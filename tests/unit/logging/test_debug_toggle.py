from __future__ import annotations

import io
import os
import signal

import pytest

from treematch.logging import DebugChannel, configure_debug, get_debug_channel
from treematch.logging.debug import install_toggle_handler


def test_messages_below_level_are_dropped() -> None:
    stream = io.StringIO()
    channel = DebugChannel(level=1, stream=stream)

    channel.emit("step one")
    channel.emit("file detail", level=2)

    assert stream.getvalue() == "debug: step one\n"


def test_toggle_restores_previous_level() -> None:
    channel = DebugChannel(level=3)

    assert channel.toggle() == 0
    assert not channel.enabled()
    assert channel.toggle() == 3
    assert channel.enabled(3)


def test_toggle_from_silent_defaults_to_level_one() -> None:
    channel = DebugChannel()

    assert channel.toggle() == 1


def test_configure_debug_replaces_process_channel() -> None:
    channel = configure_debug(2)
    try:
        assert get_debug_channel() is channel
        assert channel.level == 2
    finally:
        configure_debug(0)


@pytest.mark.skipif(not hasattr(signal, "SIGUSR1"), reason="SIGUSR1 is unavailable")
def test_sigusr1_flips_verbosity() -> None:
    channel = DebugChannel(level=0)
    previous = signal.getsignal(signal.SIGUSR1)
    try:
        assert install_toggle_handler(channel) is True
        os.kill(os.getpid(), signal.SIGUSR1)
        assert channel.level == 1
        os.kill(os.getpid(), signal.SIGUSR1)
        assert channel.level == 0
    finally:
        signal.signal(signal.SIGUSR1, previous)
