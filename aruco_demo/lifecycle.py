"""Process lifecycle: shutdown signals, terminal raw mode and input routing."""

from __future__ import annotations

import os
import select
import signal
import sys
from typing import Any, Optional

try:
    import termios
except ImportError:  # pragma: no cover - Windows has no termios
    termios = None

from .keys import EXIT_CODES, KeyEvent, Printable, SignalRaised, decode_key, is_exit_event


def _shutdown_signals() -> list[int]:
    names = ("SIGINT", "SIGTERM", "SIGHUP")
    return [getattr(signal, n) for n in names if hasattr(signal, n)]


class ProcessLifecycle:
    """Owns the "shutdown signal received" flag for one tool run.

    Use as a context manager: handlers are installed on entry and the
    previous handlers are put back on exit.
    """

    def __init__(self):
        self.signal_received: Optional[int] = None
        self._previous: dict[int, Any] = {}

    def _handle_signal(self, signum, _frame) -> None:
        self.signal_received = signum

    @property
    def exit_requested(self) -> bool:
        return self.signal_received is not None

    def install(self) -> None:
        for signum in _shutdown_signals():
            self._previous[signum] = signal.signal(signum, self._handle_signal)

    def restore(self) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def __enter__(self) -> "ProcessLifecycle":
        self.install()
        return self

    def __exit__(self, *_exc) -> None:
        self.restore()


class RawTerminal:
    """Unbuffered, no-echo stdin for the lifetime of a ``with`` block.

    Only the tty attributes change; the fd status flags stay as they are
    (stdin shares its file description with stdout/stderr), so bytes are
    polled with ``select``. IXON is cleared so Ctrl-Q arrives as a byte.

    Inactive (reads nothing) when the stream is not a TTY or the platform
    has no termios.
    """

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdin
        self.active = False
        self._fd: Optional[int] = None
        self._saved_attrs = None

    def _is_tty(self) -> bool:
        try:
            return bool(self.stream.isatty())
        except (AttributeError, ValueError):
            return False

    def enable(self) -> None:
        if self.active or termios is None or not self._is_tty():
            return
        fd = self.stream.fileno()
        self._saved_attrs = termios.tcgetattr(fd)
        attrs = termios.tcgetattr(fd)
        attrs[0] &= ~termios.IXON
        attrs[3] &= ~(termios.ICANON | termios.ECHO)
        attrs[6][termios.VMIN] = 0
        attrs[6][termios.VTIME] = 0
        termios.tcsetattr(fd, termios.TCSANOW, attrs)
        self._fd = fd
        self.active = True

    def restore(self) -> None:
        if not self.active:
            return
        termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
        self.active = False
        self._fd = None

    def read_byte(self) -> Optional[int]:
        if not self.active:
            return None
        try:
            ready, _, _ = select.select([self._fd], [], [], 0)
            if not ready:
                return None
            data = os.read(self._fd, 1)
        except InterruptedError:
            return None
        if not data:
            return None
        return data[0]

    def __enter__(self) -> "RawTerminal":
        self.enable()
        return self

    def __exit__(self, *_exc) -> None:
        self.restore()


class InputRouter:
    """Merge window keys, terminal bytes and signals into key events."""

    def __init__(
        self,
        lifecycle: ProcessLifecycle,
        terminal: Optional[RawTerminal] = None,
        exit_codes=EXIT_CODES,
    ):
        self.lifecycle = lifecycle
        self.terminal = terminal
        self.exit_codes = exit_codes

    def poll(self, window_key: int) -> list[KeyEvent]:
        events: list[KeyEvent] = []
        if self.lifecycle.signal_received is not None:
            events.append(SignalRaised(self.lifecycle.signal_received))
        event = decode_key(window_key)
        if event is not None:
            events.append(event)
        if self.terminal is not None:
            byte = self.terminal.read_byte()
            if byte is not None:
                events.append(Printable(byte))
        return events

    def exit_requested(self, events: list[KeyEvent]) -> bool:
        return any(is_exit_event(e, self.exit_codes) for e in events)
