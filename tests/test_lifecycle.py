import io
import os
import signal
import time

import pytest

from aruco_demo.keys import Extended, Printable, SignalRaised
from aruco_demo.lifecycle import InputRouter, ProcessLifecycle, RawTerminal


class ScriptedTerminal:
    def __init__(self, *data: int):
        self.data = list(data)

    def read_byte(self):
        return self.data.pop(0) if self.data else None


def test_lifecycle_records_signal_and_restores_handlers():
    before = signal.getsignal(signal.SIGTERM)
    with ProcessLifecycle() as lifecycle:
        handler = signal.getsignal(signal.SIGTERM)
        assert handler != before
        assert not lifecycle.exit_requested
        handler(signal.SIGTERM, None)
        assert lifecycle.exit_requested
        assert lifecycle.signal_received == signal.SIGTERM
    assert signal.getsignal(signal.SIGTERM) == before


def test_raw_terminal_is_inactive_without_tty():
    with RawTerminal(stream=io.StringIO()) as term:
        assert not term.active
        assert term.read_byte() is None


def _open_pty():
    termios = pytest.importorskip("termios")
    master, slave = os.openpty()
    stream = os.fdopen(slave, "rb", buffering=0)
    return termios, master, stream


def _read_with_retry(term, timeout=1.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        byte = term.read_byte()
        if byte is not None:
            return byte
        time.sleep(0.01)
    return None


def test_raw_terminal_reads_single_bytes_and_restores():
    termios, master, stream = _open_pty()
    try:
        fd = stream.fileno()
        saved = termios.tcgetattr(fd)
        with RawTerminal(stream=stream) as term:
            assert term.active
            lflag = termios.tcgetattr(fd)[3]
            assert not lflag & termios.ICANON
            assert not lflag & termios.ECHO
            assert term.read_byte() is None  # non-blocking

            os.write(master, b"q")
            assert _read_with_retry(term) == ord("q")
        assert termios.tcgetattr(fd)[3] == saved[3]
    finally:
        stream.close()
        os.close(master)


def test_raw_terminal_delivers_flow_control_bytes():
    """Ctrl-Q and Ctrl-X both arrive as bytes; IXON comes back on exit."""
    termios, master, stream = _open_pty()
    try:
        fd = stream.fileno()
        saved = termios.tcgetattr(fd)
        with RawTerminal(stream=stream) as term:
            assert not termios.tcgetattr(fd)[0] & termios.IXON
            os.write(master, b"\x11\x18")
            assert _read_with_retry(term) == 17
            assert _read_with_retry(term) == 24
        assert termios.tcgetattr(fd)[0] == saved[0]
    finally:
        stream.close()
        os.close(master)


def test_raw_terminal_leaves_fd_flags_untouched():
    fcntl = pytest.importorskip("fcntl")
    termios, master, stream = _open_pty()
    try:
        fd = stream.fileno()
        before = fcntl.fcntl(fd, fcntl.F_GETFL)
        with RawTerminal(stream=stream) as term:
            assert fcntl.fcntl(fd, fcntl.F_GETFL) == before
            assert not fcntl.fcntl(fd, fcntl.F_GETFL) & os.O_NONBLOCK
            assert term.read_byte() is None
        assert fcntl.fcntl(fd, fcntl.F_GETFL) == before
    finally:
        stream.close()
        os.close(master)


def test_raw_terminal_restores_on_exception():
    termios, master, stream = _open_pty()
    try:
        fd = stream.fileno()
        with pytest.raises(RuntimeError):
            with RawTerminal(stream=stream):
                raise RuntimeError("boom")
        assert termios.tcgetattr(fd)[3] & termios.ICANON
    finally:
        stream.close()
        os.close(master)


def test_router_merges_window_and_terminal_keys():
    router = InputRouter(ProcessLifecycle(), ScriptedTerminal(ord("x")))
    events = router.poll(65361)
    assert events == [Extended(65361), Printable(ord("x"))]
    assert router.exit_requested(events)


def test_router_arrow_alone_does_not_exit():
    router = InputRouter(ProcessLifecycle(), ScriptedTerminal())
    assert not router.exit_requested(router.poll(65361))
    assert not router.exit_requested(router.poll(2424832))


def test_router_reports_recorded_signal():
    lifecycle = ProcessLifecycle()
    lifecycle.signal_received = signal.SIGINT
    router = InputRouter(lifecycle)
    events = router.poll(-1)
    assert events == [SignalRaised(signal.SIGINT)]
    assert router.exit_requested(events)


def test_router_custom_exit_codes():
    router = InputRouter(ProcessLifecycle(), exit_codes=frozenset({ord("q")}))
    assert not router.exit_requested(router.poll(ord("x")))
    assert router.exit_requested(router.poll(ord("q")))
