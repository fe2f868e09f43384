"""Key events produced by the window, the terminal and OS signals.

``cv2.waitKeyEx`` returns plain ASCII for printable keys and large
platform-specific codes for arrows and other special keys. Extended codes
are kept whole: masking Left (0xFF51) to eight bits yields ``Q``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

ESC = 27
CTRL_C = 3
CTRL_D = 4
CTRL_Q = 17
CTRL_X = 24

# X11/GTK codes first, Windows codes second.
KEY_LEFT = frozenset({65361, 2424832})
KEY_UP = frozenset({65362, 2490368})
KEY_RIGHT = frozenset({65363, 2555904})
KEY_DOWN = frozenset({65364, 2621440})

EXIT_CODES = frozenset(
    {ESC, ord("q"), ord("Q"), ord("x"), ord("X"), ord("c"), ord("C"),
     CTRL_C, CTRL_D, CTRL_Q, CTRL_X}
)


@dataclass(frozen=True)
class Printable:
    code: int

    @property
    def char(self) -> str:
        return chr(self.code)


@dataclass(frozen=True)
class Extended:
    code: int


@dataclass(frozen=True)
class SignalRaised:
    signum: int


KeyEvent = Union[Printable, Extended, SignalRaised]


def decode_key(code: int) -> Optional[KeyEvent]:
    """Turn a ``waitKeyEx`` result into an event; -1 (no key) gives None."""
    if code is None or code < 0:
        return None
    if code <= 255:
        return Printable(code)
    return Extended(code)


def is_exit_event(event: Optional[KeyEvent], exit_codes=EXIT_CODES) -> bool:
    if isinstance(event, SignalRaised):
        return True
    if isinstance(event, Printable):
        return event.code in exit_codes
    return False


def is_char(event: Optional[KeyEvent], *chars: str) -> bool:
    return isinstance(event, Printable) and event.char in chars


def is_extended(event: Optional[KeyEvent], codes: frozenset) -> bool:
    return isinstance(event, Extended) and event.code in codes
