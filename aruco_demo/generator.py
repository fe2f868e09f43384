"""Interactive ArUco marker generator.

The window shows the current marker with an info panel below it. Hotkeys
change the dictionary, id, pixel size and border width; ``s`` writes the
padded marker image as PNG.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from .dictionaries import DEFAULT_DICT_INDEX, DICTIONARIES, clamp_index, dict_info, get_dict
from .keys import ESC, KEY_DOWN, KEY_LEFT, KEY_RIGHT, KEY_UP, KeyEvent, is_char, is_extended
from .lifecycle import InputRouter, ProcessLifecycle
from .overlay import FONT, put_outlined_text

MIN_SIZE = 50
MAX_SIZE = 4096
SIZE_STEP = 50
MIN_BORDER = 0
MAX_BORDER = 7

LINE_HEIGHT = 20
BASE_LINES = 6  # title, dict, id, size, border, save
HELP_LINES = 4  # half-line gap + three help lines

GENERATOR_EXIT_CODES = frozenset({ESC, ord("q"), ord("Q")})


class MarkerSaveError(OSError):
    pass


class Action(Enum):
    NONE = "none"
    REDRAW = "redraw"
    SAVE = "save"
    QUIT = "quit"


@dataclass
class GeneratorState:
    dict_index: int = DEFAULT_DICT_INDEX
    marker_id: int = 0
    marker_size: int = 300
    border_bits: int = 1
    output_path: Optional[str] = None
    show_help: bool = True

    @property
    def dict_name(self) -> str:
        return dict_info(self.dict_index).name

    @property
    def capacity(self) -> int:
        return max(1, dict_info(self.dict_index).capacity)

    def clamp(self) -> "GeneratorState":
        self.dict_index = clamp_index(self.dict_index)
        self.marker_id = max(0, min(self.capacity - 1, self.marker_id))
        self.marker_size = max(MIN_SIZE, min(MAX_SIZE, self.marker_size))
        self.border_bits = max(MIN_BORDER, min(MAX_BORDER, self.border_bits))
        return self

    # transitions

    def prev_dictionary(self) -> None:
        self.dict_index = (self.dict_index - 1) % len(DICTIONARIES)
        self.marker_id = max(0, min(self.marker_id, self.capacity - 1))

    def next_dictionary(self) -> None:
        self.dict_index = (self.dict_index + 1) % len(DICTIONARIES)
        self.marker_id = max(0, min(self.marker_id, self.capacity - 1))

    def prev_id(self) -> None:
        self.marker_id -= 1
        if self.marker_id < 0:
            self.marker_id = self.capacity - 1

    def next_id(self) -> None:
        self.marker_id = (self.marker_id + 1) % self.capacity

    def grow(self) -> None:
        self.marker_size = min(MAX_SIZE, self.marker_size + SIZE_STEP)

    def shrink(self) -> None:
        self.marker_size = max(MIN_SIZE, self.marker_size - SIZE_STEP)

    def thinner_border(self) -> None:
        self.border_bits = max(MIN_BORDER, self.border_bits - 1)

    def thicker_border(self) -> None:
        self.border_bits = min(MAX_BORDER, self.border_bits + 1)

    def randomize_id(self, rng: random.Random) -> None:
        self.marker_id = rng.randrange(self.capacity)

    def toggle_help(self) -> None:
        self.show_help = not self.show_help


def handle_key(state: GeneratorState, event: Optional[KeyEvent], rng: random.Random) -> Action:
    """Apply one hotkey to ``state`` and say what the window should do next."""
    if event is None:
        return Action.NONE
    if is_char(event, "\x1b", "q", "Q"):
        return Action.QUIT
    if is_char(event, "h", "H"):
        state.toggle_help()
    elif is_char(event, "d"):
        state.prev_dictionary()
    elif is_char(event, "D"):
        state.next_dictionary()
    elif is_extended(event, KEY_LEFT) or is_char(event, ","):
        state.prev_id()
    elif is_extended(event, KEY_RIGHT) or is_char(event, "."):
        state.next_id()
    elif is_extended(event, KEY_UP):
        state.grow()
    elif is_extended(event, KEY_DOWN):
        state.shrink()
    elif is_char(event, "["):
        state.thinner_border()
    elif is_char(event, "]"):
        state.thicker_border()
    elif is_char(event, "r", "R"):
        state.randomize_id(rng)
    elif is_char(event, "s", "S"):
        return Action.SAVE
    else:
        return Action.NONE
    return Action.REDRAW


def _generate_marker(dictionary, marker_id: int, size: int, border_bits: int) -> np.ndarray:
    if hasattr(cv2.aruco, "generateImageMarker"):                # OpenCV >= 4.7
        return cv2.aruco.generateImageMarker(dictionary, marker_id, size, borderBits=border_bits)
    return cv2.aruco.drawMarker(dictionary, marker_id, size, borderBits=border_bits)


def render_marker(state: GeneratorState) -> np.ndarray:
    """Grayscale marker centred on a white margin of ``max(30, size // 5)``."""
    s = GeneratorState(**vars(state)).clamp()
    marker = _generate_marker(get_dict(dict_info(s.dict_index)), s.marker_id, s.marker_size, s.border_bits)
    margin = max(30, s.marker_size // 5)
    return cv2.copyMakeBorder(
        marker, margin, margin, margin, margin, cv2.BORDER_CONSTANT, value=255
    )


def auto_file_name(state: GeneratorState) -> str:
    s = GeneratorState(**vars(state)).clamp()
    return f"marker_{s.dict_name}_id{s.marker_id}_{s.marker_size}px_bb{s.border_bits}.png"


def output_path_for(state: GeneratorState) -> Path:
    if state.output_path:
        return Path(state.output_path)
    return Path(auto_file_name(state))


def save_marker(state: GeneratorState) -> Path:
    path = output_path_for(state)
    img = render_marker(state)
    try:
        ok = cv2.imwrite(str(path), img)
    except cv2.error as exc:
        raise MarkerSaveError(f"Could not write {path}: {exc}") from exc
    if not ok:
        raise MarkerSaveError(f"Could not write {path}")
    return path


def info_panel_height(state: GeneratorState) -> int:
    lines = BASE_LINES + (HELP_LINES if state.show_help else 0)
    return 10 + lines * LINE_HEIGHT + 10


def draw_info(canvas, state: GeneratorState, y_start: int) -> None:
    s = GeneratorState(**vars(state)).clamp()
    y = y_start + 20

    def put(text: str, color=(0, 255, 0)) -> None:
        nonlocal y
        put_outlined_text(canvas, text, (10, y), color)
        y += LINE_HEIGHT

    put("ArUco Marker Generator (GUI)", (255, 255, 255))
    put(f"Dict: {s.dict_name}  (d/D prev/next)")
    put(f"ID: {s.marker_id} / {s.capacity - 1}  (Left/Right; r=random)")
    put(f"Size: {s.marker_size} px  (Up/Down)")
    put(f"Border: {s.border_bits}  ([/])")
    if s.output_path:
        put(f"Save: s -> {s.output_path}")
    else:
        put("Save: s -> auto name in CWD")

    if s.show_help:
        y += LINE_HEIGHT // 2
        grey = (200, 200, 200)
        put("Keys: Left/Right ID  | Up/Down Size  | [/ ] Border", grey)
        put("      d/D Prev/Next Dict | r Random ID | s Save PNG", grey)
        put("      h Toggle Help | q/ESC Quit", grey)


def compose_canvas(
    state: GeneratorState,
    message: Optional[str] = None,
    message_color=(0, 255, 255),
) -> np.ndarray:
    marker = cv2.cvtColor(render_marker(state), cv2.COLOR_GRAY2BGR)
    h, w = marker.shape[:2]
    canvas = np.full((h + info_panel_height(state), w, 3), 255, dtype=np.uint8)
    canvas[:h, :w] = marker
    draw_info(canvas, state, h)
    if message:
        org = (10, canvas.shape[0] - 10)
        cv2.putText(canvas, message, org, FONT, 0.6, (0, 0, 0), 3, cv2.LINE_AA)
        cv2.putText(canvas, message, org, FONT, 0.6, message_color, 2, cv2.LINE_AA)
    return canvas


class MarkerGeneratorApp:
    POLL_MS = 100

    def __init__(
        self,
        state: GeneratorState,
        window_name: str = "ArUco Marker",
        logger: Optional[logging.Logger] = None,
        rng: Optional[random.Random] = None,
    ):
        self.state = state.clamp()
        self.window_name = window_name
        self.logger = logger or logging.getLogger("aruco_demo.generator")
        self.rng = rng or random.Random()

    def _save(self) -> np.ndarray:
        try:
            path = save_marker(self.state)
        except MarkerSaveError as exc:
            self.logger.error("save failed: %s", exc)
            return compose_canvas(self.state, f"Save failed: {exc}", (0, 0, 255))
        self.logger.info("saved %s", path)
        return compose_canvas(self.state, f"Saved: {path}")

    def run(self) -> int:
        cv2.namedWindow(self.window_name, cv2.WINDOW_AUTOSIZE)
        need_redraw = True
        try:
            with ProcessLifecycle() as lifecycle:
                router = InputRouter(lifecycle, exit_codes=GENERATOR_EXIT_CODES)
                while True:
                    if need_redraw:
                        cv2.imshow(self.window_name, compose_canvas(self.state))
                        need_redraw = False

                    events = router.poll(cv2.waitKeyEx(self.POLL_MS))
                    if router.exit_requested(events):
                        break
                    for event in events:
                        action = handle_key(self.state, event, self.rng)
                        if action is Action.REDRAW:
                            self.logger.debug("state: %s", self.state)
                            need_redraw = True
                        elif action is Action.SAVE:
                            cv2.imshow(self.window_name, self._save())
        finally:
            cv2.destroyAllWindows()
        return 0
