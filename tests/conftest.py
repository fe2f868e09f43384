import cv2
import numpy as np
import pytest

MARKER_ID = 7
MARKER_TOP_LEFT = (220, 140)
MARKER_SIZE = 200


@pytest.fixture
def marker_frame():
    """640x480 BGR frame with DICT_6X6_50 id 7 on a white background."""
    dictionary = cv2.aruco.getPredefinedDictionary(cv2.aruco.DICT_6X6_50)
    marker = cv2.aruco.generateImageMarker(dictionary, MARKER_ID, MARKER_SIZE)
    gray = np.full((480, 640), 255, dtype=np.uint8)
    x, y = MARKER_TOP_LEFT
    gray[y:y + MARKER_SIZE, x:x + MARKER_SIZE] = marker
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


class FakeGui:
    """Records window calls and replays a scripted list of waitKeyEx codes."""

    def __init__(self):
        self.keys: list[int] = []
        self.shown = []
        self.windows = []
        self.destroyed = 0

    def named_window(self, name, flags=None):
        self.windows.append(name)

    def imshow(self, name, img):
        self.shown.append((name, img.copy()))

    def wait_key_ex(self, delay=0):
        if self.keys:
            return self.keys.pop(0)
        return -1

    def destroy_all(self):
        self.destroyed += 1


@pytest.fixture
def fake_gui(monkeypatch):
    gui = FakeGui()
    monkeypatch.setattr(cv2, "namedWindow", gui.named_window)
    monkeypatch.setattr(cv2, "imshow", gui.imshow)
    monkeypatch.setattr(cv2, "waitKeyEx", gui.wait_key_ex)
    monkeypatch.setattr(cv2, "destroyAllWindows", gui.destroy_all)
    return gui
