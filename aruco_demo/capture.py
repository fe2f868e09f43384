"""Frame sources for the detection tool."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import cv2
import numpy as np

AUTO_DEVICES = (0, 1)


class CameraOpenError(RuntimeError):
    def __init__(self, devices: Iterable[int]):
        self.devices = tuple(devices)
        names = ", ".join(str(d) for d in self.devices)
        super().__init__(f"Failed to open camera (tried: {names})")


@dataclass
class DeviceInfo:
    index: int
    width: int
    height: int
    backend: str


def _open_capture(index: int) -> Any:
    if sys.platform.startswith("linux"):
        return cv2.VideoCapture(index, cv2.CAP_V4L2)
    return cv2.VideoCapture(index)


class FrameSource(ABC):
    """A sequence of BGR frames."""

    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def read(self) -> tuple[np.ndarray, int] | None:
        """Return ``(frame_bgr, frame_id)`` or None at end of stream."""
        ...

    @abstractmethod
    def stop(self) -> None: ...


class DeviceCameraSource(FrameSource):
    """Camera opened through cv2.VideoCapture.

    With ``device=None`` the auto candidates are tried in order and the
    first one that opens wins.
    """

    def __init__(self, device: Optional[int], width: int, height: int):
        self.device = device
        self.width = width
        self.height = height
        self.cap: Any = None
        self.opened_index: Optional[int] = None
        self.frame_id = 0

    def candidates(self) -> tuple[int, ...]:
        if self.device is None:
            return AUTO_DEVICES
        return (int(self.device),)

    def start(self) -> None:
        for index in self.candidates():
            cap = _open_capture(index)
            if cap.isOpened():
                cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
                cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
                self.cap = cap
                self.opened_index = index
                self.frame_id = 0
                return
            cap.release()
        raise CameraOpenError(self.candidates())

    def read(self) -> tuple[np.ndarray, int] | None:
        if self.cap is None:
            return None
        ok, img = self.cap.read()
        if not ok or img is None or img.size == 0:
            return None
        self.frame_id += 1
        return (img, self.frame_id)

    def stop(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None


def scan_devices(indices: Iterable[int] = AUTO_DEVICES) -> list[DeviceInfo]:
    """Open each index briefly and report the ones that respond."""
    found: list[DeviceInfo] = []
    for index in indices:
        cap = _open_capture(index)
        try:
            if not cap.isOpened():
                continue
            width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
            height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
            backend = cap.getBackendName() if hasattr(cap, "getBackendName") else "?"
            found.append(DeviceInfo(index, width, height, backend))
        finally:
            cap.release()
    return found
