"""Drawing helpers shared by the detect and generator tools.

All functions draw into the given BGR image in place and return it.
"""

from __future__ import annotations

from typing import Iterable

import cv2
import numpy as np

from .detect import Detection, MarkerStatus
from .stats import FpsStats

FONT = cv2.FONT_HERSHEY_SIMPLEX

STATUS_COLORS = {
    MarkerStatus.ACCEPTED: (0, 255, 0),
    MarkerStatus.REJECTED: (0, 64, 255),
    MarkerStatus.CANDIDATE: (160, 160, 160),
}

STATUS_ORIGIN = (10, 24)


def put_outlined_text(
    img,
    text: str,
    org: tuple[int, int],
    color=(0, 255, 0),
    scale: float = 0.5,
    thickness: int = 1,
):
    """Dark outline under a bright fill so text reads on any background."""
    cv2.putText(img, text, org, FONT, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(img, text, org, FONT, scale, color, thickness, cv2.LINE_AA)
    return img


def detection_label(det: Detection) -> str:
    if det.marker_id is None:
        return "?"
    return f"ID {det.marker_id} {det.dictionary.replace('DICT_', '')}"


def draw_detections(img, detections: Iterable[Detection]):
    for det in detections:
        color = STATUS_COLORS[det.status]
        pts = np.round(det.corners).astype(np.int32).reshape(-1, 1, 2)
        thickness = 1 if det.status is MarkerStatus.CANDIDATE else 2
        cv2.polylines(img, [pts], True, color, thickness, cv2.LINE_8)
        if det.status is not MarkerStatus.CANDIDATE:
            # first corner marks the marker's top-left
            cv2.circle(img, tuple(int(v) for v in pts[0, 0]), 3, color, -1)
        cx, cy = det.centroid
        put_outlined_text(img, detection_label(det), (int(cx) - 20, int(cy)), color)
    return img


def status_text(stats: FpsStats, count: int, mode: str, scale: float, stride: int) -> str:
    return (
        f"{stats.avg_ms:5.1f} ms  {stats.avg_fps:4.1f} fps  n={count}  "
        f"mode={mode} scale={scale:g} skip={stride}"
    )


def draw_status(img, text: str):
    return put_outlined_text(img, text, STATUS_ORIGIN, (255, 255, 255), 0.6, 1)
