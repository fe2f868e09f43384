from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

import cv2
import numpy as np

from .dictionaries import DICTIONARIES, FAST_SUBSET, DictInfo, find_dict, get_dict

DUPLICATE_RADIUS_PX = 4.0


class MarkerStatus(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"  # decoded, but filtered out by target_ids
    CANDIDATE = "candidate"  # square found, no id decoded


@dataclass
class Detection:
    marker_id: Optional[int]
    corners: np.ndarray  # (4, 2) float32, full-resolution pixels
    dictionary: str
    status: MarkerStatus

    @property
    def centroid(self) -> np.ndarray:
        return self.corners.mean(axis=0)


def _make_params():
    """Create detector parameters across OpenCV versions."""
    if hasattr(cv2.aruco, "DetectorParameters_create"):
        return cv2.aruco.DetectorParameters_create()
    return cv2.aruco.DetectorParameters()


class _DictDetector:
    def __init__(self, info: DictInfo):
        self.info = info
        self.dictionary = get_dict(info)
        self.params = _make_params()
        self._detector = None
        # Prefer the newer ArucoDetector API if present
        if hasattr(cv2.aruco, "ArucoDetector"):
            self._detector = cv2.aruco.ArucoDetector(self.dictionary, self.params)

    def detect(self, image) -> tuple[Any, Any, Any]:
        if self._detector is not None:
            return self._detector.detectMarkers(image)
        return cv2.aruco.detectMarkers(image, self.dictionary, parameters=self.params)


class MarkerDetector:
    """Runs cv2.aruco detection over one or several dictionaries.

    The primary dictionary is always searched first. In multi-dictionary
    modes a marker already found near the same centroid is not reported
    again, since e.g. the first 50 codes of DICT_6X6_100 are DICT_6X6_50.
    """

    def __init__(
        self,
        primary: str = "DICT_6X6_50",
        target_ids: Optional[Iterable[int]] = None,
        detect_all: bool = False,
        single_dict: bool = False,
        downscale: float = 1.0,
        keep_candidates: bool = False,
    ):
        self.primary = find_dict(primary)
        self.target_ids = None if target_ids is None else {int(t) for t in target_ids}
        self.detect_all = detect_all
        self.single_dict = single_dict
        self.downscale = float(downscale)
        self.keep_candidates = keep_candidates
        self._cache: dict[str, _DictDetector] = {}

    def active_dictionaries(self) -> list[DictInfo]:
        if self.single_dict:
            return [self.primary]
        if self.detect_all:
            pool = list(DICTIONARIES)
        else:
            pool = [find_dict(n) for n in FAST_SUBSET]
        return [self.primary] + [d for d in pool if d.name != self.primary.name]

    def mode_label(self) -> str:
        if self.single_dict:
            return f"single:{self.primary.name}"
        return "all" if self.detect_all else "fast"

    def _detector_for(self, info: DictInfo) -> _DictDetector:
        det = self._cache.get(info.name)
        if det is None:
            det = _DictDetector(info)
            self._cache[info.name] = det
        return det

    def _status_for(self, marker_id: int) -> MarkerStatus:
        if self.target_ids is not None and marker_id not in self.target_ids:
            return MarkerStatus.REJECTED
        return MarkerStatus.ACCEPTED

    def _prepare(self, image):
        gray = image
        if image.ndim == 3:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        if self.downscale < 1.0:
            gray = cv2.resize(
                gray, None, fx=self.downscale, fy=self.downscale,
                interpolation=cv2.INTER_AREA,
            )
        return gray

    def _to_full_res(self, corners) -> np.ndarray:
        pts = np.asarray(corners, dtype=np.float32).reshape(4, 2)
        if self.downscale < 1.0:
            pts = pts / self.downscale
        return pts

    @staticmethod
    def _is_duplicate(pts: np.ndarray, found: list[Detection]) -> bool:
        c = pts.mean(axis=0)
        return any(
            np.linalg.norm(d.centroid - c) <= DUPLICATE_RADIUS_PX for d in found
        )

    def detect(self, image) -> list[Detection]:
        gray = self._prepare(image)
        found: list[Detection] = []
        candidates: list[Detection] = []

        for info in self.active_dictionaries():
            corners, ids, rejected = self._detector_for(info).detect(gray)
            if ids is not None and len(ids) > 0:
                for i, mid in enumerate(ids.flatten()):
                    pts = self._to_full_res(corners[i])
                    if self._is_duplicate(pts, found):
                        continue
                    found.append(
                        Detection(int(mid), pts, info.name, self._status_for(int(mid)))
                    )
            if self.keep_candidates and info is self.primary and rejected is not None:
                for quad in rejected:
                    pts = self._to_full_res(quad)
                    candidates.append(
                        Detection(None, pts, info.name, MarkerStatus.CANDIDATE)
                    )

        # A candidate for the primary dictionary may decode in another one.
        candidates = [c for c in candidates if not self._is_duplicate(c.corners, found)]
        return found + candidates
