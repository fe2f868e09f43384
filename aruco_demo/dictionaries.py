"""Predefined ArUco dictionaries known to the demo tools."""

from __future__ import annotations

from dataclasses import dataclass

import cv2


@dataclass(frozen=True)
class DictInfo:
    name: str  # cv2.aruco attribute name, e.g. "DICT_6X6_50"
    capacity: int  # number of markers in the dictionary

    @property
    def code(self) -> int:
        return getattr(cv2.aruco, self.name)


DICTIONARIES: tuple[DictInfo, ...] = (
    DictInfo("DICT_4X4_50", 50),
    DictInfo("DICT_4X4_100", 100),
    DictInfo("DICT_4X4_250", 250),
    DictInfo("DICT_4X4_1000", 1000),
    DictInfo("DICT_5X5_50", 50),
    DictInfo("DICT_5X5_100", 100),
    DictInfo("DICT_5X5_250", 250),
    DictInfo("DICT_5X5_1000", 1000),
    DictInfo("DICT_6X6_50", 50),
    DictInfo("DICT_6X6_100", 100),
    DictInfo("DICT_6X6_250", 250),
    DictInfo("DICT_6X6_1000", 1000),
    DictInfo("DICT_7X7_50", 50),
    DictInfo("DICT_7X7_100", 100),
    DictInfo("DICT_7X7_250", 250),
    DictInfo("DICT_7X7_1000", 1000),
    DictInfo("DICT_ARUCO_ORIGINAL", 1024),
)

DEFAULT_DICT_INDEX = 8  # DICT_6X6_50

# Searched when the detect tool is not in "all dictionaries" mode.
FAST_SUBSET: tuple[str, ...] = (
    "DICT_4X4_50",
    "DICT_5X5_50",
    "DICT_6X6_50",
    "DICT_ARUCO_ORIGINAL",
)


def clamp_index(index: int) -> int:
    return max(0, min(len(DICTIONARIES) - 1, int(index)))


def dict_info(index: int) -> DictInfo:
    return DICTIONARIES[clamp_index(index)]


def normalize_name(name: str) -> str:
    """Accept "6x6_50", "DICT_6X6_50" or "aruco_original" style names."""
    key = (name or "").strip().upper()
    if not key.startswith("DICT_"):
        key = "DICT_" + key
    return key


def find_dict(name: str) -> DictInfo:
    key = normalize_name(name)
    for info in DICTIONARIES:
        if info.name == key:
            return info
    raise ValueError(f"Unknown ArUco dictionary: {name}")


def get_dict(info: DictInfo):
    """Build the cv2.aruco dictionary object across OpenCV versions."""
    if hasattr(cv2.aruco, "getPredefinedDictionary"):           # OpenCV >= 4.7
        return cv2.aruco.getPredefinedDictionary(info.code)
    return cv2.aruco.Dictionary_get(info.code)                   # Older OpenCV
