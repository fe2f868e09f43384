"""Settings for both tools, readable from JSON or YAML files.

Keys in a config file are the dataclass field names. Unknown keys and
values of the wrong type raise ``ConfigError``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from .dictionaries import DEFAULT_DICT_INDEX, DICTIONARIES


class ConfigError(ValueError):
    pass


@dataclass
class DemoConfig:
    """Settings for the live detection tool."""

    device: Optional[int] = None  # None: try 0 then 1
    width: int = 640
    height: int = 480
    aruco_dict: str = "DICT_6X6_50"
    target_ids: Optional[list[int]] = None  # None: every decoded id is accepted
    detect_all: bool = False
    single_dict: bool = False
    downscale: float = 1.0
    frame_skip: int = 1
    show_rejected: bool = False
    max_frames: Optional[int] = None
    snapshot_dir: str = "."
    window_name: str = "Aruco Detect"
    log_level: str = "INFO"

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    def apply_overrides(self, **kwargs: Any) -> "DemoConfig":
        for key, value in kwargs.items():
            if value is not None and hasattr(self, key):
                setattr(self, key, value)
        return self

    def validate(self) -> "DemoConfig":
        if not 0.0 < self.downscale <= 1.0:
            raise ConfigError("downscale must be in (0, 1]")
        if self.frame_skip < 1:
            raise ConfigError("frame_skip must be >= 1")
        return self


@dataclass
class GeneratorConfig:
    output_path: Optional[str] = None
    dict_index: int = DEFAULT_DICT_INDEX
    marker_id: int = 0
    marker_size: int = 300
    border_bits: int = 1
    window_name: str = "ArUco Marker"
    log_level: str = "INFO"

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    def apply_overrides(self, **kwargs: Any) -> "GeneratorConfig":
        for key, value in kwargs.items():
            if value is not None and hasattr(self, key):
                setattr(self, key, value)
        return self

    def validate(self) -> "GeneratorConfig":
        # id, size and border are clamped by the generator; the index is not
        if not 0 <= self.dict_index < len(DICTIONARIES):
            raise ConfigError(f"dict_index must be in 0..{len(DICTIONARIES) - 1}")
        return self


def _flag(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"expected true/false, got {value!r}")
    return value


def _number(kind: type) -> Callable[[Any], Any]:
    def convert(value: Any):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"expected a number, got {value!r}")
        return kind(value)
    return convert


def _optional(convert: Callable[[Any], Any]) -> Callable[[Any], Any]:
    return lambda value: None if value is None else convert(value)


def _id_list(value: Any) -> Optional[list[int]]:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        value = [value]
    return [_number(int)(v) for v in value]


_DEMO_FIELDS: dict[str, Callable[[Any], Any]] = {
    "device": _optional(_number(int)),
    "width": _number(int),
    "height": _number(int),
    "aruco_dict": str,
    "target_ids": _id_list,
    "detect_all": _flag,
    "single_dict": _flag,
    "downscale": _number(float),
    "frame_skip": _number(int),
    "show_rejected": _flag,
    "max_frames": _optional(_number(int)),
    "snapshot_dir": str,
    "window_name": str,
    "log_level": str,
}

_GENERATOR_FIELDS: dict[str, Callable[[Any], Any]] = {
    "output_path": _optional(str),
    "dict_index": _number(int),
    "marker_id": _number(int),
    "marker_size": _number(int),
    "border_bits": _number(int),
    "window_name": str,
    "log_level": str,
}


def _read_mapping(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as fp:
            if path.suffix.lower() in {".yaml", ".yml"}:
                raw = yaml.safe_load(fp) or {}
            else:
                raw = json.load(fp)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: config root must be a JSON/YAML object")
    return raw


def _build(cls, fields: dict[str, Callable[[Any], Any]], path: str | Path):
    p = Path(path)
    raw = _read_mapping(p)
    unknown = sorted(set(raw) - set(fields))
    if unknown:
        raise ConfigError(f"{p}: unknown keys: {', '.join(map(str, unknown))}")

    values = {}
    for key, convert in fields.items():
        if key not in raw:
            continue
        try:
            values[key] = convert(raw[key])
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"{p}: {key}: {exc}") from exc
    return cls(**values)


def load_config(path: str | Path) -> DemoConfig:
    """Detection tool settings; missing keys keep their defaults."""
    return _build(DemoConfig, _DEMO_FIELDS, path).validate()


def load_generator_config(path: str | Path) -> GeneratorConfig:
    return _build(GeneratorConfig, _GENERATOR_FIELDS, path).validate()
