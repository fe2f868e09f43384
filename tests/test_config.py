import json
from pathlib import Path

import pytest

from aruco_demo.config import (
    ConfigError,
    DemoConfig,
    GeneratorConfig,
    load_config,
    load_generator_config,
)


def test_load_config_json(tmp_path: Path):
    cfg_path = tmp_path / "demo.json"
    cfg_path.write_text(
        json.dumps(
            {
                "device": 1,
                "width": 1280,
                "height": 720,
                "aruco_dict": "4x4_50",
                "target_ids": [1, 2],
                "detect_all": True,
                "frame_skip": 2,
            }
        ),
        encoding="utf-8",
    )

    cfg = load_config(cfg_path)
    assert cfg.device == 1
    assert (cfg.width, cfg.height) == (1280, 720)
    assert cfg.aruco_dict == "4x4_50"
    assert cfg.target_ids == [1, 2]
    assert cfg.detect_all
    assert cfg.frame_skip == 2

    cfg.apply_overrides(width=640, height=None)
    assert cfg.width == 640
    assert cfg.height == 720


def test_load_config_yaml(tmp_path: Path):
    cfg_path = tmp_path / "demo.yaml"
    cfg_path.write_text("target_ids: 5\ndownscale: 0.5\n", encoding="utf-8")
    cfg = load_config(cfg_path)
    assert cfg.target_ids == [5]
    assert cfg.downscale == 0.5
    assert cfg.device is None


def test_invalid_values_rejected(tmp_path: Path):
    cfg_path = tmp_path / "bad.json"
    cfg_path.write_text(json.dumps({"downscale": 2.0}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(cfg_path)


def test_missing_config(tmp_path: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "nope.json")


@pytest.mark.parametrize(
    "name, body",
    [
        ("unknown.json", json.dumps({"framerate": 30})),
        ("flag.json", json.dumps({"detect_all": "yes"})),
        ("width.yaml", "width: wide\n"),
        ("list.json", "[1, 2]"),
        ("broken.json", "{\"width\": "),
        ("broken.yaml", "width: [1, 2\n"),
    ],
)
def test_bad_config_files(tmp_path: Path, name, body):
    cfg_path = tmp_path / name
    cfg_path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(cfg_path)


def test_load_generator_config_yaml(tmp_path: Path):
    cfg_path = tmp_path / "gen.yml"
    cfg_path.write_text(
        "dict_index: 0\nmarker_id: 12\nmarker_size: 500\noutput_path: board.png\n",
        encoding="utf-8",
    )
    cfg = load_generator_config(cfg_path)
    assert (cfg.dict_index, cfg.marker_id, cfg.marker_size, cfg.border_bits) == (0, 12, 500, 1)
    assert cfg.output_path == "board.png"


def test_generator_config_rejects_dict_index(tmp_path: Path):
    cfg_path = tmp_path / "gen.json"
    cfg_path.write_text(json.dumps({"dict_index": 17}), encoding="utf-8")
    with pytest.raises(ConfigError, match="dict_index"):
        load_generator_config(cfg_path)


def test_empty_yaml_keeps_defaults(tmp_path: Path):
    cfg_path = tmp_path / "empty.yaml"
    cfg_path.write_text("", encoding="utf-8")
    assert load_config(cfg_path) == DemoConfig()


def test_defaults():
    cfg = DemoConfig()
    assert cfg.device is None
    assert cfg.aruco_dict == "DICT_6X6_50"
    assert (cfg.width, cfg.height) == (640, 480)
    gen = GeneratorConfig()
    assert (gen.dict_index, gen.marker_id, gen.marker_size, gen.border_bits) == (8, 0, 300, 1)
