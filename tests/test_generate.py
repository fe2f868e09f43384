from unittest.mock import patch

import pytest

from aruco_demo import generate
from aruco_demo.generator import GeneratorState, MarkerGeneratorApp


def test_build_config_defaults():
    cfg = generate.build_config([])
    assert cfg.output_path is None
    assert (cfg.dict_index, cfg.marker_id, cfg.marker_size, cfg.border_bits) == (8, 0, 300, 1)


def test_build_config_flags():
    cfg = generate.build_config(
        ["-o", "out.png", "-d", "0", "--id", "12", "--ms", "500", "--bb", "2"]
    )
    assert cfg.output_path == "out.png"
    assert (cfg.dict_index, cfg.marker_id, cfg.marker_size, cfg.border_bits) == (0, 12, 500, 2)


@pytest.mark.parametrize("argv", [["-d", "17"], ["-d", "-1"], ["--id", "x"]])
def test_invalid_arguments_exit_with_usage_error(argv):
    with pytest.raises(SystemExit) as info:
        generate.build_config(argv)
    assert info.value.code == 2


def test_main_builds_state_and_runs_app():
    with patch("aruco_demo.generate.MarkerGeneratorApp") as mock_app:
        mock_app.return_value.run.return_value = 0
        assert generate.main(["-d", "0", "--id", "80", "--ms", "10", "--bb", "9"]) == 0

    state = mock_app.call_args.args[0]
    assert state.dict_index == 0
    assert state.output_path is None
    mock_app.return_value.run.assert_called_once()


def test_app_clamps_out_of_range_state(fake_gui):
    fake_gui.keys = [ord("q")]
    app = MarkerGeneratorApp(GeneratorState(dict_index=0, marker_id=80, marker_size=10, border_bits=9))
    assert app.run() == 0
    assert (app.state.marker_id, app.state.marker_size, app.state.border_bits) == (49, 50, 7)


def test_config_file_then_flags(tmp_path):
    cfg_path = tmp_path / "gen.yaml"
    cfg_path.write_text("dict_index: 2\nmarker_id: 4\nborder_bits: 3\n", encoding="utf-8")
    cfg = generate.build_config(["--config", str(cfg_path), "--id", "9"])
    assert (cfg.dict_index, cfg.marker_id, cfg.marker_size, cfg.border_bits) == (2, 9, 300, 3)


@pytest.mark.parametrize("body", ["dict_index: 40\n", "marker_id: seven\n", "colour: red\n"])
def test_invalid_config_file_exits_with_usage_error(tmp_path, body):
    cfg_path = tmp_path / "gen.yaml"
    cfg_path.write_text(body, encoding="utf-8")
    with pytest.raises(SystemExit) as info:
        generate.build_config(["--config", str(cfg_path)])
    assert info.value.code == 2


def test_missing_config_file_exits_with_usage_error(tmp_path):
    with pytest.raises(SystemExit) as info:
        generate.build_config(["--config", str(tmp_path / "none.yaml")])
    assert info.value.code == 2
