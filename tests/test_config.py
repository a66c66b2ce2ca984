import pytest
import yaml

from meshdicer.config import Config, interactive_config, load_config, parse_cell, save_example_config
from meshdicer.epsilon import DEFAULT_EPSILON
from meshdicer.geometry import GridCell


def write_yaml(path, data):
    path.write_text(yaml.dump(data))
    return str(path)


def test_defaults():
    config = Config()
    assert config.epsilon == DEFAULT_EPSILON
    assert config.usable_cell_set() == set()
    assert config.epsilon_math().epsilon == DEFAULT_EPSILON


def test_load_config(tmp_path):
    path = write_yaml(tmp_path / "config.yaml", {
        "epsilon": 1e-4,
        "usable_cells": [[0, 0, 0], [0, 0, -1]],
        "rotation_degrees": [0, 90, 0],
        "output_format": "stl",
    })
    config = load_config(path)

    assert config.epsilon == 1e-4
    assert config.usable_cell_set() == {GridCell(0, 0, 0), GridCell(0, 0, -1)}
    assert config.rotation_degrees == (0.0, 90.0, 0.0)
    assert config.output_format == "stl"
    assert config.visualize is False


def test_load_empty_config_uses_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(str(path)) == Config()


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


@pytest.mark.parametrize("data", [
    {"epsilon": 0},
    {"epsilon": -1},
    {"rotation_degrees": [0, 90]},
    {"usable_cells": [[0, 0]]},
])
def test_invalid_config(tmp_path, data):
    with pytest.raises(ValueError):
        load_config(write_yaml(tmp_path / "bad.yaml", data))


def test_example_config_round_trip(tmp_path):
    path = str(tmp_path / "example.yaml")
    save_example_config(path)
    config = load_config(path)
    assert config.usable_cell_set() == {GridCell(0, 0, 0), GridCell(0, 0, -1)}
    assert config.rotation_degrees == (0.0, 90.0, 0.0)


def test_parse_cell():
    assert parse_cell("1, -2,3") == (1, -2, 3)
    with pytest.raises(ValueError):
        parse_cell("1,2")


def test_interactive_config(monkeypatch):
    answers = iter(["0.001", "0,0,0; 1,0,0", "0,0,90", ".stl"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    config = interactive_config()

    assert config.epsilon == 0.001
    assert config.usable_cells == [(0, 0, 0), (1, 0, 0)]
    assert config.rotation_degrees == (0.0, 0.0, 90.0)
    assert config.output_format == "stl"


def test_interactive_config_accepts_defaults(monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt="": "")
    assert interactive_config() == Config()


def test_usable_cell_list_keeps_order():
    config = Config(usable_cells=[(1, 0, 0), (0, 0, 0)])
    assert config.usable_cell_list() == [GridCell(1, 0, 0), GridCell(0, 0, 0)]


def test_null_keys_fall_back_to_defaults(tmp_path):
    path = tmp_path / "nulls.yaml"
    path.write_text("usable_cells:\nrotation_degrees:\nepsilon: 1.0e-5\n")
    config = load_config(str(path))
    assert config.usable_cells == []
    assert config.rotation_degrees == (0.0, 0.0, 0.0)


@pytest.mark.parametrize("text", [
    "usable_cells: [5]\n",
    "usable_cells: 5\n",
    "rotation_degrees: 90\n",
    "epsilon: [1, 2]\n",
    "- just\n- a list\n",
])
def test_malformed_config_is_a_value_error(tmp_path, text):
    path = tmp_path / "bad.yaml"
    path.write_text(text)
    with pytest.raises(ValueError):
        load_config(str(path))
