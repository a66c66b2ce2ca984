import logging

import pytest
import trimesh
import yaml

from meshdicer.cli import main
from meshdicer.logging_config import setup_logging


@pytest.fixture
def stl_path(tmp_path):
    """A 1.5 x 0.5 x 0.5 box spanning cells (0,0,0) and (1,0,0)."""
    box = trimesh.creation.box(extents=(1.5, 0.5, 0.5))
    box.apply_translation((1.0, 0.5, 0.5))
    path = tmp_path / "part.stl"
    box.export(str(path))
    return path


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"usable_cells": [[0, 0, 0]], "output_format": "stl"}))
    return path


def test_cli_clumps_into_usable_cells(stl_path, config_path, tmp_path):
    out = tmp_path / "out"
    assert main([str(stl_path), "-c", str(config_path), "-o", str(out)]) == 0
    assert sorted(p.name for p in out.glob("*.stl")) == [
        "part_0_0_0.stl", "part_1_0_0.stl", "part_clumped_0_0_0.stl"
    ]


def test_cli_without_clumping(stl_path, config_path, tmp_path):
    out = tmp_path / "out"
    assert main([str(stl_path), "-c", str(config_path), "-o", str(out), "--no-clump"]) == 0
    assert sorted(p.name for p in out.glob("*.stl")) == ["part_0_0_0.stl", "part_1_0_0.stl"]


def test_cli_usable_override(stl_path, config_path, tmp_path):
    out = tmp_path / "out"
    args = [str(stl_path), "-c", str(config_path), "-o", str(out), "-u", "1,0,0", "--visualize"]
    assert main(args) == 0
    assert sorted(p.name for p in out.glob("part_clumped_*.stl")) == ["part_clumped_1_0_0.stl"]
    assert (out / "cell_visualization.png").exists()


def test_cli_default_output_dir(stl_path, config_path):
    assert main([str(stl_path), "-c", str(config_path)]) == 0
    assert (stl_path.parent / "part_cells" / "part_clumped_0_0_0.stl").exists()


def test_cli_missing_input(tmp_path):
    assert main([str(tmp_path / "nothing.stl")]) == 1


def test_cli_bad_config(stl_path, tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text(yaml.dump({"epsilon": -1}))
    assert main([str(stl_path), "-c", str(bad), "-o", str(tmp_path / "out")]) == 1


def test_setup_logging_file_handler(tmp_path):
    log_file = tmp_path / "run.log"
    logger = setup_logging(logging.INFO, str(log_file))
    logging.getLogger("meshdicer.grid_decomposer").debug("details")
    for handler in logger.handlers:
        handler.flush()
    # The file keeps DEBUG records the console filters out
    assert "details" in log_file.read_text()
    assert logger.handlers[0].level == logging.INFO
    # A second call replaces the handlers instead of stacking them
    assert len(setup_logging(logging.INFO).handlers) == 1


def test_cli_malformed_config_exits_cleanly(stl_path, tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("usable_cells: [5]\n")
    assert main([str(stl_path), "-c", str(bad), "-o", str(tmp_path / "out")]) == 1


def test_cli_null_usable_cells_keeps_plain_split(stl_path, tmp_path):
    cfg = tmp_path / "nulls.yaml"
    cfg.write_text("usable_cells:\nepsilon: 1.0e-5\noutput_format: stl\n")
    out = tmp_path / "out"
    assert main([str(stl_path), "-c", str(cfg), "-o", str(out)]) == 0
    assert sorted(p.name for p in out.glob("*.stl")) == ["part_0_0_0.stl", "part_1_0_0.stl"]


def test_cli_log_file_records_the_run(stl_path, config_path, tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    args = [str(stl_path), "-c", str(config_path), "-o", str(tmp_path / "out"), "--log-file", str(log_file)]
    assert main(args) == 0
    for handler in logging.getLogger("meshdicer").handlers:
        handler.flush()
    text = log_file.read_text()
    assert "Decomposed" in text
    assert "cells after clumping" in text
