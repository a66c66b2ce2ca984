"""
Configuration management for meshdicer.
"""

import yaml
from dataclasses import dataclass, field
from typing import List, Set, Tuple
from pathlib import Path

from meshdicer.epsilon import DEFAULT_EPSILON, EpsilonMath
from meshdicer.geometry import GridCell


@dataclass
class Config:
    """Configuration for mesh decomposition and export."""

    # Tolerance shared by plane classification and boundary snapping
    epsilon: float = DEFAULT_EPSILON

    # Cells that may render geometry; empty means every occupied cell is usable
    usable_cells: List[Tuple[int, int, int]] = field(default_factory=list)

    # Model-space rotation applied on export (degrees around X, Y, Z)
    rotation_degrees: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    # Output options
    output_format: str = "obj"
    visualize: bool = False

    def epsilon_math(self) -> EpsilonMath:
        return EpsilonMath(self.epsilon)

    def usable_cell_list(self) -> List[GridCell]:
        """Usable cells in configuration order, which decides clumping ties."""
        return [GridCell(*(int(c) for c in cell)) for cell in self.usable_cells]

    def usable_cell_set(self) -> Set[GridCell]:
        return set(self.usable_cell_list())


def parse_cell(text: str) -> Tuple[int, int, int]:
    """Parse 'x,y,z' into an integer triple."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 3:
        raise ValueError(f"Expected a cell as x,y,z, got '{text}'")
    return int(parts[0]), int(parts[1]), int(parts[2])


def _parse_cells(raw) -> List[Tuple[int, int, int]]:
    if not isinstance(raw, (list, tuple)):
        raise ValueError(f"usable_cells must be a list of [x, y, z] cells, got {raw!r}")
    cells = []
    for cell in raw:
        if not isinstance(cell, (list, tuple)) or len(cell) != 3:
            raise ValueError(f"Every usable cell needs exactly three coordinates, got {cell!r}")
        cells.append(tuple(int(c) for c in cell))
    return cells


def load_config(config_path: str) -> Config:
    """Load configuration from a YAML file."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")

    # Keys that are present but empty fall back to their defaults
    def value(key, default):
        found = data.get(key)
        return default if found is None else found

    rotation = value("rotation_degrees", (0.0, 0.0, 0.0))
    if not isinstance(rotation, (list, tuple)) or len(rotation) != 3:
        raise ValueError(f"rotation_degrees needs three angles, got {rotation!r}")

    try:
        config = Config(
            epsilon=float(value("epsilon", DEFAULT_EPSILON)),
            usable_cells=_parse_cells(value("usable_cells", [])),
            rotation_degrees=tuple(float(a) for a in rotation),
            output_format=str(value("output_format", "obj")).lstrip('.'),
            visualize=bool(value("visualize", False))
        )
    except TypeError as e:
        raise ValueError(f"Invalid value in {config_path}: {e}") from e

    # Fails early on a non-positive epsilon
    config.epsilon_math()
    return config


def interactive_config() -> Config:
    """Create configuration through interactive prompts."""
    config = Config()

    print("\n=== Decomposition Parameters ===")
    response = input(f"Epsilon tolerance (default: {config.epsilon}): ")
    if response.strip():
        config.epsilon = float(response)
        config.epsilon_math()

    print("\n=== Clumping Parameters ===")
    print("(Leave empty to keep every fragment in the cell that contains it)")
    response = input("Usable cells (semicolon-separated x,y,z, e.g. 0,0,0;0,0,-1): ")
    if response.strip():
        config.usable_cells = [parse_cell(cell) for cell in response.split(";") if cell.strip()]

    print("\n=== Export Parameters ===")
    response = input(f"Rotation in degrees around X,Y,Z (default: {','.join(str(a) for a in config.rotation_degrees)}): ")
    if response.strip():
        angles = [float(a) for a in response.split(",")]
        if len(angles) != 3:
            raise ValueError(f"Expected three rotation angles, got {len(angles)}")
        config.rotation_degrees = tuple(angles)

    response = input(f"Output file format (default: {config.output_format}): ")
    if response.strip():
        config.output_format = response.strip().lstrip(".")

    return config


def save_example_config(output_path: str = "example_config.yaml"):
    """Save an example configuration file."""
    example = {
        'epsilon': DEFAULT_EPSILON,
        'usable_cells': [[0, 0, 0], [0, 0, -1]],
        'rotation_degrees': [0.0, 90.0, 0.0],
        'output_format': 'obj',
        'visualize': False
    }

    with open(output_path, 'w') as f:
        yaml.dump(example, f, default_flow_style=False, sort_keys=False)
