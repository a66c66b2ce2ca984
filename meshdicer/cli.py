"""
Command-line interface for the meshdicer tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from meshdicer.config import Config, load_config, interactive_config, parse_cell
from meshdicer.logging_config import setup_logging
from meshdicer.mesh_loader import load_mesh
from meshdicer.grid_decomposer import decompose
from meshdicer.clumping import clump_model
from meshdicer.cell_exporter import export_cells, rotation_from_degrees
from meshdicer.visualizer import visualize_cells, plot_cell_histogram

logger = logging.getLogger("meshdicer.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Split a 3D model into unit grid cells and clump them into usable cells"
    )
    parser.add_argument(
        "input",
        type=str,
        help="Input mesh file path (STL, OBJ, PLY, GLB, ...)"
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        help="YAML configuration file (if not provided, will use interactive mode)"
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        help="Output directory (default: <input>_cells next to the input)"
    )
    parser.add_argument(
        "-u", "--usable",
        type=parse_cell,
        action="append",
        metavar="X,Y,Z",
        help="Usable cell, may be repeated (overrides the configuration)"
    )
    parser.add_argument(
        "--no-clump",
        action="store_true",
        help="Only write the plain per-cell split, without the clumped cells"
    )
    parser.add_argument(
        "--visualize",
        action="store_true",
        help="Save PNG previews of the resulting cells"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write a DEBUG-level log to this file"
    )
    return parser


def run(input_path: Path, output_dir: Path, config: Config, clump: bool = True) -> List[Path]:
    """
    Load, decompose, and export a mesh.

    The plain split is always written as ``<stem>_x_y_z``. When clumping is
    enabled and usable cells are configured, the clumped cells are written
    as well, as ``<stem>_clumped_x_y_z``.

    Returns:
        Paths of the written cell files
    """
    eps = config.epsilon_math()

    logger.info("Loading mesh file: %s", input_path)
    mesh = load_mesh(str(input_path), eps)

    logger.info("Decomposing into unit cells...")
    cells = decompose(mesh, eps)
    logger.info("Found %d occupied cells", len(cells))

    rotation = None
    if any(config.rotation_degrees):
        rotation = rotation_from_degrees(config.rotation_degrees)

    logger.info("Writing cells to: %s", output_dir)
    written = export_cells(
        cells, str(output_dir), input_path.stem, config.output_format, rotation, eps
    )

    shown = cells
    usable = config.usable_cell_list()
    if clump and usable:
        logger.info("Clumping into %d usable cells...", len(usable))
        shown = clump_model(cells, usable)
        logger.info("%d cells after clumping", len(shown))
        written += export_cells(
            shown, str(output_dir), f"{input_path.stem}_clumped",
            config.output_format, rotation, eps
        )
    elif clump:
        logger.info("No usable cells configured, skipping clumping")

    if config.visualize:
        visualize_cells(shown, str(output_dir / "cell_visualization.png"))
        plot_cell_histogram(shown, str(output_dir / "cell_polygons.png"))
        logger.info("Visualization saved to '%s'", output_dir)

    return written


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file)

    # Validate input file
    input_path = Path(args.input)
    if not input_path.exists():
        logger.error("Input file '%s' not found", args.input)
        return 1

    # Determine output directory
    if args.output:
        output_dir = Path(args.output)
    else:
        output_dir = input_path.parent / f"{input_path.stem}_cells"

    try:
        if args.config:
            logger.info("Loading configuration from %s...", args.config)
            config = load_config(args.config)
        else:
            print("No configuration file provided. Starting interactive mode...")
            config = interactive_config()

        if args.usable:
            config.usable_cells = list(args.usable)
        if args.visualize:
            config.visualize = True

        written = run(input_path, output_dir, config, clump=not args.no_clump)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        return 1

    logger.info("Done! Wrote %d files.", len(written))
    return 0


if __name__ == "__main__":
    sys.exit(main())
