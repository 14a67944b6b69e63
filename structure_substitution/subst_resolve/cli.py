"""
Command-line entry point.

Usage:
    subst-resolve grid.json --input "3x3 block of 1s" --output "cross of 2s"
    subst-resolve grid.json -i "regions of 3 adjacent to 5" -o "become 4" --no-preserve

The grid file holds either a bare grid ([[...], ...]) or an object with a
"grid" key. The output grid is printed as JSON on stdout.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from subst_core.types import ResolutionParams

from .collaborators import JsonlTracker, LoggingTracker
from .config import ResolutionConfig, load_config
from .logs import setup_package_logging
from .orchestrator import ConstraintResolver


def load_grid(path: Path):
    """
    Raises:
        FileNotFoundError: If the grid file doesn't exist
        ValueError: If no grid is found in the file
    """
    if not path.exists():
        raise FileNotFoundError(f"Grid file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("grid")
    if not isinstance(data, list):
        raise ValueError(f"No grid found in {path}")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subst-resolve",
        description="Recognize a structure in a grid and apply a substitution rule",
    )
    parser.add_argument("grid", type=Path, help="JSON file holding the input grid")
    parser.add_argument("-i", "--input", dest="input_structure", default="", help="Input structure description")
    parser.add_argument("-o", "--output", dest="output_structure", default="", help="Output structure description")
    parser.add_argument("--no-preserve", action="store_true", help="Clear cells outside recognized structures")
    parser.add_argument("--problem-id", default=None, help="Identifier used for logging/correlation")
    parser.add_argument("--config", type=Path, default=None, help="JSON configuration file")
    parser.add_argument("--tracker-file", type=Path, default=None, help="JSONL file for unknown-structure events")
    parser.add_argument("--log-file", type=Path, default=None, help="Write logs to this file as well")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    setup_package_logging(args.log_file, logging.DEBUG if args.verbose else logging.WARNING)

    try:
        grid = load_grid(args.grid)
        config = load_config(args.config) if args.config is not None else ResolutionConfig()
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    tracker_path = args.tracker_file or config.tracker_path
    tracker = JsonlTracker(tracker_path) if tracker_path else LoggingTracker()

    params = ResolutionParams(
        input_structure=args.input_structure,
        output_structure=args.output_structure,
        preserve_non_matching=not args.no_preserve,
        problem_id=args.problem_id or args.grid.stem,
    )
    result = ConstraintResolver(tracker=tracker, config=config).resolve(grid, params)

    print(json.dumps(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
