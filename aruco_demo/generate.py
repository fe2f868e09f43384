"""Interactive ArUco marker generator with GUI.

Usage:
    python -m aruco_demo.generate -d 8 --id 3 --ms 400
    python -m aruco_demo.generate --config generator.yaml --id 5
"""

import argparse
import sys
from typing import Optional

from .config import ConfigError, GeneratorConfig, load_generator_config
from .dictionaries import DICTIONARIES
from .generator import GeneratorState, MarkerGeneratorApp
from .logging_utils import setup_logger


def _build_parser() -> argparse.ArgumentParser:
    names = ", ".join(f"{i}={d.name}" for i, d in enumerate(DICTIONARIES))
    ap = argparse.ArgumentParser(
        description="Interactive ArUco marker generator with GUI",
        epilog=f"Dictionaries: {names}",
    )
    ap.add_argument("--config", help="Path to JSON/YAML generator config")
    ap.add_argument("-o", "--output", help="default output path for the 's' key")
    ap.add_argument("-d", "--dict", type=int,
                    help=f"dictionary index (0..{len(DICTIONARIES) - 1}, default 8)")
    ap.add_argument("--id", type=int, help="initial marker id (default 0)")
    ap.add_argument("--ms", "--size", dest="size", type=int, help="marker size (px, default 300)")
    ap.add_argument("--bb", "--border-bits", dest="border_bits", type=int,
                    help="border bits (0..7, default 1)")
    ap.add_argument("--log-level")
    return ap


def build_config(argv: Optional[list[str]] = None) -> GeneratorConfig:
    """Config file values first, then any flag given on the command line."""
    ap = _build_parser()
    args = ap.parse_args(argv)
    try:
        cfg = load_generator_config(args.config) if args.config else GeneratorConfig()
        cfg.apply_overrides(
            output_path=args.output,
            dict_index=args.dict,
            marker_id=args.id,
            marker_size=args.size,
            border_bits=args.border_bits,
            log_level=args.log_level,
        ).validate()
    except ConfigError as exc:
        ap.error(str(exc))
    return cfg


def main(argv: Optional[list[str]] = None) -> int:
    cfg = build_config(argv)
    logger = setup_logger("generator", cfg.log_level)

    state = GeneratorState(
        dict_index=cfg.dict_index,
        marker_id=cfg.marker_id,
        marker_size=cfg.marker_size,
        border_bits=cfg.border_bits,
        output_path=cfg.output_path,
    )
    app = MarkerGeneratorApp(state, window_name=cfg.window_name, logger=logger)
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
