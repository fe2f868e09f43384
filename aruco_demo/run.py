"""Live ArUco detection from a camera.

Usage:
    python -m aruco_demo.run          # try camera 0, then 1
    python -m aruco_demo.run 1        # camera 1 only
    python -m aruco_demo.run --list   # print cameras that respond

Window keys: a all dictionaries, z downscale, f frame skip, 1 single
dictionary, r rejected candidates, p snapshot; ESC/q/x/c quit.
"""

import argparse
import sys
from typing import Optional

from .capture import AUTO_DEVICES, CameraOpenError, scan_devices
from .config import ConfigError, DemoConfig, load_config
from .demo import DetectionDemo
from .logging_utils import setup_logger

EXIT_OK = 0
EXIT_NO_CAMERA = 1
EXIT_BAD_DEVICE = 2
EXIT_OPEN_FAILED = 3


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Detect ArUco markers from a camera")
    ap.add_argument("device", nargs="?", help="Camera index (0 or 1)")
    ap.add_argument("--list", action="store_true", help="Scan and print cameras, then exit")
    ap.add_argument("--config", help="Path to JSON/YAML config")

    ap.add_argument("--dict", help="Primary dictionary, e.g. DICT_6X6_50")
    ap.add_argument("--target-ids", nargs="+", type=int)
    ap.add_argument("--width", type=int)
    ap.add_argument("--height", type=int)
    ap.add_argument("--all-dicts", action="store_true")
    ap.add_argument("--single-dict", action="store_true")
    ap.add_argument("--show-rejected", action="store_true")
    ap.add_argument("--downscale", type=float)
    ap.add_argument("--frame-skip", type=int)
    ap.add_argument("--max-frames", type=int)
    ap.add_argument("--snapshot-dir")
    ap.add_argument("--log-level")

    return ap


def parse_device(value: Optional[str]) -> Optional[int]:
    """None means auto; otherwise only the indices in AUTO_DEVICES are accepted."""
    if value is None:
        return None
    if not value.isdigit() or int(value) not in AUTO_DEVICES:
        raise ValueError(f"Invalid camera index: {value!r} (expected 0 or 1)")
    return int(value)


def _apply_args(cfg: DemoConfig, args: argparse.Namespace, device: Optional[int]) -> DemoConfig:
    cfg.apply_overrides(
        device=device,
        aruco_dict=args.dict,
        target_ids=args.target_ids,
        width=args.width,
        height=args.height,
        detect_all=True if args.all_dicts else None,
        single_dict=True if args.single_dict else None,
        show_rejected=True if args.show_rejected else None,
        downscale=args.downscale,
        frame_skip=args.frame_skip,
        max_frames=args.max_frames,
        snapshot_dir=args.snapshot_dir,
        log_level=args.log_level,
    )
    return cfg


def list_devices() -> int:
    devices = scan_devices()
    if not devices:
        print("No cameras found (scanned: %s)" % ", ".join(str(i) for i in AUTO_DEVICES))
        return EXIT_NO_CAMERA
    for d in devices:
        print(f"camera {d.index}: {d.width}x{d.height} ({d.backend})")
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    ap = _build_parser()
    args = ap.parse_args(argv)

    try:
        cfg = load_config(args.config) if args.config else DemoConfig()
    except ConfigError as exc:
        ap.error(f"--config: {exc}")
    logger = setup_logger("detect", args.log_level or cfg.log_level)

    try:
        device = parse_device(args.device)
    except ValueError as exc:
        logger.error("%s", exc)
        return EXIT_BAD_DEVICE

    if args.list:
        return list_devices()

    cfg = _apply_args(cfg, args, device)
    try:
        cfg.validate()
    except ConfigError as exc:
        ap.error(str(exc))

    try:
        demo = DetectionDemo(cfg, logger=logger)
    except ValueError as exc:
        ap.error(str(exc))

    try:
        summary = demo.run()
    except CameraOpenError as exc:
        logger.error("%s", exc)
        return EXIT_NO_CAMERA if cfg.device is None else EXIT_OPEN_FAILED

    print(summary)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
