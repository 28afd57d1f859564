"""
Entry point for the live sign-letter recognizer.

Usage examples:
    python sign_server.py                    # OpenCV window with label overlay
    python sign_server.py --mode headless    # log stable labels only
    python sign_server.py --camera 1 --model-path ~/models/hand_landmarker.task
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
PY_DIR = ROOT / "python"
if str(PY_DIR) not in sys.path:
    sys.path.insert(0, str(PY_DIR))


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Static sign-letter recognizer")
    parser.add_argument(
        "--mode",
        choices=("window", "headless"),
        default="window",
        help="'window' shows the camera feed with an overlay, 'headless' only logs label changes.",
    )
    parser.add_argument("--camera", type=int, default=0, help="OpenCV camera index.")
    parser.add_argument("--model-path", default=None, help="Path to hand_landmarker.task.")
    parser.add_argument(
        "--config",
        default=str(PY_DIR / "config.json"),
        help="JSON config file, reloaded when it changes.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log per-frame details.")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    from main_loop import main as run_main_loop

    run_main_loop(
        config_path=args.config,
        camera=args.camera,
        model_path=args.model_path,
        headless=args.mode == "headless",
    )


if __name__ == "__main__":
    main()
