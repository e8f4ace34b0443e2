#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
edgekit: spatial-filter edge detection on a grayscale image.

Pipeline
1) Load input (any format OpenCV decodes)
2) Multi-channel input → single gray channel
3) Run one operation (default: Canny sigma=1.0, t1=50, t2=20)
4) Write the result (PNG recommended), optional before/after preview

Usage:
  edgekit input.png output.png
  edgekit input.png output.png --sobel|--log|--scharr|--cross [threshold 0-255]
  edgekit input.png output.png --blur [weight 0.0-100.0]
  edgekit input.png output.png --canny [sigma t1 t2]

Exit code 0 on success, 1 on any failure.
"""

import argparse
import logging
import math
import os
import sys
from typing import List, Optional

from edgekit import config
from edgekit.buffer import load, to_grayscale, write
from edgekit.log import setup_logger
from edgekit.recipes import THRESHOLD_OPERATIONS, edge_detect, edge_detect_canny, gaussian_blur

logger = logging.getLogger("edgekit.cli")


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that exits with 1 (not 2) on bad arguments."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


# ---------------------------- arg parsing ----------------------------

def parse_threshold(text: str, name: str = "threshold") -> int:
    """Whole-string integer, clamped into 0..255."""
    try:
        value = int(text.strip())
    except ValueError:
        raise ValueError(f"Failed to parse '{name}' argument: {text!r}") from None
    return min(max(value, config.BYTE_MIN), config.BYTE_MAX)


def parse_float(text: str, name: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"Failed to parse '{name}' argument: {text!r}") from None


def parse_canny_threshold(text: str, name: str) -> int:
    """Decimal threshold, rounded half up and clamped into 0..255."""
    value = parse_float(text, name)
    if not math.isfinite(value):
        raise ValueError(f"'{name}' must be a finite number, got {text!r}")
    value = math.floor(value + 0.5)
    return min(max(value, config.BYTE_MIN), config.BYTE_MAX)


def parse_blur_weight(text: str) -> float:
    weight = parse_float(text, "weight")
    if not config.BLUR_WEIGHT_MIN <= weight <= config.BLUR_WEIGHT_MAX:
        raise ValueError(
            f"'weight' must be within {config.BLUR_WEIGHT_MIN}-{config.BLUR_WEIGHT_MAX}, got {weight}"
        )
    return weight


def build_parser() -> argparse.ArgumentParser:
    ap = _Parser(prog="edgekit", description="Edge detection on a grayscale image.")
    ap.add_argument("input", help="Image to read")
    ap.add_argument("output", help="Where to write the result (PNG recommended)")

    ops = ap.add_mutually_exclusive_group()
    for name in THRESHOLD_OPERATIONS:
        ops.add_argument(f"--{name}", nargs="?", const="0", default=None, metavar="THRESHOLD",
                         help=f"{name} filter, optionally thresholded (0-255)")
    ops.add_argument("--blur", nargs="?", const=str(config.BLUR_WEIGHT), default=None,
                     metavar="WEIGHT", help="Gaussian blur, weight 0.0-100.0")
    ops.add_argument("--canny", nargs="*", default=None, metavar="VALUE",
                     help="Canny edge detection: sigma t1 t2 (all three or none)")

    ap.add_argument("--preview", default=None, help="Also save an input/output figure here")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    ap.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return ap


# ------------------------------- main --------------------------------

def run(args: argparse.Namespace) -> None:
    img = load(args.input)
    logger.info("Image loaded: width %d, height %d, channels %d",
                img.width, img.height, img.channels)
    original = img.clone() if args.preview else None

    if img.channels > 1:
        logger.info("Converting to grayscale...")
        img = to_grayscale(img)

    selected = [name for name in THRESHOLD_OPERATIONS if getattr(args, name) is not None]
    if selected:
        name = selected[0]
        THRESHOLD_OPERATIONS[name](img, parse_threshold(getattr(args, name)))
    elif args.blur is not None:
        gaussian_blur(img, parse_blur_weight(args.blur))
    elif args.canny is not None:
        if len(args.canny) == 3:
            sigma = parse_float(args.canny[0], "sigma")
            t1 = parse_canny_threshold(args.canny[1], "t1")
            t2 = parse_canny_threshold(args.canny[2], "t2")
            edge_detect_canny(img, sigma, t1, t2)
        elif not args.canny:
            edge_detect(img)
        else:
            raise ValueError("Canny requires 3 arguments (sigma, t1, t2) or none")
    else:
        edge_detect(img)

    logger.info("Writing to file: %s", args.output)
    write(img, args.output)
    if args.preview:
        from edgekit.preview import save_panels
        save_panels(original, img, args.preview)
        logger.info("Preview saved to: %s", args.preview)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    setup_logger("edgekit", level)
    try:
        run(args)
    except (ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print("Done. Output saved to:", os.path.abspath(args.output))
    return 0


if __name__ == "__main__":
    sys.exit(main())
