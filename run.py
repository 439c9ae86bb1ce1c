"""Command-line entry point for the NES emulator.

Loads an iNES ROM, resets the CPU from the cartridge reset vector and runs the
machine, either headless or in a pygame window with a register overlay.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pynes.loader import CartridgeFormatError
from pynes.ui import AppConfig, EmulatorApp


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run.py",
        description="NES 6502 emulator core",
    )
    parser.add_argument(
        "--rom",
        type=Path,
        required=True,
        help="Path to the iNES (.nes) ROM image",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=None,
        help="Stop after this many frames (default: run until closed)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without opening a pygame window",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=2,
        help="Integer overlay scale factor (default: 2)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if not args.rom.exists():
        parser.error(f"ROM file not found: {args.rom}")

    if args.frames is not None and args.frames <= 0:
        parser.error("--frames must be positive")

    if args.headless and args.frames is None:
        parser.error("--headless requires --frames")

    config = AppConfig(
        rom_path=args.rom,
        frames=args.frames,
        headless=args.headless,
        scale=args.scale,
    )
    app = EmulatorApp(config)
    try:
        app.run()
    except (CartridgeFormatError, OSError) as exc:
        parser.exit(1, f"run.py: cannot load ROM: {exc}\n")
    except RuntimeError as exc:
        parser.exit(1, f"run.py: {exc}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
