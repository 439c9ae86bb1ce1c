"""Python NES emulator core built around a cycle-counting MOS 6502.

The package hosts the CPU, memory bus, cartridge loader, PPU register window,
system assembly and the frontend used by ``run.py``.
"""

from __future__ import annotations

from . import bus, cpu, loader, system, ui, utils, video

__all__: list[str] = [
    "cpu",
    "bus",
    "video",
    "loader",
    "system",
    "ui",
    "utils",
]
