"""Video peripherals for the NES emulator."""

from .ppu import PPU2C02, REGISTER_BASE, REGISTER_END, REGISTER_NAMES

__all__ = [
    "PPU2C02",
    "REGISTER_BASE",
    "REGISTER_END",
    "REGISTER_NAMES",
]
