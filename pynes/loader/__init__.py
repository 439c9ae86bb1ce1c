"""Loaders for NES cartridge images."""

from __future__ import annotations

from .cartridge import (
    CHR_BANK_SIZE,
    PRG_BANK_SIZE,
    TRAINER_SIZE,
    Cartridge,
    INesHeader,
    Mirroring,
)
from .ines import CartridgeFormatError, load_ines, load_ines_from_path, parse_header

__all__ = [
    "Cartridge",
    "INesHeader",
    "Mirroring",
    "CartridgeFormatError",
    "load_ines",
    "load_ines_from_path",
    "parse_header",
    "PRG_BANK_SIZE",
    "CHR_BANK_SIZE",
    "TRAINER_SIZE",
]
