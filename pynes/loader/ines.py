"""iNES cartridge image loader."""

from __future__ import annotations

import struct
from pathlib import Path
from typing import BinaryIO

from pynes.utils import debug_enabled, debug_log

from .cartridge import Cartridge, INesHeader, TRAINER_SIZE


class CartridgeFormatError(RuntimeError):
    """Raised when an iNES image violates the expected structure."""


MAGIC = b"NES\x1a"
HEADER_SIZE = 16

# magic, PRG banks, CHR banks, flags 6, flags 7, PRG-RAM size, TV system 1/2, padding
_HEADER_FORMAT = ">4sBBBBBBB5s"


def parse_header(data: bytes) -> INesHeader:
    """Decode the fixed 16-byte header."""

    if len(data) < HEADER_SIZE:
        raise CartridgeFormatError("Unexpected end of iNES header")
    magic, prg_banks, chr_banks, flags6, flags7, prg_ram, tv1, tv2, _ = struct.unpack(
        _HEADER_FORMAT, data[:HEADER_SIZE])
    if magic != MAGIC:
        raise CartridgeFormatError(f"Invalid iNES magic header: {magic!r}")
    return INesHeader(
        prg_banks=prg_banks,
        chr_banks=chr_banks,
        flags6=flags6,
        flags7=flags7,
        prg_ram_banks=prg_ram,
        tv_system1=tv1,
        tv_system2=tv2,
    )


def load_ines(stream: BinaryIO) -> Cartridge:
    """Read an iNES image from ``stream`` and return the cartridge contents."""

    loader = _INesLoader(stream)
    return loader.load()


def load_ines_from_path(path: Path) -> Cartridge:
    """Load an iNES image from the filesystem."""

    with path.open("rb") as handle:
        cartridge = load_ines(handle)
    cartridge.name = path.stem
    return cartridge


class _INesLoader:
    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def load(self) -> Cartridge:
        header = parse_header(self._read_exact(HEADER_SIZE, "header"))

        trainer = None
        if header.has_trainer:
            trainer = self._read_exact(TRAINER_SIZE, "trainer")

        prg_rom = self._read_exact(header.prg_size, "PRG ROM")
        chr_rom = self._read_exact(header.chr_size, "CHR ROM")

        cartridge = Cartridge(header=header, prg_rom=prg_rom, chr_rom=chr_rom, trainer=trainer)
        if debug_enabled("cart"):
            for line in cartridge.describe():
                debug_log("cart", line)
        return cartridge

    def _read_exact(self, length: int, what: str) -> bytes:
        data = self._stream.read(length)
        if len(data) < length:
            raise CartridgeFormatError(
                f"Unexpected end of iNES file while reading {what} "
                f"({len(data)} of {length} bytes)")
        return data
