"""Cartridge metadata structures produced by the iNES loader."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

PRG_BANK_SIZE = 16 * 1024
CHR_BANK_SIZE = 8 * 1024
TRAINER_SIZE = 512


class Mirroring(Enum):
    """Nametable mirroring selected by bit 0 of flags 6."""

    HORIZONTAL = 0
    VERTICAL = 1


@dataclass(frozen=True)
class INesHeader:
    """Decoded 16-byte iNES header."""

    prg_banks: int
    chr_banks: int
    flags6: int
    flags7: int
    prg_ram_banks: int = 0
    tv_system1: int = 0
    tv_system2: int = 0

    @property
    def mapper_id(self) -> int:
        return (self.flags7 & 0xF0) | (self.flags6 >> 4)

    @property
    def mirroring(self) -> Mirroring:
        return Mirroring.VERTICAL if self.flags6 & 0x01 else Mirroring.HORIZONTAL

    @property
    def battery_backed(self) -> bool:
        return bool(self.flags6 & 0x02)

    @property
    def has_trainer(self) -> bool:
        return bool(self.flags6 & 0x04)

    @property
    def alternative_nametable(self) -> bool:
        return bool(self.flags6 & 0x08)

    @property
    def vs_unisystem(self) -> bool:
        return bool(self.flags7 & 0x01)

    @property
    def playchoice10(self) -> bool:
        return bool(self.flags7 & 0x02)

    @property
    def nes2(self) -> bool:
        return (self.flags7 & 0x0C) == 0x08

    @property
    def prg_size(self) -> int:
        return self.prg_banks * PRG_BANK_SIZE

    @property
    def chr_size(self) -> int:
        return self.chr_banks * CHR_BANK_SIZE


@dataclass
class Cartridge:
    """ROM image contents handed to the system before the CPU starts."""

    header: INesHeader
    prg_rom: bytes
    chr_rom: bytes
    trainer: bytes | None = None
    name: str = ""

    @property
    def mapper_id(self) -> int:
        return self.header.mapper_id

    def prg_bank(self, index: int) -> bytes:
        start = index * PRG_BANK_SIZE
        return self.prg_rom[start:start + PRG_BANK_SIZE]

    def describe(self) -> List[str]:
        header = self.header
        return [
            f"PRG ROM banks: {header.prg_banks}, size {header.prg_size}",
            f"CHR ROM banks: {header.chr_banks}, size {header.chr_size}",
            f"PRG RAM banks: {header.prg_ram_banks}",
            f"Mirroring: {header.mirroring.name.lower()}",
            f"Battery backed: {header.battery_backed}",
            f"Trainer: {header.has_trainer}",
            f"Alternative nametable layout: {header.alternative_nametable}",
            f"VS Unisystem: {header.vs_unisystem}",
            f"PlayChoice-10: {header.playchoice10}",
            f"NES 2.0 format: {header.nes2}",
            f"Mapper id: {header.mapper_id}",
        ]
