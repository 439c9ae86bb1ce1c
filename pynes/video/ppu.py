"""Register window and timing skeleton of the 2C02 picture processing unit.

Only the CPU-facing register contract and the dot/scanline counters are
modelled. No pixels are produced.
"""

from __future__ import annotations

from typing import Dict

from pynes.loader import Cartridge, Mirroring
from pynes.utils import debug_enabled, debug_log

REGISTER_BASE = 0x2000
REGISTER_END = 0x3FFF
REGISTER_COUNT = 8

REG_CTRL = 0x0
REG_MASK = 0x1
REG_STATUS = 0x2
REG_OAM_ADDR = 0x3
REG_OAM_DATA = 0x4
REG_SCROLL = 0x5
REG_ADDR = 0x6
REG_DATA = 0x7

REGISTER_NAMES = ("CTRL", "MASK", "STATUS", "OAMADDR", "OAMDATA", "SCROLL", "ADDR", "DATA")

CTRL_INCREMENT_32 = 0x04
CTRL_NMI_ENABLE = 0x80

DOTS_PER_SCANLINE = 341
LAST_SCANLINE = 260
PRE_RENDER_SCANLINE = -1
VBLANK_SCANLINE = 241


class PPU2C02:
    """CPU-visible side of the NES PPU."""

    def __init__(self) -> None:
        self._registers = [0x00] * REGISTER_COUNT
        self._name_tables = [bytearray(1024), bytearray(1024)]
        self._palette = bytearray(32)
        self._pattern_ram = bytearray(0x2000)
        self._cartridge: Cartridge | None = None

        # PPUADDR takes the high byte first, then the low byte.
        self._vram_address = 0x0000
        self._address_latch = False

        self.cycle = 0
        self.scanline = 0
        self.frame_count = 0
        self.frame_complete = False
        self.nmi = False

    # ------------------------------------------------------------------
    # Address window

    def get_start_address(self) -> int:
        return REGISTER_BASE

    def get_end_address(self) -> int:
        return REGISTER_END

    def connect_cartridge(self, cartridge: Cartridge) -> None:
        self._cartridge = cartridge

    # ------------------------------------------------------------------
    # CPU bus interface

    def cpu_read(self, address: int, read_only: bool = False) -> int:
        """Read a register; the window repeats every eight bytes.

        Register reads are not implemented and always return zero. They have
        no side effects, so ``read_only`` peeks behave identically.
        """

        register = address & 0x0007
        if debug_enabled("ppu"):
            debug_log("ppu", "read %s read_only=%s", REGISTER_NAMES[register], read_only)
        return 0x00

    def cpu_write(self, address: int, value: int) -> None:
        """Latch a register write.

        PPUADDR and PPUDATA also drive the internal VRAM address: two PPUADDR
        writes set it, and each PPUDATA write stores through it and advances
        it by 1, or by 32 when CTRL bit 2 is set.
        """

        register = address & 0x0007
        value &= 0xFF
        self._registers[register] = value
        if register == REG_ADDR:
            if self._address_latch:
                self._vram_address = (self._vram_address & 0x3F00) | value
            else:
                self._vram_address = ((value & 0x3F) << 8) | (self._vram_address & 0x00FF)
            self._address_latch = not self._address_latch
        elif register == REG_DATA:
            self.ppu_write(self._vram_address, value)
            step = 32 if self._registers[REG_CTRL] & CTRL_INCREMENT_32 else 1
            self._vram_address = (self._vram_address + step) & 0x3FFF
        if debug_enabled("ppu"):
            debug_log("ppu", "write %s=%02x", REGISTER_NAMES[register], value)

    def register_value(self, register: int) -> int:
        """Return the last value the CPU wrote to ``register``."""

        return self._registers[register & 0x0007]

    # ------------------------------------------------------------------
    # PPU bus interface

    def ppu_read(self, address: int) -> int:
        address &= 0x3FFF
        if address < 0x2000:
            return self._read_pattern(address)
        if address < 0x3F00:
            table, offset = self._name_table_slot(address)
            return self._name_tables[table][offset]
        return self._palette[self._palette_index(address)]

    def ppu_write(self, address: int, value: int) -> None:
        address &= 0x3FFF
        value &= 0xFF
        if address < 0x2000:
            if self._cartridge is None or not self._cartridge.chr_rom:
                self._pattern_ram[address] = value
        elif address < 0x3F00:
            table, offset = self._name_table_slot(address)
            self._name_tables[table][offset] = value
        else:
            self._palette[self._palette_index(address)] = value

    def _read_pattern(self, address: int) -> int:
        if self._cartridge is not None and self._cartridge.chr_rom:
            return self._cartridge.chr_rom[address % len(self._cartridge.chr_rom)]
        return self._pattern_ram[address]

    def _name_table_slot(self, address: int) -> tuple[int, int]:
        address &= 0x0FFF
        offset = address & 0x03FF
        quadrant = address >> 10
        mirroring = self._cartridge.header.mirroring if self._cartridge else Mirroring.HORIZONTAL
        if mirroring is Mirroring.VERTICAL:
            return quadrant & 0x01, offset
        return quadrant >> 1, offset

    @staticmethod
    def _palette_index(address: int) -> int:
        index = address & 0x001F
        # Sprite backdrop entries alias the background ones.
        if index in (0x10, 0x14, 0x18, 0x1C):
            index -= 0x10
        return index

    # ------------------------------------------------------------------
    # Timing

    def clock(self) -> None:
        """Advance one PPU dot."""

        if self.scanline == VBLANK_SCANLINE and self.cycle == 1:
            if self._registers[REG_CTRL] & CTRL_NMI_ENABLE:
                self.nmi = True

        self.cycle += 1
        if self.cycle >= DOTS_PER_SCANLINE:
            self.cycle = 0
            self.scanline += 1
            if self.scanline > LAST_SCANLINE:
                self.scanline = PRE_RENDER_SCANLINE
                self.frame_complete = True
                self.frame_count += 1

    def reset(self) -> None:
        self._registers = [0x00] * REGISTER_COUNT
        self._vram_address = 0x0000
        self._address_latch = False
        self.cycle = 0
        self.scanline = 0
        self.frame_complete = False
        self.nmi = False

    def debug_snapshot(self) -> Dict[str, int]:
        snapshot = {name: self._registers[index] for index, name in enumerate(REGISTER_NAMES)}
        snapshot["VRAM_ADDR"] = self._vram_address
        snapshot["SCANLINE"] = self.scanline
        snapshot["CYCLE"] = self.cycle
        return snapshot
