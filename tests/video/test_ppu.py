"""Tests for the PPU register window and timing skeleton."""

from __future__ import annotations

from pynes.loader import Cartridge, INesHeader
from pynes.video import PPU2C02, REGISTER_BASE, REGISTER_END
from pynes.video.ppu import DOTS_PER_SCANLINE, REG_CTRL, VBLANK_SCANLINE


def make_cartridge(flags6: int = 0, chr_rom: bytes = b"") -> Cartridge:
    header = INesHeader(prg_banks=1, chr_banks=len(chr_rom) // 8192, flags6=flags6, flags7=0)
    return Cartridge(header=header, prg_rom=bytes(16384), chr_rom=chr_rom)


def test_register_window_bounds() -> None:
    ppu = PPU2C02()

    assert ppu.get_start_address() == REGISTER_BASE == 0x2000
    assert ppu.get_end_address() == REGISTER_END == 0x3FFF


def test_register_writes_repeat_every_eight_bytes() -> None:
    ppu = PPU2C02()

    ppu.cpu_write(0x2008, 0x12)
    ppu.cpu_write(0x3FFF, 0x1FF)

    assert ppu.register_value(REG_CTRL) == 0x12
    assert ppu.register_value(7) == 0xFF
    assert ppu.debug_snapshot()["CTRL"] == 0x12


def test_register_reads_return_zero() -> None:
    ppu = PPU2C02()
    ppu.cpu_write(0x2002, 0x80)

    assert ppu.cpu_read(0x2002) == 0
    assert ppu.cpu_read(0x2002, read_only=True) == 0


def test_pattern_reads_come_from_chr_rom() -> None:
    ppu = PPU2C02()
    ppu.connect_cartridge(make_cartridge(chr_rom=bytes(range(256)) * 32))

    ppu.ppu_write(0x0010, 0xEE)

    assert ppu.ppu_read(0x0010) == 0x10


def test_pattern_ram_used_without_chr_rom() -> None:
    ppu = PPU2C02()
    ppu.connect_cartridge(make_cartridge())

    ppu.ppu_write(0x0010, 0xEE)

    assert ppu.ppu_read(0x0010) == 0xEE


def test_vertical_mirroring() -> None:
    ppu = PPU2C02()
    ppu.connect_cartridge(make_cartridge(flags6=0x01))

    ppu.ppu_write(0x2005, 0x44)

    assert ppu.ppu_read(0x2805) == 0x44
    assert ppu.ppu_read(0x2405) == 0x00


def test_horizontal_mirroring() -> None:
    ppu = PPU2C02()
    ppu.connect_cartridge(make_cartridge(flags6=0x00))

    ppu.ppu_write(0x2005, 0x44)

    assert ppu.ppu_read(0x2405) == 0x44
    assert ppu.ppu_read(0x2805) == 0x00


def test_palette_backdrop_entries_alias() -> None:
    ppu = PPU2C02()

    ppu.ppu_write(0x3F10, 0x0F)

    assert ppu.ppu_read(0x3F00) == 0x0F
    assert ppu.ppu_read(0x3F20) == 0x0F


def test_nmi_raised_at_vblank_when_enabled() -> None:
    ppu = PPU2C02()
    ppu.cpu_write(0x2000, 0x80)

    for _ in range(VBLANK_SCANLINE * DOTS_PER_SCANLINE + 1):
        ppu.clock()
    assert not ppu.nmi

    ppu.clock()
    assert ppu.nmi


def test_no_nmi_when_disabled() -> None:
    ppu = PPU2C02()

    for _ in range(VBLANK_SCANLINE * DOTS_PER_SCANLINE + 2):
        ppu.clock()

    assert not ppu.nmi


def test_frame_completes_after_last_scanline() -> None:
    ppu = PPU2C02()

    for _ in range(261 * DOTS_PER_SCANLINE - 1):
        ppu.clock()
    assert not ppu.frame_complete

    ppu.clock()
    assert ppu.frame_complete
    assert ppu.scanline == -1
    assert ppu.frame_count == 1


def test_reset_clears_registers_and_counters() -> None:
    ppu = PPU2C02()
    ppu.cpu_write(0x2001, 0x1E)
    ppu.clock()

    ppu.reset()

    assert ppu.register_value(1) == 0
    assert (ppu.scanline, ppu.cycle) == (0, 0)


def test_address_and_data_ports_write_vram() -> None:
    ppu = PPU2C02()

    ppu.cpu_write(0x2006, 0x3F)
    ppu.cpu_write(0x2006, 0x01)
    ppu.cpu_write(0x2007, 0x21)
    ppu.cpu_write(0x2007, 0x22)

    assert ppu.ppu_read(0x3F01) == 0x21
    assert ppu.ppu_read(0x3F02) == 0x22
    assert ppu.debug_snapshot()["VRAM_ADDR"] == 0x3F03


def test_data_port_increments_by_32_when_ctrl_bit_2_set() -> None:
    ppu = PPU2C02()
    ppu.cpu_write(0x2000, 0x04)

    ppu.cpu_write(0x2006, 0x20)
    ppu.cpu_write(0x2006, 0x00)
    ppu.cpu_write(0x2007, 0xAA)
    ppu.cpu_write(0x2007, 0xBB)

    assert ppu.ppu_read(0x2000) == 0xAA
    assert ppu.ppu_read(0x2020) == 0xBB
