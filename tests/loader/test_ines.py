"""Tests for the iNES cartridge loader."""

from __future__ import annotations

import io
import struct

import pytest

from pynes.loader import (
    CHR_BANK_SIZE,
    PRG_BANK_SIZE,
    CartridgeFormatError,
    Mirroring,
    load_ines,
    load_ines_from_path,
    parse_header,
)


def build_rom(
    prg_banks: int = 1,
    chr_banks: int = 1,
    *,
    flags6: int = 0,
    flags7: int = 0,
    trainer: bytes | None = None,
) -> bytes:
    buf = io.BytesIO()
    buf.write(b"NES\x1a")
    buf.write(struct.pack("BBBB", prg_banks, chr_banks, flags6, flags7))
    buf.write(bytes(8))
    if trainer is not None:
        buf.write(trainer)
    for bank in range(prg_banks):
        buf.write(bytes([0x10 + bank]) * PRG_BANK_SIZE)
    buf.write(bytes([0xC0]) * (chr_banks * CHR_BANK_SIZE))
    return buf.getvalue()


def test_parse_header_decodes_flags() -> None:
    header = parse_header(build_rom(2, 1, flags6=0x13, flags7=0x40)[:16])

    assert header.prg_banks == 2
    assert header.chr_banks == 1
    assert header.mapper_id == 0x41
    assert header.mirroring is Mirroring.VERTICAL
    assert header.battery_backed
    assert not header.has_trainer
    assert not header.nes2
    assert header.prg_size == 2 * PRG_BANK_SIZE


def test_parse_header_detects_nes2() -> None:
    assert parse_header(build_rom(flags7=0x08)[:16]).nes2
    assert not parse_header(build_rom(flags7=0x0C)[:16]).nes2


def test_parse_header_rejects_bad_magic() -> None:
    data = b"NES\x00" + bytes(12)

    with pytest.raises(CartridgeFormatError, match="magic"):
        parse_header(data)


def test_parse_header_rejects_short_data() -> None:
    with pytest.raises(CartridgeFormatError):
        parse_header(b"NES\x1a")


def test_load_ines_reads_banks() -> None:
    cartridge = load_ines(io.BytesIO(build_rom(2, 1)))

    assert len(cartridge.prg_rom) == 2 * PRG_BANK_SIZE
    assert len(cartridge.chr_rom) == CHR_BANK_SIZE
    assert cartridge.trainer is None
    assert cartridge.prg_bank(0)[0] == 0x10
    assert cartridge.prg_bank(1)[0] == 0x11
    assert cartridge.mapper_id == 0
    assert cartridge.header.mirroring is Mirroring.HORIZONTAL


def test_load_ines_skips_trainer_before_prg() -> None:
    trainer = bytes(range(256)) * 2
    cartridge = load_ines(io.BytesIO(build_rom(1, 0, flags6=0x04, trainer=trainer)))

    assert cartridge.trainer == trainer
    assert cartridge.prg_rom[0] == 0x10
    assert cartridge.chr_rom == b""


def test_load_ines_rejects_truncated_prg() -> None:
    data = build_rom(2, 1)[: 16 + PRG_BANK_SIZE]

    with pytest.raises(CartridgeFormatError, match="PRG ROM"):
        load_ines(io.BytesIO(data))


def test_load_ines_rejects_truncated_chr() -> None:
    data = build_rom(1, 1)[:-1]

    with pytest.raises(CartridgeFormatError, match="CHR ROM"):
        load_ines(io.BytesIO(data))


def test_load_from_path_sets_name(tmp_path) -> None:
    rom_path = tmp_path / "nestest.nes"
    rom_path.write_bytes(build_rom())

    cartridge = load_ines_from_path(rom_path)

    assert cartridge.name == "nestest"


def test_load_from_missing_path_raises_oserror(tmp_path) -> None:
    with pytest.raises(OSError):
        load_ines_from_path(tmp_path / "missing.nes")


def test_describe_lists_header_fields() -> None:
    cartridge = load_ines(io.BytesIO(build_rom(flags6=0x01)))

    lines = cartridge.describe()

    assert "Mirroring: vertical" in lines
    assert "Mapper id: 0" in lines


def test_describe_reports_prg_ram_banks() -> None:
    data = bytearray(build_rom(1, 0))
    data[8] = 2

    cartridge = load_ines(io.BytesIO(bytes(data)))

    assert cartridge.header.prg_ram_banks == 2
    assert "PRG RAM banks: 2" in cartridge.describe()
