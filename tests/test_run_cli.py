"""Tests for the command-line entry point and headless frontend."""

from __future__ import annotations

import pytest

import run
from pynes.ui import AppConfig, EmulatorApp


def write_rom(path, program: bytes = b"\x4C\x00\x80") -> None:
    prg = bytearray(0x4000)
    prg[: len(program)] = program
    prg[0x3FFC:0x3FFE] = b"\x00\x80"
    path.write_bytes(b"NES\x1a" + bytes([1, 0, 0, 0]) + bytes(8) + bytes(prg))


def test_headless_run_stops_after_frame_limit(tmp_path) -> None:
    rom_path = tmp_path / "loop.nes"
    write_rom(rom_path)

    assert run.main(["--rom", str(rom_path), "--frames", "1", "--headless"]) == 0


def test_app_runs_headless_and_builds_overlay(tmp_path) -> None:
    rom_path = tmp_path / "loop.nes"
    write_rom(rom_path, b"\xE8\x4C\x00\x80")  # INX ; JMP $8000

    app = EmulatorApp(AppConfig(rom_path=rom_path, frames=2, headless=True))
    app.run()

    assert app.frame_counter == 2
    machine = app.machine
    assert machine is not None
    assert machine.ppu.frame_count == 2

    lines = app.overlay_lines(machine)
    assert lines[0].startswith("FRAME")
    assert any(line.startswith("PC") for line in lines)
    assert any("JMP $8000 {ABS}" in line or "INX {IMP}" in line for line in lines)
    assert any(line.startswith("VRAM") and "bg=00" in line for line in lines)


def test_app_requires_rom_path() -> None:
    with pytest.raises(RuntimeError):
        EmulatorApp(AppConfig(headless=True, frames=1)).run()


def test_missing_rom_is_a_usage_error(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run.main(["--rom", str(tmp_path / "missing.nes"), "--headless", "--frames", "1"])

    assert excinfo.value.code == 2


def test_headless_requires_frame_limit(tmp_path) -> None:
    rom_path = tmp_path / "loop.nes"
    write_rom(rom_path)

    with pytest.raises(SystemExit) as excinfo:
        run.main(["--rom", str(rom_path), "--headless"])

    assert excinfo.value.code == 2


def test_invalid_rom_exits_with_status_one(tmp_path, capsys) -> None:
    rom_path = tmp_path / "bad.nes"
    rom_path.write_bytes(b"NOPE" + bytes(12))

    with pytest.raises(SystemExit) as excinfo:
        run.main(["--rom", str(rom_path), "--headless", "--frames", "1"])

    assert excinfo.value.code == 1
    assert "cannot load ROM" in capsys.readouterr().err
