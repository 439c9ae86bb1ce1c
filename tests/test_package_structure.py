"""Baseline tests ensuring the package skeleton loads correctly."""

import pynes


def test_package_exports() -> None:
    for name in ("cpu", "bus", "video", "system", "loader", "ui", "utils"):
        assert hasattr(pynes, name), f"missing submodule: {name}"


def test_cpu_exports() -> None:
    from pynes import cpu

    for name in ("MOS6502", "CPUState", "CPUError", "OPCODE_TABLE", "disassemble"):
        assert hasattr(cpu, name), f"cpu missing symbol: {name}"


def test_loader_exports() -> None:
    from pynes import loader

    for name in ("Cartridge", "INesHeader", "CartridgeFormatError", "load_ines_from_path"):
        assert hasattr(loader, name), f"loader missing symbol: {name}"
