"""Render 6502 machine code as assembly text for diagnostics."""

from __future__ import annotations

from typing import Dict, Sequence

from pynes.bus import Bus

from .opcodes import AddressingMode, Instruction, OPCODE_TABLE


def format_operand(mode: AddressingMode, address: int, operand: bytes) -> str:
    """Format the operand of an instruction located at ``address``."""

    if mode is AddressingMode.IMP:
        return ""
    if mode is AddressingMode.IMM:
        return f"#${operand[0]:02X}"
    if mode is AddressingMode.ZP0:
        return f"${operand[0]:02X}"
    if mode is AddressingMode.ZPX:
        return f"${operand[0]:02X},X"
    if mode is AddressingMode.ZPY:
        return f"${operand[0]:02X},Y"
    if mode is AddressingMode.IZX:
        return f"(${operand[0]:02X},X)"
    if mode is AddressingMode.IZY:
        return f"(${operand[0]:02X}),Y"
    if mode is AddressingMode.REL:
        offset = operand[0] - 0x100 if operand[0] & 0x80 else operand[0]
        target = (address + 2 + offset) & 0xFFFF
        return f"${target:04X}"
    word = operand[0] | (operand[1] << 8)
    if mode is AddressingMode.ABS:
        return f"${word:04X}"
    if mode is AddressingMode.ABX:
        return f"${word:04X},X"
    if mode is AddressingMode.ABY:
        return f"${word:04X},Y"
    return f"(${word:04X})"


def disassemble_one(
    bus: Bus,
    address: int,
    table: Sequence[Instruction] = OPCODE_TABLE,
) -> tuple[str, int]:
    """Disassemble the instruction at ``address``; return ``(text, length)``."""

    address &= 0xFFFF
    instruction = table[bus.read(address)]
    length = instruction.length
    operand = bytes(bus.read(address + offset) for offset in range(1, length))
    text = f"${address:04X}: {instruction.mnemonic}"
    rendered = format_operand(instruction.mode, address, operand)
    if rendered:
        text = f"{text} {rendered}"
    return f"{text} {{{instruction.mode.name}}}", length


def disassemble(
    bus: Bus,
    start: int,
    stop: int,
    table: Sequence[Instruction] = OPCODE_TABLE,
) -> Dict[int, str]:
    """Disassemble ``start``..``stop`` (inclusive) keyed by instruction address.

    Memory is only read, so the CPU and bus state are left untouched.
    """

    lines: Dict[int, str] = {}
    address = start & 0xFFFF
    stop &= 0xFFFF
    while address <= stop:
        text, length = disassemble_one(bus, address, table)
        lines[address] = text
        address += length
    return lines
