"""CPU package for the NES emulator."""

from .core import (
    CPUError,
    CPUState,
    FLAG_B,
    FLAG_C,
    FLAG_D,
    FLAG_I,
    FLAG_N,
    FLAG_U,
    FLAG_V,
    FLAG_Z,
    MOS6502,
)
from .disassembler import disassemble, disassemble_one
from .opcodes import OPCODE_TABLE, AddressingMode, Instruction
from . import opcodes

__all__ = [
    "MOS6502",
    "CPUState",
    "CPUError",
    "AddressingMode",
    "Instruction",
    "OPCODE_TABLE",
    "disassemble",
    "disassemble_one",
    "opcodes",
    "FLAG_C",
    "FLAG_Z",
    "FLAG_I",
    "FLAG_D",
    "FLAG_B",
    "FLAG_U",
    "FLAG_V",
    "FLAG_N",
]
