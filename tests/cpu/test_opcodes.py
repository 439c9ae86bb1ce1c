"""Tests for the 6502 opcode table."""

from __future__ import annotations

import pytest

from pynes.cpu import MOS6502, OPCODE_TABLE
from pynes.cpu.opcodes import (
    ABS,
    IMM,
    IMP,
    IND,
    OFFICIAL_INSTRUCTIONS,
    PAGE_PENALTY_NOPS,
    Instruction,
    OpcodeTable,
    build_instruction_table,
)


def test_table_covers_every_opcode() -> None:
    assert len(OPCODE_TABLE) == 256
    for opcode, instruction in enumerate(OPCODE_TABLE):
        assert instruction.opcode == opcode
        assert instruction.cycles > 0


def test_official_instruction_set() -> None:
    assert len(OFFICIAL_INSTRUCTIONS) == 151
    mnemonics = {instruction.mnemonic for instruction in OFFICIAL_INSTRUCTIONS}
    assert len(mnemonics) == 56


def test_every_handler_exists_on_the_cpu() -> None:
    for instruction in OPCODE_TABLE:
        assert callable(getattr(MOS6502, instruction.handler, None)), instruction


def test_selected_entries() -> None:
    assert OPCODE_TABLE[0xA9] == Instruction(0xA9, "LDA", IMM, 2, "op_lda")
    assert OPCODE_TABLE[0x6C].mode is IND
    assert OPCODE_TABLE[0xEA].mnemonic == "NOP"
    assert OPCODE_TABLE[0xEB].handler == "op_sbc"
    assert OPCODE_TABLE[0x02].mnemonic == "???"
    assert OPCODE_TABLE[0x02].mode is IMP


def test_page_penalty_nops_are_absolute_x() -> None:
    for opcode in PAGE_PENALTY_NOPS:
        assert OPCODE_TABLE[opcode].mnemonic == "NOP"
        assert OPCODE_TABLE[opcode].length == 3


def test_instruction_length_follows_mode() -> None:
    assert Instruction(0x00, "BRK", IMP, 7, "op_brk").length == 1
    assert Instruction(0xA9, "LDA", IMM, 2, "op_lda").length == 2
    assert Instruction(0x4C, "JMP", ABS, 3, "op_jmp").length == 3


def test_instruction_validates_fields() -> None:
    with pytest.raises(ValueError):
        Instruction(0x100, "BAD", IMP, 2, "op_nop")
    with pytest.raises(ValueError):
        Instruction(0x01, "BAD", IMP, 0, "op_nop")


def test_duplicate_registration_is_rejected() -> None:
    table = OpcodeTable()
    table.register(Instruction(0xEA, "NOP", IMP, 2, "op_nop"))

    with pytest.raises(ValueError, match="already registered"):
        table.register(Instruction(0xEA, "NOP", IMP, 2, "op_nop"))


def test_freeze_requires_every_opcode() -> None:
    with pytest.raises(ValueError, match="unassigned"):
        build_instruction_table([Instruction(0xEA, "NOP", IMP, 2, "op_nop")])
