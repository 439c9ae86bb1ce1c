"""Opcode metadata for the MOS 6502 CPU."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Final, Iterable, List, Mapping, Sequence


class AddressingMode(Enum):
    """The twelve 6502 addressing modes."""

    IMP = auto()  # implied / accumulator
    IMM = auto()  # immediate
    ZP0 = auto()  # zero page
    ZPX = auto()  # zero page, X
    ZPY = auto()  # zero page, Y
    ABS = auto()  # absolute
    ABX = auto()  # absolute, X
    ABY = auto()  # absolute, Y
    IND = auto()  # indirect (JMP only)
    IZX = auto()  # (zero page, X)
    IZY = auto()  # (zero page), Y
    REL = auto()  # relative (branches)


# Number of operand bytes that follow the opcode for each mode.
OPERAND_LENGTH: Final[Mapping[AddressingMode, int]] = {
    AddressingMode.IMP: 0,
    AddressingMode.IMM: 1,
    AddressingMode.ZP0: 1,
    AddressingMode.ZPX: 1,
    AddressingMode.ZPY: 1,
    AddressingMode.ABS: 2,
    AddressingMode.ABX: 2,
    AddressingMode.ABY: 2,
    AddressingMode.IND: 2,
    AddressingMode.IZX: 1,
    AddressingMode.IZY: 1,
    AddressingMode.REL: 1,
}


@dataclass(frozen=True)
class Instruction:
    """Metadata describing a single 6502 opcode."""

    opcode: int
    mnemonic: str
    mode: AddressingMode
    cycles: int
    handler: str

    def __post_init__(self) -> None:
        if not 0 <= self.opcode <= 0xFF:
            raise ValueError(f"opcode out of range: {self.opcode}")
        if self.cycles <= 0:
            raise ValueError("cycles must be positive")

    @property
    def length(self) -> int:
        """Total instruction size in bytes, opcode included."""

        return 1 + OPERAND_LENGTH[self.mode]


class OpcodeTable:
    """Mutable builder for the 256-entry instruction table."""

    _TABLE_SIZE: Final[int] = 0x100

    def __init__(self) -> None:
        self._table: List[Instruction | None] = [None] * self._TABLE_SIZE

    def register(self, instruction: Instruction) -> None:
        opcode = instruction.opcode
        if self._table[opcode] is not None:
            existing = self._table[opcode]
            raise ValueError(
                f"opcode {opcode:#04x} already registered as {existing.mnemonic}")
        self._table[opcode] = instruction

    def register_all(self, instructions: Iterable[Instruction]) -> None:
        for instruction in instructions:
            self.register(instruction)

    def freeze(self) -> Sequence[Instruction]:
        missing = [index for index, entry in enumerate(self._table) if entry is None]
        if missing:
            listed = ", ".join(f"{opcode:#04x}" for opcode in missing[:8])
            raise ValueError(f"{len(missing)} opcodes left unassigned: {listed}")
        return tuple(self._table)  # type: ignore[arg-type]


def build_instruction_table(instructions: Iterable[Instruction]) -> Sequence[Instruction]:
    """Build a 256-entry instruction lookup table; every opcode must be assigned."""

    table = OpcodeTable()
    table.register_all(instructions)
    return table.freeze()


IMP = AddressingMode.IMP
IMM = AddressingMode.IMM
ZP0 = AddressingMode.ZP0
ZPX = AddressingMode.ZPX
ZPY = AddressingMode.ZPY
ABS = AddressingMode.ABS
ABX = AddressingMode.ABX
ABY = AddressingMode.ABY
IND = AddressingMode.IND
IZX = AddressingMode.IZX
IZY = AddressingMode.IZY
REL = AddressingMode.REL


OFFICIAL_INSTRUCTIONS: Sequence[Instruction] = (
    # Arithmetic
    Instruction(0x69, "ADC", IMM, 2, "op_adc"),
    Instruction(0x65, "ADC", ZP0, 3, "op_adc"),
    Instruction(0x75, "ADC", ZPX, 4, "op_adc"),
    Instruction(0x6D, "ADC", ABS, 4, "op_adc"),
    Instruction(0x7D, "ADC", ABX, 4, "op_adc"),
    Instruction(0x79, "ADC", ABY, 4, "op_adc"),
    Instruction(0x61, "ADC", IZX, 6, "op_adc"),
    Instruction(0x71, "ADC", IZY, 5, "op_adc"),
    Instruction(0xE9, "SBC", IMM, 2, "op_sbc"),
    Instruction(0xE5, "SBC", ZP0, 3, "op_sbc"),
    Instruction(0xF5, "SBC", ZPX, 4, "op_sbc"),
    Instruction(0xED, "SBC", ABS, 4, "op_sbc"),
    Instruction(0xFD, "SBC", ABX, 4, "op_sbc"),
    Instruction(0xF9, "SBC", ABY, 4, "op_sbc"),
    Instruction(0xE1, "SBC", IZX, 6, "op_sbc"),
    Instruction(0xF1, "SBC", IZY, 5, "op_sbc"),
    # Logical
    Instruction(0x29, "AND", IMM, 2, "op_and"),
    Instruction(0x25, "AND", ZP0, 3, "op_and"),
    Instruction(0x35, "AND", ZPX, 4, "op_and"),
    Instruction(0x2D, "AND", ABS, 4, "op_and"),
    Instruction(0x3D, "AND", ABX, 4, "op_and"),
    Instruction(0x39, "AND", ABY, 4, "op_and"),
    Instruction(0x21, "AND", IZX, 6, "op_and"),
    Instruction(0x31, "AND", IZY, 5, "op_and"),
    Instruction(0x09, "ORA", IMM, 2, "op_ora"),
    Instruction(0x05, "ORA", ZP0, 3, "op_ora"),
    Instruction(0x15, "ORA", ZPX, 4, "op_ora"),
    Instruction(0x0D, "ORA", ABS, 4, "op_ora"),
    Instruction(0x1D, "ORA", ABX, 4, "op_ora"),
    Instruction(0x19, "ORA", ABY, 4, "op_ora"),
    Instruction(0x01, "ORA", IZX, 6, "op_ora"),
    Instruction(0x11, "ORA", IZY, 5, "op_ora"),
    Instruction(0x49, "EOR", IMM, 2, "op_eor"),
    Instruction(0x45, "EOR", ZP0, 3, "op_eor"),
    Instruction(0x55, "EOR", ZPX, 4, "op_eor"),
    Instruction(0x4D, "EOR", ABS, 4, "op_eor"),
    Instruction(0x5D, "EOR", ABX, 4, "op_eor"),
    Instruction(0x59, "EOR", ABY, 4, "op_eor"),
    Instruction(0x41, "EOR", IZX, 6, "op_eor"),
    Instruction(0x51, "EOR", IZY, 5, "op_eor"),
    Instruction(0x24, "BIT", ZP0, 3, "op_bit"),
    Instruction(0x2C, "BIT", ABS, 4, "op_bit"),
    # Shifts and rotates
    Instruction(0x0A, "ASL", IMP, 2, "op_asl"),
    Instruction(0x06, "ASL", ZP0, 5, "op_asl"),
    Instruction(0x16, "ASL", ZPX, 6, "op_asl"),
    Instruction(0x0E, "ASL", ABS, 6, "op_asl"),
    Instruction(0x1E, "ASL", ABX, 7, "op_asl"),
    Instruction(0x4A, "LSR", IMP, 2, "op_lsr"),
    Instruction(0x46, "LSR", ZP0, 5, "op_lsr"),
    Instruction(0x56, "LSR", ZPX, 6, "op_lsr"),
    Instruction(0x4E, "LSR", ABS, 6, "op_lsr"),
    Instruction(0x5E, "LSR", ABX, 7, "op_lsr"),
    Instruction(0x2A, "ROL", IMP, 2, "op_rol"),
    Instruction(0x26, "ROL", ZP0, 5, "op_rol"),
    Instruction(0x36, "ROL", ZPX, 6, "op_rol"),
    Instruction(0x2E, "ROL", ABS, 6, "op_rol"),
    Instruction(0x3E, "ROL", ABX, 7, "op_rol"),
    Instruction(0x6A, "ROR", IMP, 2, "op_ror"),
    Instruction(0x66, "ROR", ZP0, 5, "op_ror"),
    Instruction(0x76, "ROR", ZPX, 6, "op_ror"),
    Instruction(0x6E, "ROR", ABS, 6, "op_ror"),
    Instruction(0x7E, "ROR", ABX, 7, "op_ror"),
    # Compare
    Instruction(0xC9, "CMP", IMM, 2, "op_cmp"),
    Instruction(0xC5, "CMP", ZP0, 3, "op_cmp"),
    Instruction(0xD5, "CMP", ZPX, 4, "op_cmp"),
    Instruction(0xCD, "CMP", ABS, 4, "op_cmp"),
    Instruction(0xDD, "CMP", ABX, 4, "op_cmp"),
    Instruction(0xD9, "CMP", ABY, 4, "op_cmp"),
    Instruction(0xC1, "CMP", IZX, 6, "op_cmp"),
    Instruction(0xD1, "CMP", IZY, 5, "op_cmp"),
    Instruction(0xE0, "CPX", IMM, 2, "op_cpx"),
    Instruction(0xE4, "CPX", ZP0, 3, "op_cpx"),
    Instruction(0xEC, "CPX", ABS, 4, "op_cpx"),
    Instruction(0xC0, "CPY", IMM, 2, "op_cpy"),
    Instruction(0xC4, "CPY", ZP0, 3, "op_cpy"),
    Instruction(0xCC, "CPY", ABS, 4, "op_cpy"),
    # Increment / decrement
    Instruction(0xE6, "INC", ZP0, 5, "op_inc"),
    Instruction(0xF6, "INC", ZPX, 6, "op_inc"),
    Instruction(0xEE, "INC", ABS, 6, "op_inc"),
    Instruction(0xFE, "INC", ABX, 7, "op_inc"),
    Instruction(0xC6, "DEC", ZP0, 5, "op_dec"),
    Instruction(0xD6, "DEC", ZPX, 6, "op_dec"),
    Instruction(0xCE, "DEC", ABS, 6, "op_dec"),
    Instruction(0xDE, "DEC", ABX, 7, "op_dec"),
    Instruction(0xE8, "INX", IMP, 2, "op_inx"),
    Instruction(0xC8, "INY", IMP, 2, "op_iny"),
    Instruction(0xCA, "DEX", IMP, 2, "op_dex"),
    Instruction(0x88, "DEY", IMP, 2, "op_dey"),
    # Loads
    Instruction(0xA9, "LDA", IMM, 2, "op_lda"),
    Instruction(0xA5, "LDA", ZP0, 3, "op_lda"),
    Instruction(0xB5, "LDA", ZPX, 4, "op_lda"),
    Instruction(0xAD, "LDA", ABS, 4, "op_lda"),
    Instruction(0xBD, "LDA", ABX, 4, "op_lda"),
    Instruction(0xB9, "LDA", ABY, 4, "op_lda"),
    Instruction(0xA1, "LDA", IZX, 6, "op_lda"),
    Instruction(0xB1, "LDA", IZY, 5, "op_lda"),
    Instruction(0xA2, "LDX", IMM, 2, "op_ldx"),
    Instruction(0xA6, "LDX", ZP0, 3, "op_ldx"),
    Instruction(0xB6, "LDX", ZPY, 4, "op_ldx"),
    Instruction(0xAE, "LDX", ABS, 4, "op_ldx"),
    Instruction(0xBE, "LDX", ABY, 4, "op_ldx"),
    Instruction(0xA0, "LDY", IMM, 2, "op_ldy"),
    Instruction(0xA4, "LDY", ZP0, 3, "op_ldy"),
    Instruction(0xB4, "LDY", ZPX, 4, "op_ldy"),
    Instruction(0xAC, "LDY", ABS, 4, "op_ldy"),
    Instruction(0xBC, "LDY", ABX, 4, "op_ldy"),
    # Stores
    Instruction(0x85, "STA", ZP0, 3, "op_sta"),
    Instruction(0x95, "STA", ZPX, 4, "op_sta"),
    Instruction(0x8D, "STA", ABS, 4, "op_sta"),
    Instruction(0x9D, "STA", ABX, 5, "op_sta"),
    Instruction(0x99, "STA", ABY, 5, "op_sta"),
    Instruction(0x81, "STA", IZX, 6, "op_sta"),
    Instruction(0x91, "STA", IZY, 6, "op_sta"),
    Instruction(0x86, "STX", ZP0, 3, "op_stx"),
    Instruction(0x96, "STX", ZPY, 4, "op_stx"),
    Instruction(0x8E, "STX", ABS, 4, "op_stx"),
    Instruction(0x84, "STY", ZP0, 3, "op_sty"),
    Instruction(0x94, "STY", ZPX, 4, "op_sty"),
    Instruction(0x8C, "STY", ABS, 4, "op_sty"),
    # Register transfers
    Instruction(0xAA, "TAX", IMP, 2, "op_tax"),
    Instruction(0xA8, "TAY", IMP, 2, "op_tay"),
    Instruction(0xBA, "TSX", IMP, 2, "op_tsx"),
    Instruction(0x8A, "TXA", IMP, 2, "op_txa"),
    Instruction(0x9A, "TXS", IMP, 2, "op_txs"),
    Instruction(0x98, "TYA", IMP, 2, "op_tya"),
    # Stack
    Instruction(0x48, "PHA", IMP, 3, "op_pha"),
    Instruction(0x08, "PHP", IMP, 3, "op_php"),
    Instruction(0x68, "PLA", IMP, 4, "op_pla"),
    Instruction(0x28, "PLP", IMP, 4, "op_plp"),
    # Jumps and subroutines
    Instruction(0x4C, "JMP", ABS, 3, "op_jmp"),
    Instruction(0x6C, "JMP", IND, 5, "op_jmp"),
    Instruction(0x20, "JSR", ABS, 6, "op_jsr"),
    Instruction(0x60, "RTS", IMP, 6, "op_rts"),
    Instruction(0x00, "BRK", IMP, 7, "op_brk"),
    Instruction(0x40, "RTI", IMP, 6, "op_rti"),
    # Branches
    Instruction(0x90, "BCC", REL, 2, "op_bcc"),
    Instruction(0xB0, "BCS", REL, 2, "op_bcs"),
    Instruction(0xF0, "BEQ", REL, 2, "op_beq"),
    Instruction(0xD0, "BNE", REL, 2, "op_bne"),
    Instruction(0x30, "BMI", REL, 2, "op_bmi"),
    Instruction(0x10, "BPL", REL, 2, "op_bpl"),
    Instruction(0x50, "BVC", REL, 2, "op_bvc"),
    Instruction(0x70, "BVS", REL, 2, "op_bvs"),
    # Status flags
    Instruction(0x18, "CLC", IMP, 2, "op_clc"),
    Instruction(0xD8, "CLD", IMP, 2, "op_cld"),
    Instruction(0x58, "CLI", IMP, 2, "op_cli"),
    Instruction(0xB8, "CLV", IMP, 2, "op_clv"),
    Instruction(0x38, "SEC", IMP, 2, "op_sec"),
    Instruction(0xF8, "SED", IMP, 2, "op_sed"),
    Instruction(0x78, "SEI", IMP, 2, "op_sei"),
    Instruction(0xEA, "NOP", IMP, 2, "op_nop"),
)


# Undocumented opcodes that still behave as NOPs on the NMOS part. Each keeps
# its hardware addressing mode so operand bytes are skipped.
UNOFFICIAL_NOPS: Sequence[Instruction] = (
    Instruction(0x04, "NOP", ZP0, 3, "op_nop"),
    Instruction(0x44, "NOP", ZP0, 3, "op_nop"),
    Instruction(0x64, "NOP", ZP0, 3, "op_nop"),
    Instruction(0x0C, "NOP", ABS, 4, "op_nop"),
    Instruction(0x14, "NOP", ZPX, 4, "op_nop"),
    Instruction(0x34, "NOP", ZPX, 4, "op_nop"),
    Instruction(0x54, "NOP", ZPX, 4, "op_nop"),
    Instruction(0x74, "NOP", ZPX, 4, "op_nop"),
    Instruction(0xD4, "NOP", ZPX, 4, "op_nop"),
    Instruction(0xF4, "NOP", ZPX, 4, "op_nop"),
    Instruction(0x1A, "NOP", IMP, 2, "op_nop"),
    Instruction(0x3A, "NOP", IMP, 2, "op_nop"),
    Instruction(0x5A, "NOP", IMP, 2, "op_nop"),
    Instruction(0x7A, "NOP", IMP, 2, "op_nop"),
    Instruction(0xDA, "NOP", IMP, 2, "op_nop"),
    Instruction(0xFA, "NOP", IMP, 2, "op_nop"),
    Instruction(0x1C, "NOP", ABX, 4, "op_nop"),
    Instruction(0x3C, "NOP", ABX, 4, "op_nop"),
    Instruction(0x5C, "NOP", ABX, 4, "op_nop"),
    Instruction(0x7C, "NOP", ABX, 4, "op_nop"),
    Instruction(0xDC, "NOP", ABX, 4, "op_nop"),
    Instruction(0xFC, "NOP", ABX, 4, "op_nop"),
    Instruction(0x80, "NOP", IMM, 2, "op_nop"),
    Instruction(0x82, "NOP", IMM, 2, "op_nop"),
    Instruction(0x89, "NOP", IMM, 2, "op_nop"),
    Instruction(0xC2, "NOP", IMM, 2, "op_nop"),
    Instruction(0xE2, "NOP", IMM, 2, "op_nop"),
    # USBC: identical to the official immediate SBC.
    Instruction(0xEB, "SBC", IMM, 2, "op_sbc"),
)

# NOPs that pay the page-cross penalty exactly like read instructions.
PAGE_PENALTY_NOPS: Final[frozenset[int]] = frozenset({0x1C, 0x3C, 0x5C, 0x7C, 0xDC, 0xFC})

# Remaining opcodes execute as placeholders that only burn their base cycles.
ILLEGAL_OPCODE_CYCLES: Final[Mapping[int, int]] = {
    0x02: 2, 0x03: 8, 0x07: 5, 0x0B: 2, 0x0F: 6,
    0x12: 2, 0x13: 8, 0x17: 6, 0x1B: 7, 0x1F: 7,
    0x22: 2, 0x23: 8, 0x27: 5, 0x2B: 2, 0x2F: 6,
    0x32: 2, 0x33: 8, 0x37: 6, 0x3B: 7, 0x3F: 7,
    0x42: 2, 0x43: 8, 0x47: 5, 0x4B: 2, 0x4F: 6,
    0x52: 2, 0x53: 8, 0x57: 6, 0x5B: 7, 0x5F: 7,
    0x62: 2, 0x63: 8, 0x67: 5, 0x6B: 2, 0x6F: 6,
    0x72: 2, 0x73: 8, 0x77: 6, 0x7B: 7, 0x7F: 7,
    0x83: 6, 0x87: 3, 0x8B: 2, 0x8F: 4,
    0x92: 2, 0x93: 6, 0x97: 4, 0x9B: 5, 0x9C: 5, 0x9E: 5, 0x9F: 5,
    0xA3: 6, 0xA7: 3, 0xAB: 2, 0xAF: 4,
    0xB2: 2, 0xB3: 5, 0xB7: 4, 0xBB: 4, 0xBF: 4,
    0xC3: 8, 0xC7: 5, 0xCB: 2, 0xCF: 6,
    0xD2: 2, 0xD3: 8, 0xD7: 6, 0xDB: 7, 0xDF: 7,
    0xE3: 8, 0xE7: 5, 0xEF: 6,
    0xF2: 2, 0xF3: 8, 0xF7: 6, 0xFB: 7, 0xFF: 7,
}

ILLEGAL_INSTRUCTIONS: Sequence[Instruction] = tuple(
    Instruction(opcode, "???", IMP, cycles, "op_xxx")
    for opcode, cycles in sorted(ILLEGAL_OPCODE_CYCLES.items())
)


OPCODE_TABLE: Sequence[Instruction] = build_instruction_table(
    (*OFFICIAL_INSTRUCTIONS, *UNOFFICIAL_NOPS, *ILLEGAL_INSTRUCTIONS)
)
