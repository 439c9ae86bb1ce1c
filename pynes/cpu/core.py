"""Cycle-counting MOS 6502 CPU core.

Each call to :meth:`MOS6502.clock` represents one CPU cycle. When the previous
instruction has used up its cycles, the next opcode is fetched and executed in
full on that first cycle; the remaining cycles are then idled away. This keeps
timing exact from the caller's point of view without modelling the individual
bus cycles inside an instruction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Sequence

from pynes.bus import Bus
from pynes.utils import TraceRecorder, debug_enabled, debug_log

from .opcodes import AddressingMode, Instruction, OPCODE_TABLE, PAGE_PENALTY_NOPS


class CPUError(Exception):
    """Base error for CPU-related failures."""


FLAG_C = 0x01
FLAG_Z = 0x02
FLAG_I = 0x04
FLAG_D = 0x08
FLAG_B = 0x10
FLAG_U = 0x20
FLAG_V = 0x40
FLAG_N = 0x80

STACK_BASE = 0x0100

NMI_VECTOR = 0xFFFA
RESET_VECTOR = 0xFFFC
IRQ_VECTOR = 0xFFFE

RESET_CYCLES = 8
IRQ_CYCLES = 7
NMI_CYCLES = 8

_FLAG_NAMES = (
    ("N", FLAG_N),
    ("V", FLAG_V),
    ("U", FLAG_U),
    ("B", FLAG_B),
    ("D", FLAG_D),
    ("I", FLAG_I),
    ("Z", FLAG_Z),
    ("C", FLAG_C),
)


@dataclass
class CPUState:
    """Snapshot of the 6502 register file."""

    a: int = 0x00
    x: int = 0x00
    y: int = 0x00
    sp: int = 0x00
    pc: int = 0x0000
    status: int = 0x00

    def clone(self) -> "CPUState":
        return CPUState(self.a, self.x, self.y, self.sp, self.pc, self.status)

    def flags_string(self) -> str:
        """Render the status register as ``NVUBDIZC`` with ``.`` for clear bits."""

        return "".join(name if self.status & mask else "." for name, mask in _FLAG_NAMES)


@dataclass
class MOS6502:
    """NMOS 6502 as used by the NES, driven one cycle at a time."""

    bus: Bus
    instruction_table: Sequence[Instruction] = field(default=OPCODE_TABLE)
    trace: TraceRecorder | None = None

    state: CPUState = field(default_factory=CPUState)
    cycles: int = 0
    clock_count: int = 0

    # Per-instruction scratch registers.
    _opcode: int = field(default=0x00, init=False, repr=False)
    _mode: AddressingMode = field(default=AddressingMode.IMP, init=False, repr=False)
    _fetched: int = field(default=0x00, init=False, repr=False)
    _addr_abs: int = field(default=0x0000, init=False, repr=False)
    _addr_rel: int = field(default=0x0000, init=False, repr=False)
    _handlers: List[Callable[[], bool]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if len(self.instruction_table) != 0x100:
            raise CPUError(
                f"instruction table must have 256 entries, got {len(self.instruction_table)}")
        handlers: List[Callable[[], bool]] = []
        for opcode, instruction in enumerate(self.instruction_table):
            if instruction is None or instruction.opcode != opcode:
                raise CPUError(f"instruction table slot {opcode:#04x} is not populated correctly")
            handler = getattr(self, instruction.handler, None)
            if handler is None:
                raise CPUError(f"handler '{instruction.handler}' not implemented")
            handlers.append(handler)
        self._handlers = handlers

    # ------------------------------------------------------------------
    # External signals

    def reset(self) -> None:
        """Load the reset vector and return every register to power-up values."""

        self.state = CPUState(
            sp=0xFD,
            pc=self._read_word(RESET_VECTOR),
            status=FLAG_U,
        )
        self._opcode = 0x00
        self._mode = AddressingMode.IMP
        self._fetched = 0x00
        self._addr_abs = 0x0000
        self._addr_rel = 0x0000
        self.cycles = RESET_CYCLES
        self.clock_count = 0
        self.bus.reset()

    def irq(self) -> None:
        """Service a maskable interrupt unless the I flag is set."""

        if self.get_flag(FLAG_I):
            return
        self._enter_interrupt(IRQ_VECTOR)
        self.cycles = IRQ_CYCLES

    def nmi(self) -> None:
        """Service a non-maskable interrupt."""

        self._enter_interrupt(NMI_VECTOR)
        self.cycles = NMI_CYCLES

    # ------------------------------------------------------------------
    # Clocking

    def clock(self) -> None:
        """Advance the CPU by a single cycle."""

        if self.cycles == 0:
            self._execute_next()
        self.cycles -= 1
        self.clock_count += 1

    def complete(self) -> bool:
        """True when the current instruction has used all of its cycles."""

        return self.cycles == 0

    def step(self) -> int:
        """Run the next instruction to completion and return its cycle cost.

        Cycles still owed by an earlier instruction, interrupt or reset are
        burned first and are not included in the return value.
        """

        while self.cycles:
            self.clock()
        self.clock()
        spent = 1
        while self.cycles:
            self.clock()
            spent += 1
        return spent

    def _execute_next(self) -> None:
        pc_before = self.state.pc
        opcode = self._read(pc_before)
        self.state.pc = (pc_before + 1) & 0xFFFF

        instruction = self.instruction_table[opcode]
        self._opcode = opcode
        self._mode = instruction.mode
        self.cycles = instruction.cycles

        page_crossed = self._resolve_address(instruction.mode)
        wants_extra = self._handlers[opcode]()
        if page_crossed and wants_extra:
            self.cycles += 1

        if self.trace is not None:
            self.trace.record_step(self.state, opcode, self.cycles, mnemonic=instruction.mnemonic)
        if debug_enabled("cpu"):
            debug_log(
                "cpu",
                "pc=%04x opcode=%02x %s cycles=%d a=%02x x=%02x y=%02x sp=%02x p=%s",
                pc_before,
                opcode,
                instruction.mnemonic,
                self.cycles,
                self.state.a,
                self.state.x,
                self.state.y,
                self.state.sp,
                self.state.flags_string(),
            )

    # ------------------------------------------------------------------
    # Flag access

    def set_flag(self, flag: int, condition) -> None:
        if condition:
            self.state.status |= flag
        else:
            self.state.status &= ~flag & 0xFF

    def get_flag(self, flag: int) -> int:
        return 1 if self.state.status & flag else 0

    def _update_zn(self, value: int) -> None:
        self.set_flag(FLAG_Z, (value & 0xFF) == 0)
        self.set_flag(FLAG_N, value & 0x80)

    # ------------------------------------------------------------------
    # Addressing modes
    #
    # Each resolver consumes its operand bytes and returns True when indexing
    # carried the effective address into another page.

    def _resolve_address(self, mode: AddressingMode) -> bool:
        if mode is AddressingMode.IMP:
            self._fetched = self.state.a
            return False
        if mode is AddressingMode.IMM:
            self._addr_abs = self.state.pc
            self.state.pc = (self.state.pc + 1) & 0xFFFF
            return False
        if mode is AddressingMode.ZP0:
            self._addr_abs = self._fetch_byte()
            return False
        if mode is AddressingMode.ZPX:
            self._addr_abs = (self._fetch_byte() + self.state.x) & 0x00FF
            return False
        if mode is AddressingMode.ZPY:
            self._addr_abs = (self._fetch_byte() + self.state.y) & 0x00FF
            return False
        if mode is AddressingMode.ABS:
            self._addr_abs = self._fetch_word()
            return False
        if mode is AddressingMode.ABX:
            return self._index_absolute(self._fetch_word(), self.state.x)
        if mode is AddressingMode.ABY:
            return self._index_absolute(self._fetch_word(), self.state.y)
        if mode is AddressingMode.REL:
            offset = self._fetch_byte()
            if offset & 0x80:
                offset |= 0xFF00
            self._addr_rel = offset
            return False
        if mode is AddressingMode.IZX:
            pointer = self._fetch_byte() + self.state.x
            low = self._read(pointer & 0x00FF)
            high = self._read((pointer + 1) & 0x00FF)
            self._addr_abs = (high << 8) | low
            return False
        if mode is AddressingMode.IZY:
            pointer = self._fetch_byte()
            low = self._read(pointer)
            high = self._read((pointer + 1) & 0x00FF)
            return self._index_absolute((high << 8) | low, self.state.y)
        if mode is AddressingMode.IND:
            pointer = self._fetch_word()
            if pointer & 0x00FF == 0x00FF:
                # The high byte is fetched without carrying into the next page.
                high = self._read(pointer & 0xFF00)
            else:
                high = self._read(pointer + 1)
            self._addr_abs = (high << 8) | self._read(pointer)
            return False
        raise CPUError(f"unsupported addressing mode: {mode}")

    def _index_absolute(self, base: int, index: int) -> bool:
        self._addr_abs = (base + index) & 0xFFFF
        return (self._addr_abs & 0xFF00) != (base & 0xFF00)

    # ------------------------------------------------------------------
    # Operand helpers

    def _fetch(self) -> int:
        """Load the operand for the current instruction."""

        if self._mode is not AddressingMode.IMP:
            self._fetched = self._read(self._addr_abs)
        return self._fetched

    def _store_result(self, value: int) -> None:
        """Write a read-modify-write result back to A or memory."""

        if self._mode is AddressingMode.IMP:
            self.state.a = value & 0xFF
        else:
            self._write(self._addr_abs, value)

    def _fetch_byte(self) -> int:
        value = self._read(self.state.pc)
        self.state.pc = (self.state.pc + 1) & 0xFFFF
        return value

    def _fetch_word(self) -> int:
        low = self._fetch_byte()
        high = self._fetch_byte()
        return (high << 8) | low

    # ------------------------------------------------------------------
    # Bus helpers

    def _read(self, address: int) -> int:
        return self.bus.read(address & 0xFFFF)

    def _read_word(self, address: int) -> int:
        low = self._read(address)
        high = self._read(address + 1)
        return (high << 8) | low

    def _write(self, address: int, value: int) -> None:
        self.bus.write(address & 0xFFFF, value & 0xFF)

    # ------------------------------------------------------------------
    # Stack helpers

    def _push(self, value: int) -> None:
        self._write(STACK_BASE + self.state.sp, value)
        self.state.sp = (self.state.sp - 1) & 0xFF

    def _pull(self) -> int:
        self.state.sp = (self.state.sp + 1) & 0xFF
        return self._read(STACK_BASE + self.state.sp)

    def _push_word(self, value: int) -> None:
        self._push((value >> 8) & 0xFF)
        self._push(value & 0xFF)

    def _pull_word(self) -> int:
        low = self._pull()
        high = self._pull()
        return (high << 8) | low

    def _enter_interrupt(self, vector: int) -> None:
        self._push_word(self.state.pc)
        self.set_flag(FLAG_B, False)
        self.set_flag(FLAG_U, True)
        self._push(self.state.status)
        self.set_flag(FLAG_I, True)
        self.state.pc = self._read_word(vector)

    # ------------------------------------------------------------------
    # Arithmetic

    def _add_with_carry(self, value: int) -> None:
        a = self.state.a
        total = a + value + self.get_flag(FLAG_C)
        result = total & 0xFF
        self.set_flag(FLAG_C, total > 0xFF)
        self._update_zn(result)
        self.set_flag(FLAG_V, (a ^ value) & (a ^ result) & 0x80)
        self.state.a = result

    def _compare(self, register: int) -> None:
        operand = self._fetch()
        difference = (register - operand) & 0xFFFF
        self.set_flag(FLAG_C, register >= operand)
        self._update_zn(difference)

    def _branch_if(self, condition) -> bool:
        if condition:
            self.cycles += 1
            target = (self.state.pc + self._addr_rel) & 0xFFFF
            if (target & 0xFF00) != (self.state.pc & 0xFF00):
                self.cycles += 1
            self.state.pc = target
        return False

    # ------------------------------------------------------------------
    # Instruction handlers
    #
    # A handler returns True when it may take an extra cycle if its addressing
    # mode crossed a page.

    def op_adc(self) -> bool:
        self._add_with_carry(self._fetch())
        return True

    def op_sbc(self) -> bool:
        self._add_with_carry(self._fetch() ^ 0xFF)
        return True

    def op_and(self) -> bool:
        self.state.a &= self._fetch()
        self._update_zn(self.state.a)
        return True

    def op_ora(self) -> bool:
        self.state.a |= self._fetch()
        self._update_zn(self.state.a)
        return True

    def op_eor(self) -> bool:
        self.state.a ^= self._fetch()
        self._update_zn(self.state.a)
        return True

    def op_bit(self) -> bool:
        value = self._fetch()
        self.set_flag(FLAG_Z, (self.state.a & value) == 0)
        self.set_flag(FLAG_N, value & 0x80)
        self.set_flag(FLAG_V, value & 0x40)
        return False

    def op_asl(self) -> bool:
        value = self._fetch()
        result = (value << 1) & 0xFF
        self.set_flag(FLAG_C, value & 0x80)
        self._update_zn(result)
        self._store_result(result)
        return False

    def op_lsr(self) -> bool:
        value = self._fetch()
        result = value >> 1
        self.set_flag(FLAG_C, value & 0x01)
        self._update_zn(result)
        self._store_result(result)
        return False

    def op_rol(self) -> bool:
        value = self._fetch()
        result = ((value << 1) | self.get_flag(FLAG_C)) & 0xFF
        self.set_flag(FLAG_C, value & 0x80)
        self._update_zn(result)
        self._store_result(result)
        return False

    def op_ror(self) -> bool:
        value = self._fetch()
        result = (self.get_flag(FLAG_C) << 7) | (value >> 1)
        self.set_flag(FLAG_C, value & 0x01)
        self._update_zn(result)
        self._store_result(result)
        return False

    def op_cmp(self) -> bool:
        self._compare(self.state.a)
        return True

    def op_cpx(self) -> bool:
        self._compare(self.state.x)
        return False

    def op_cpy(self) -> bool:
        self._compare(self.state.y)
        return False

    def op_inc(self) -> bool:
        result = (self._fetch() + 1) & 0xFF
        self._write(self._addr_abs, result)
        self._update_zn(result)
        return False

    def op_dec(self) -> bool:
        result = (self._fetch() - 1) & 0xFF
        self._write(self._addr_abs, result)
        self._update_zn(result)
        return False

    def op_inx(self) -> bool:
        self.state.x = (self.state.x + 1) & 0xFF
        self._update_zn(self.state.x)
        return False

    def op_iny(self) -> bool:
        self.state.y = (self.state.y + 1) & 0xFF
        self._update_zn(self.state.y)
        return False

    def op_dex(self) -> bool:
        self.state.x = (self.state.x - 1) & 0xFF
        self._update_zn(self.state.x)
        return False

    def op_dey(self) -> bool:
        self.state.y = (self.state.y - 1) & 0xFF
        self._update_zn(self.state.y)
        return False

    def op_lda(self) -> bool:
        self.state.a = self._fetch()
        self._update_zn(self.state.a)
        return True

    def op_ldx(self) -> bool:
        self.state.x = self._fetch()
        self._update_zn(self.state.x)
        return True

    def op_ldy(self) -> bool:
        self.state.y = self._fetch()
        self._update_zn(self.state.y)
        return True

    def op_sta(self) -> bool:
        self._write(self._addr_abs, self.state.a)
        return False

    def op_stx(self) -> bool:
        self._write(self._addr_abs, self.state.x)
        return False

    def op_sty(self) -> bool:
        self._write(self._addr_abs, self.state.y)
        return False

    def op_tax(self) -> bool:
        self.state.x = self.state.a
        self._update_zn(self.state.x)
        return False

    def op_tay(self) -> bool:
        self.state.y = self.state.a
        self._update_zn(self.state.y)
        return False

    def op_tsx(self) -> bool:
        self.state.x = self.state.sp
        self._update_zn(self.state.x)
        return False

    def op_txa(self) -> bool:
        self.state.a = self.state.x
        self._update_zn(self.state.a)
        return False

    def op_txs(self) -> bool:
        self.state.sp = self.state.x
        return False

    def op_tya(self) -> bool:
        self.state.a = self.state.y
        self._update_zn(self.state.a)
        return False

    def op_pha(self) -> bool:
        self._push(self.state.a)
        return False

    def op_php(self) -> bool:
        self._push(self.state.status | FLAG_B | FLAG_U)
        return False

    def op_pla(self) -> bool:
        self.state.a = self._pull()
        self._update_zn(self.state.a)
        return False

    def op_plp(self) -> bool:
        self.state.status = self._pull()
        self.set_flag(FLAG_U, True)
        return False

    def op_jmp(self) -> bool:
        self.state.pc = self._addr_abs
        return False

    def op_jsr(self) -> bool:
        self._push_word((self.state.pc - 1) & 0xFFFF)
        self.state.pc = self._addr_abs
        return False

    def op_rts(self) -> bool:
        self.state.pc = (self._pull_word() + 1) & 0xFFFF
        return False

    def op_brk(self) -> bool:
        self.state.pc = (self.state.pc + 1) & 0xFFFF
        self.set_flag(FLAG_I, True)
        self._push_word(self.state.pc)
        self.set_flag(FLAG_B, True)
        self._push(self.state.status)
        self.set_flag(FLAG_B, False)
        self.state.pc = self._read_word(IRQ_VECTOR)
        return False

    def op_rti(self) -> bool:
        self.state.status = self._pull() & ~(FLAG_B | FLAG_U) & 0xFF
        self.state.pc = self._pull_word()
        return False

    def op_bcc(self) -> bool:
        return self._branch_if(not self.get_flag(FLAG_C))

    def op_bcs(self) -> bool:
        return self._branch_if(self.get_flag(FLAG_C))

    def op_beq(self) -> bool:
        return self._branch_if(self.get_flag(FLAG_Z))

    def op_bne(self) -> bool:
        return self._branch_if(not self.get_flag(FLAG_Z))

    def op_bmi(self) -> bool:
        return self._branch_if(self.get_flag(FLAG_N))

    def op_bpl(self) -> bool:
        return self._branch_if(not self.get_flag(FLAG_N))

    def op_bvc(self) -> bool:
        return self._branch_if(not self.get_flag(FLAG_V))

    def op_bvs(self) -> bool:
        return self._branch_if(self.get_flag(FLAG_V))

    def op_clc(self) -> bool:
        self.set_flag(FLAG_C, False)
        return False

    def op_cld(self) -> bool:
        self.set_flag(FLAG_D, False)
        return False

    def op_cli(self) -> bool:
        self.set_flag(FLAG_I, False)
        return False

    def op_clv(self) -> bool:
        self.set_flag(FLAG_V, False)
        return False

    def op_sec(self) -> bool:
        self.set_flag(FLAG_C, True)
        return False

    def op_sed(self) -> bool:
        self.set_flag(FLAG_D, True)
        return False

    def op_sei(self) -> bool:
        self.set_flag(FLAG_I, True)
        return False

    def op_nop(self) -> bool:
        return self._opcode in PAGE_PENALTY_NOPS

    def op_xxx(self) -> bool:
        """Placeholder for opcodes with no defined behaviour."""

        return False
