"""Ring buffer of recent CPU steps for post-mortem diagnostics."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, Sequence

from .debug import debug_log


@dataclass(frozen=True)
class TraceEntry:
    """Register file captured after one instruction has executed."""

    pc: int
    opcode: int | None
    mnemonic: str
    cycles: int
    a: int
    x: int
    y: int
    sp: int
    status: int
    note: str = ""

    def format(self) -> str:
        opcode = "--" if self.opcode is None else f"{self.opcode:02X}"
        return (
            f"pc={self.pc:04X} opcode={opcode} {self.mnemonic or '?':<3} "
            f"cycles={self.cycles:02d} A={self.a:02X} X={self.x:02X} Y={self.y:02X} "
            f"P={self.status:02X} SP={self.sp:02X} note={self.note or '-'}"
        )


class TraceRecorder:
    """Keep the last ``capacity`` CPU steps, oldest first."""

    def __init__(self, capacity: int = 256) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._entries: Deque[TraceEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def __len__(self) -> int:
        return len(self._entries)

    def record_step(
        self,
        cpu_state,
        opcode: int | None,
        cycles: int,
        *,
        mnemonic: str = "",
        note: str = "",
    ) -> None:
        """Append a snapshot of ``cpu_state``; any object with 6502 registers works."""

        self._entries.append(
            TraceEntry(
                pc=cpu_state.pc & 0xFFFF,
                opcode=None if opcode is None else opcode & 0xFF,
                mnemonic=mnemonic,
                cycles=cycles,
                a=cpu_state.a & 0xFF,
                x=cpu_state.x & 0xFF,
                y=cpu_state.y & 0xFF,
                sp=cpu_state.sp & 0xFF,
                status=cpu_state.status & 0xFF,
                note=note,
            )
        )

    def entries(self, limit: int | None = None) -> Iterator[TraceEntry]:
        """Yield the newest ``limit`` entries (all when ``None``) in execution order."""

        skip = 0 if limit is None else max(len(self._entries) - max(limit, 0), 0)
        for position, entry in enumerate(self._entries):
            if position >= skip:
                yield entry

    def last_entry(self) -> TraceEntry | None:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def format_entries(self, limit: int | None = None) -> Sequence[str]:
        return [entry.format() for entry in self.entries(limit)]

    def dump(self, category: str, limit: int | None = None) -> None:
        for line in self.format_entries(limit):
            debug_log(category, line)
