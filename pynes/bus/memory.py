"""Flat 64KB memory bus shared by the CPU and its peripherals.

The bus owns the backing store and is the only object that touches it. Reads
never have side effects, so the same ``read`` is used for real fetches and for
diagnostic peeks (disassembly, tracing). Address decoding, mirroring and
peripheral routing are deliberately absent.
"""

from __future__ import annotations

from typing import Iterable

ADDRESS_SPACE = 0x10000


def _mask16(value: int) -> int:
    """Clamp ``value`` to the 16-bit address space."""

    return value & 0xFFFF


class BusError(Exception):
    """Raised when the bus is used outside its address space."""


class Bus:
    """Byte-addressable 64KB store with a read/write contract."""

    def __init__(self) -> None:
        self._data = bytearray(ADDRESS_SPACE)
        self.system_clock_counter = 0

    def read(self, address: int) -> int:
        return self._data[_mask16(address)]

    def write(self, address: int, value: int) -> None:
        self._data[_mask16(address)] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a little-endian word; the high byte address wraps at 0xFFFF."""

        low = self.read(address)
        high = self.read(address + 1)
        return (high << 8) | low

    def load(self, start: int, data: Iterable[int]) -> None:
        payload = bytes(data)
        if start < 0 or start + len(payload) > ADDRESS_SPACE:
            raise BusError(
                f"block of {len(payload)} bytes at {start:#06x} exceeds the address space")
        self._data[start:start + len(payload)] = payload

    def snapshot(self, start: int = 0, length: int = ADDRESS_SPACE) -> bytes:
        start = _mask16(start)
        return bytes(self._data[start:start + length])

    def reset(self) -> None:
        """Reinitialise bus bookkeeping; memory contents are preserved."""

        self.system_clock_counter = 0
