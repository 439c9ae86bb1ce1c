"""CPU address space with memory-mapped peripheral windows."""

from __future__ import annotations

from typing import List, Protocol

from pynes.bus import ADDRESS_SPACE, Bus, BusError


class MappedDevice(Protocol):
    """Peripheral that claims a contiguous range of CPU addresses."""

    def get_start_address(self) -> int: ...

    def get_end_address(self) -> int: ...

    def cpu_read(self, address: int, read_only: bool = False) -> int: ...

    def cpu_write(self, address: int, value: int) -> None: ...


class SystemBus(Bus):
    """Flat bus that hands registered address windows to their devices.

    Addresses outside every window fall through to the flat store. Bulk
    ``load`` and ``snapshot`` always address the store directly.
    """

    def __init__(self) -> None:
        super().__init__()
        self._devices: List[MappedDevice] = []

    def register_device(self, device: MappedDevice) -> None:
        start = device.get_start_address()
        end = device.get_end_address()
        if not 0 <= start <= end < ADDRESS_SPACE:
            raise BusError(f"device window {start:#06x}-{end:#06x} is invalid")
        for other in self._devices:
            if start <= other.get_end_address() and other.get_start_address() <= end:
                raise BusError(
                    f"device window {start:#06x}-{end:#06x} overlaps "
                    f"{other.get_start_address():#06x}-{other.get_end_address():#06x}")
        self._devices.append(device)

    def read(self, address: int) -> int:
        address &= 0xFFFF
        device = self._device_at(address)
        if device is not None:
            return device.cpu_read(address) & 0xFF
        return super().read(address)

    def write(self, address: int, value: int) -> None:
        address &= 0xFFFF
        device = self._device_at(address)
        if device is not None:
            device.cpu_write(address, value & 0xFF)
            return
        super().write(address, value)

    def _device_at(self, address: int) -> MappedDevice | None:
        for device in self._devices:
            if device.get_start_address() <= address <= device.get_end_address():
                return device
        return None
