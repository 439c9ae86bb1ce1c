"""NES system assembly helpers."""

from __future__ import annotations

from .bus import SystemBus
from .machine import Machine, MachineConfig, create_machine, install_cartridge

__all__ = [
    "MachineConfig",
    "Machine",
    "SystemBus",
    "create_machine",
    "install_cartridge",
]
