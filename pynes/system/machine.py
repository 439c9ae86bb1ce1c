"""NES machine assembly and master clock."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pynes.bus import Bus
from pynes.cpu import MOS6502
from pynes.loader import Cartridge
from pynes.utils import TraceRecorder, debug_enabled, debug_log
from pynes.video import PPU2C02

from .bus import SystemBus

PRG_LOW_BANK = 0x8000
PRG_HIGH_BANK = 0xC000
TRAINER_ADDRESS = 0x7000

# The CPU runs at a third of the PPU dot clock.
CPU_CLOCK_DIVIDER = 3


@dataclass
class MachineConfig:
    """Runtime configuration for the NES machine."""

    cartridge: Optional[Cartridge] = None
    trace_capacity: int = 0


@dataclass
class Machine:
    """Aggregates the core components of the emulator."""

    bus: Bus
    cpu: MOS6502
    ppu: PPU2C02
    cartridge: Optional[Cartridge] = None
    trace: Optional[TraceRecorder] = None

    def reset(self) -> None:
        self.ppu.reset()
        self.cpu.reset()

    def clock(self) -> None:
        """One master tick: the PPU every call, the CPU every third call."""

        self.ppu.clock()
        if self.bus.system_clock_counter % CPU_CLOCK_DIVIDER == 0:
            self.cpu.clock()
        if self.ppu.nmi and self.cpu.complete():
            self.ppu.nmi = False
            self.cpu.nmi()
        self.bus.system_clock_counter += 1

    def run_frame(self) -> int:
        """Clock until the PPU finishes a frame; return the CPU cycles spent."""

        start = self.cpu.clock_count
        while not self.ppu.frame_complete:
            self.clock()
        self.ppu.frame_complete = False
        return self.cpu.clock_count - start


def install_cartridge(bus: Bus, cartridge: Cartridge) -> None:
    """Copy the cartridge PRG image (and trainer) into CPU address space.

    The first PRG bank lands at 0x8000 and the last one at 0xC000, so a single
    16KB bank appears twice. Bank switching is not emulated.
    """

    if cartridge.trainer is not None:
        bus.load(TRAINER_ADDRESS, cartridge.trainer)

    banks = cartridge.header.prg_banks
    if banks == 0:
        return
    bus.load(PRG_LOW_BANK, cartridge.prg_bank(0))
    bus.load(PRG_HIGH_BANK, cartridge.prg_bank(banks - 1))

    if cartridge.mapper_id != 0 and debug_enabled("cart"):
        debug_log(
            "cart",
            "mapper %d is not emulated; loaded banks 0 and %d only",
            cartridge.mapper_id,
            banks - 1,
        )


def create_machine(config: MachineConfig) -> Machine:
    """Instantiate a NES machine with the requested configuration."""

    bus = SystemBus()
    ppu = PPU2C02()
    bus.register_device(ppu)

    if config.cartridge is not None:
        install_cartridge(bus, config.cartridge)
        ppu.connect_cartridge(config.cartridge)

    trace = TraceRecorder(config.trace_capacity) if config.trace_capacity > 0 else None
    cpu = MOS6502(bus, trace=trace)
    cpu.reset()

    if debug_enabled("system"):
        debug_log(
            "system",
            "reset pc=%04x cartridge=%s",
            cpu.state.pc,
            config.cartridge.name if config.cartridge else "-",
        )

    return Machine(bus=bus, cpu=cpu, ppu=ppu, cartridge=config.cartridge, trace=trace)
