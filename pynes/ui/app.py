"""Pygame application shell for the NES emulator.

There is no picture output: the window shows a register overlay while the
machine runs at NES frame rate. ``headless`` mode skips pygame entirely.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pynes.cpu import disassemble_one
from pynes.loader import Cartridge, load_ines_from_path
from pynes.system import Machine, MachineConfig, create_machine
from pynes.utils import debug_enabled, debug_log

_FRAME_RATE = 60
_TRACE_CAPACITY = 512
_OVERLAY_COLUMNS = 28
_OVERLAY_ROWS = 18


@dataclass
class AppConfig:
    """Configuration for the emulator frontend."""

    rom_path: Optional[Path] = None
    frames: Optional[int] = None
    headless: bool = False
    scale: int = 2


class EmulatorApp:
    """Drive a :class:`Machine` either headless or inside a pygame window."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._running = False
        self._machine: Machine | None = None
        self._overlay_font = None
        self._perf_enabled = debug_enabled("perf")
        self._frame_counter = 0

    @property
    def machine(self) -> Machine | None:
        return self._machine

    @property
    def frame_counter(self) -> int:
        return self._frame_counter

    def run(self) -> None:
        if not self._config.rom_path:
            raise RuntimeError("ROM image is required; pass --rom <path>")
        rom_path = self._config.rom_path
        if not rom_path.exists():
            raise RuntimeError(f"ROM file not found: {rom_path}")

        machine = self._create_machine(rom_path)
        self._machine = machine

        if self._config.headless:
            self._run_headless(machine)
        else:
            self._run_window(machine)

        if machine.trace is not None and debug_enabled("trace"):
            machine.trace.dump("trace", limit=64)

    def _create_machine(self, rom_path: Path) -> Machine:
        cartridge = self._load_cartridge(rom_path)
        trace_capacity = _TRACE_CAPACITY if debug_enabled("trace") else 0
        return create_machine(MachineConfig(cartridge=cartridge, trace_capacity=trace_capacity))

    def _load_cartridge(self, rom_path: Path) -> Cartridge:
        cartridge = load_ines_from_path(rom_path)
        if debug_enabled("system"):
            debug_log("system", "loaded %s mapper=%d", rom_path, cartridge.mapper_id)
        return cartridge

    def _run_headless(self, machine: Machine) -> None:
        self._running = True
        while self._running:
            self._run_frame(machine)
            if self._frames_exhausted():
                self._running = False

    def _run_window(self, machine: Machine) -> None:
        try:
            import pygame  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pygame is required to run the UI; use --headless") from exc

        pygame.init()
        pygame.display.set_caption("NES 6502 Emulator")

        font_size = max(8, 6 * self._config.scale)
        width = _OVERLAY_COLUMNS * font_size
        height = _OVERLAY_ROWS * (font_size + 2)
        screen = pygame.display.set_mode((width, height))
        clock = pygame.time.Clock()

        self._running = True
        while self._running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self._running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    self._running = False

            self._run_frame(machine)

            screen.blit(self._draw_overlay(pygame, machine, height, width), (0, 0))
            pygame.display.flip()

            if self._frames_exhausted():
                self._running = False
            clock.tick(_FRAME_RATE)

        pygame.quit()

    def _run_frame(self, machine: Machine) -> None:
        frame_start_time = time.perf_counter()
        frame_cycles = machine.run_frame()
        frame_duration = time.perf_counter() - frame_start_time
        self._frame_counter += 1

        if self._perf_enabled and frame_duration > 0:
            effective_khz = (frame_cycles / frame_duration) / 1000.0
            debug_log(
                "perf",
                "frame=%d cycles=%d frame_ms=%.3f effective_khz=%.2f",
                self._frame_counter,
                frame_cycles,
                frame_duration * 1000.0,
                effective_khz,
            )

    def _frames_exhausted(self) -> bool:
        limit = self._config.frames
        return limit is not None and self._frame_counter >= limit

    def _draw_overlay(self, pygame, machine: Machine, height: int, width: int):
        surface = pygame.Surface((width, height))
        surface.fill((0, 0, 0))

        font_size = max(8, 6 * self._config.scale)
        if self._overlay_font is None or self._overlay_font[0] != font_size:
            pygame.font.init()
            font_name = pygame.font.match_font("menlo,dejavusansmono,couriernew,consolas,monospace")
            if not font_name:
                font_name = pygame.font.get_default_font()
            self._overlay_font = (font_size, pygame.font.Font(font_name, font_size))
        font_obj = self._overlay_font[1]
        line_height = font_size + 2

        for row, line in enumerate(self.overlay_lines(machine)):
            text = font_obj.render(line, True, (255, 255, 255))
            surface.blit(text, (4, row * line_height))
        return surface

    def overlay_lines(self, machine: Machine) -> list[str]:
        """Text shown in the register overlay."""

        label_width = 8

        def fmt(label: str, value: str) -> str:
            return f"{label:<{label_width}}: {value}"

        cpu_state = machine.cpu.state
        lines = [
            fmt("FRAME", str(self._frame_counter)),
            fmt("PC", f"{cpu_state.pc:04X}"),
            fmt("A", f"{cpu_state.a:02X}"),
            fmt("X", f"{cpu_state.x:02X}"),
            fmt("Y", f"{cpu_state.y:02X}"),
            fmt("SP", f"{cpu_state.sp:02X}"),
            fmt("P", f"{cpu_state.status:02X} {cpu_state.flags_string()}"),
            fmt("CYCLES", str(machine.cpu.clock_count)),
            " ",
        ]
        address = cpu_state.pc
        for _ in range(4):
            text, length = disassemble_one(machine.bus, address)
            lines.append(text)
            address = (address + length) & 0xFFFF
        ppu = machine.ppu.debug_snapshot()
        lines.append(" ")
        lines.append(fmt("PPU", f"line={ppu['SCANLINE']} dot={ppu['CYCLE']}"))
        backdrop = machine.ppu.ppu_read(0x3F00)
        lines.append(fmt("VRAM", f"{ppu['VRAM_ADDR']:04X} ctrl={ppu['CTRL']:02X} bg={backdrop:02X}"))
        return lines
