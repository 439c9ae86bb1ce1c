"""Frontend for the NES emulator."""

from .app import AppConfig, EmulatorApp

__all__ = [
    "AppConfig",
    "EmulatorApp",
]
