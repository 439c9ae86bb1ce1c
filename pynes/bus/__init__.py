"""Bus-related helpers for the NES emulator."""

from .memory import ADDRESS_SPACE, Bus, BusError

__all__ = [
    "ADDRESS_SPACE",
    "Bus",
    "BusError",
]
