"""Mode tables and memory layout of the mouse settings."""

from __future__ import annotations

import enum
from dataclasses import dataclass

DPI_ADDR = 0x30
DPI_MODE_MASK = 0x0F

DPI_RES_ADDR = 0x06
DPI_RES_COUNT = 6

LED_ADDR = 0x32
LED_MODE_MASK = 0x0F
LED_SPEED_MASK = 0xF0


@dataclass(frozen=True)
class Mode:
    """A named setting and the byte value the device stores for it."""

    label: str
    value: int

    def __str__(self):
        return self.label


class ModeKind(enum.Enum):
    DPI = "dpi"
    DPI_RES = "dpi_res"
    LED = "led"
    SPEED = "speed"


_DPI_MODES = (
    Mode("1", 0x00),
    Mode("2", 0x01),
    Mode("3", 0x02),
    Mode("4", 0x03),
    Mode("5", 0x04),
    Mode("6", 0x05),
)

_DPI_RES_MODES = (
    Mode("1 (500)", 0x01),
    Mode("2 (800)", 0x02),
    Mode("3 (1000)", 0x03),
    Mode("4 (1200)", 0x04),
    Mode("5 (1600)", 0x05),
    Mode("6 (2000)", 0x06),
    Mode("7 (2400)", 0x07),
    Mode("8 (3200)", 0x08),
    Mode("9 (4000)", 0x09),
    Mode("10 (4800)", 0x0A),
    Mode("11 (6400)", 0x0B),
    Mode("12 (8000)", 0x0C),
)

_LED_MODES = (
    Mode("1 (DPI)", 0x01),
    Mode("2 (Multicolour)", 0x02),
    Mode("3 (Rainbow)", 0x03),
    Mode("4 (Flow)", 0x04),
    Mode("5 (Waltz)", 0x05),
    Mode("6 (Four Seasons)", 0x06),
    Mode("7 (Off)", 0x07),
)

_LED_SPEEDS = (
    Mode("1", 0xE0),
    Mode("2", 0xC0),
    Mode("3", 0xA0),
    Mode("4", 0x80),
    Mode("5", 0x60),
    Mode("6", 0x40),
    Mode("7", 0x20),
    Mode("8", 0x00),
)

_TABLES = {
    ModeKind.DPI: _DPI_MODES,
    ModeKind.DPI_RES: _DPI_RES_MODES,
    ModeKind.LED: _LED_MODES,
    ModeKind.SPEED: _LED_SPEEDS,
}


def modes_for(kind):
    """Return the ordered table of known modes of the given kind."""
    return _TABLES[ModeKind(kind)]