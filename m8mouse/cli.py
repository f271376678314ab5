"""Command line: show the mouse settings, list known modes, or change settings."""

from __future__ import annotations

import enum
import logging
import re
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from .device import M8Mouse, UnsupportedDeviceError, all_modes
from .hidraw import DeviceNotFoundError, HidrawDevice
from .logsetup import TRACE, configure_logging
from .memory import ModeError
from .modes import DPI_RES_COUNT, ModeKind
from .protocol import PRODUCT_ID, VENDOR_ID, ProtocolError

log = logging.getLogger(__name__)

_LINE_WIDTH = 64


class Action(enum.Enum):
    LIST = "list"
    GET = "get"
    SET = "set"
    USAGE = "usage"
    UNKNOWN = "unknown"


@dataclass
class Options:
    """What the command line asks for; mode indexes count from 0."""

    action: Action = Action.GET
    debug_level: int = logging.CRITICAL
    dpi: int | None = None
    led: int | None = None
    speed: int | None = None


_DEBUG_FLAGS = {
    "-g": logging.WARNING,
    "-g1": logging.INFO,
    "-g2": TRACE,
}

_MODE_FLAGS = {"-dpi": "dpi", "-led": "led", "-speed": "speed"}


def _leading_int(text):
    """Read a leading decimal integer the lenient way; 0 when there is none."""
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def parse_args(argv):
    """Turn the argument list (without the program name) into Options."""
    options = Options()
    args = list(argv)
    position = 0
    while position < len(args):
        option = args[position]
        argument = args[position + 1] if position + 1 < len(args) else ""
        if option == "-h":
            options.action = Action.USAGE
            return options
        if option == "-l":
            options.action = Action.LIST
            return options
        if option in _DEBUG_FLAGS:
            options.debug_level = _DEBUG_FLAGS[option]
        elif option in _MODE_FLAGS:
            if argument:
                index = _leading_int(argument) - 1
                setattr(options, _MODE_FLAGS[option], None if index == -1 else index)
            options.action = Action.SET
            position += 1
        else:
            options.action = Action.UNKNOWN
            return options
        position += 1

    if options.action is Action.SET and (
        options.dpi is None and options.led is None and options.speed is None
    ):
        options.action = Action.UNKNOWN
    return options


def format_state(mouse):
    """Return the active settings of ``mouse`` as printed by the command."""
    lines = []
    dpi_mode = mouse.active_mode(ModeKind.DPI)
    if dpi_mode is not None:
        lines.append(f"  {'DPI Mode':<15}: {dpi_mode.label}\n")
    else:
        lines.append("  DPI Mode is unknown\n")

    resolution = [f"  {'DPI Resolution':<15}: "]
    for index in range(DPI_RES_COUNT):
        mode = mouse.dpi_resolution(index)
        resolution.append(f"DPI {index + 1} [{mode.label}]" if mode is not None else "  N/A")
        if index < DPI_RES_COUNT - 1:
            resolution.append(", ")
        if index == DPI_RES_COUNT // 2 - 1:
            resolution.append("\n" + " " * 19)
    resolution.append("\n")
    lines.append("".join(resolution))

    led_mode = mouse.active_mode(ModeKind.LED)
    if led_mode is not None:
        lines.append(f"  {'LED Mode':<15}: {led_mode.label}\n")
    else:
        lines.append("  LED Mode is unknown\n")

    speed_mode = mouse.active_mode(ModeKind.SPEED)
    if speed_mode is not None:
        lines.append(f"  {'LED Speed':<15}: {speed_mode.label}\n")
    else:
        lines.append("  LED Speed is unknown\n")
    return "".join(lines)


def format_single_mode(label, modes):
    """Return one line (wrapped when long) listing the labels of ``modes``."""
    text = f"  {label:<16} ["
    line = 0
    for mode in modes:
        if len(text) // _LINE_WIDTH > line:
            text += "\n" + " " * 20
            line += 1
        text += f"{mode.label}, "
    return text[:-2] + "]\n"


def format_modes():
    """Return the listing of every known mode."""
    return "Known modes\n" + "".join(
        format_single_mode(label, all_modes(kind))
        for label, kind in (
            ("DPI modes", ModeKind.DPI),
            ("DPI resolution", ModeKind.DPI_RES),
            ("LED modes", ModeKind.LED),
            ("LED speeds", ModeKind.SPEED),
        )
    )


def usage():
    """Return the help text."""
    return (
        "Usage: \n"
        "    m8mouser \n"
        "    m8mouser -l \n"
        "    m8mouser [-dpi D | -led L | -speed S]\n"
        "    \n"
        "    Options: \n"
        "       -l     list known modes and values\n"
        "       -dpi   set DPI to this index (from known modes) \n"
        "       -led   set LED mode to this index (from known modes) \n"
        "       -speed set LED speed to this index (from known modes) \n"
        "       -g     print debug messages\n"
        "       -h     help message (this one)\n"
        "\n"
    )


def _setup_logging(level):
    if level != TRACE:
        configure_logging(level)
        return
    stamp = time.strftime("%Y%m%d-%H%M%S")
    logfile = Path(f"m8debug-{stamp}.log")
    with logfile.open("a", encoding="utf-8") as handle:
        handle.write("\n=================================\n")
    configure_logging(logging.INFO, logfile)


def _query(mouse):
    try:
        mouse.query()
    except (ProtocolError, UnsupportedDeviceError) as err:
        log.warning("device query failed: %s", err)


def main(argv=None):
    """Run the command; return the exit status."""
    if argv is None:
        argv = sys.argv[1:]
    options = parse_args(argv)

    if options.action is Action.LIST:
        print(format_modes(), end="")
        return 0
    if options.action in (Action.USAGE, Action.UNKNOWN):
        print(usage(), end="")
        return 1

    _setup_logging(options.debug_level)

    try:
        device = HidrawDevice.open()
    except (DeviceNotFoundError, OSError) as err:
        log.error("init_device: %s", err)
        print("Error initialising device. May not be connected or no user permission")
        print(f"      - check that device {VENDOR_ID:04x}:{PRODUCT_ID:04x} is connected to usb (lsusb)")
        print("      - run with sudo or add uaccess to udev rules (see README.md)")
        return 1

    with device:
        mouse = M8Mouse(device)
        print("Getting device modes")
        _query(mouse)
        print(format_state(mouse), end="")

        if options.action is Action.SET:
            try:
                mouse.set_modes(options.dpi, options.led, options.speed)
            except ModeError:
                return 0
            print("Updating device modes")
            try:
                mouse.update()
            except (ProtocolError, UnsupportedDeviceError) as err:
                log.warning("device update failed: %s", err)
            print("Refreshing device modes")
            _query(mouse)
            print(format_state(mouse), end="")
    return 0