"""The mouse: reading, changing and writing back its settings."""

from __future__ import annotations

import logging

from .logsetup import TRACE
from .memory import DeviceMemory, ModeError
from .modes import (
    DPI_ADDR,
    DPI_MODE_MASK,
    DPI_RES_ADDR,
    DPI_RES_COUNT,
    LED_ADDR,
    LED_MODE_MASK,
    LED_SPEED_MASK,
    ModeKind,
    modes_for,
)
from .protocol import DELAY_AFTER_SET, Session

log = logging.getLogger(__name__)

_SETTINGS = {
    ModeKind.DPI: (DPI_ADDR, DPI_MODE_MASK),
    ModeKind.LED: (LED_ADDR, LED_MODE_MASK),
    ModeKind.SPEED: (LED_ADDR, LED_SPEED_MASK),
}


class UnsupportedDeviceError(Exception):
    """Raised when the device memory does not hold settings this package understands."""


def all_modes(kind):
    """Return every known mode of the given kind."""
    return modes_for(kind)


class M8Mouse:
    """Settings of one mouse, reached through a feature-report transport."""

    def __init__(self, transport, delay=DELAY_AFTER_SET):
        self.session = Session(transport, delay)
        self.memory = DeviceMemory()
        self.confirmed = False
        self._active = dict.fromkeys(_SETTINGS)
        self._dpires = [None] * DPI_RES_COUNT

    def query(self):
        """Download the device memory and read the active settings from it."""
        log.info("device_query: downloading program data")
        if len(self.memory):
            self.memory.clear()
        self.session.handshake()
        self.session.download(self.memory)
        self.session.hangup()
        log.info("device_query: download done!")
        if log.isEnabledFor(TRACE):
            log.log(TRACE, "device memory, size %i\n%s", self.memory.size, self.memory.dump())
        try:
            self.update_state()
        except UnsupportedDeviceError:
            log.error("device_query: device doesn't show supported states, not confirmed.")
            self.confirmed = False
            raise
        self.confirmed = True

    def update(self):
        """Upload the memory, with any changed settings, back to the device."""
        log.info("device_update: uploading program data")
        if not self.confirmed:
            raise UnsupportedDeviceError("device has not been confirmed by a query")
        self.session.handshake()
        self.session.upload(self.memory)
        self.session.hangup()
        log.info("device_update: upload done!")

    def set_modes(self, dpi=None, led=None, speed=None):
        """Change settings in memory by mode index; None or a negative index leaves one alone."""
        for kind, index in ((ModeKind.DPI, dpi), (ModeKind.LED, led), (ModeKind.SPEED, speed)):
            if index is None or index < 0:
                continue
            address, mask = _SETTINGS[kind]
            try:
                self.memory.set_mode(address, mask, modes_for(kind), index)
            except ModeError as err:
                log.error("Invalid %s mode requested", kind.value)
                raise ModeError(f"invalid {kind.value} mode index {index}") from err

    def _read(self, kind):
        address, mask = _SETTINGS[kind]
        try:
            return self.memory.mode_index(address, mask, modes_for(kind))
        except ModeError:
            return None

    def _read_dpires(self, offset):
        try:
            return self.memory.dpires_index(DPI_RES_ADDR + offset, modes_for(ModeKind.DPI_RES))
        except ModeError:
            return None

    def update_state(self):
        """Read the active settings from memory."""
        log.log(TRACE, "device_update_state: refreshing device state")
        self._active = {kind: self._read(kind) for kind in _SETTINGS}
        self._dpires = [self._read_dpires(offset) for offset in range(DPI_RES_COUNT)]
        log.log(
            TRACE, "device_update_state: active modes are dpi %s, led %s, speed %s",
            self._active[ModeKind.DPI], self._active[ModeKind.LED], self._active[ModeKind.SPEED],
        )
        missing = [kind.value for kind, index in self._active.items() if index is None]
        if missing:
            raise UnsupportedDeviceError(f"unrecognised settings: {', '.join(missing)}")

    def active_mode(self, kind):
        """Return the active mode of a kind, or None if it is unknown."""
        kind = ModeKind(kind)
        index = self._active.get(kind)
        if index is None:
            return None
        return modes_for(kind)[index]

    def dpi_resolution(self, index):
        """Return the resolution set for DPI level ``index`` (from 0), or None."""
        if not 0 <= index < DPI_RES_COUNT:
            return None
        value = self._dpires[index]
        if value is None:
            return None
        return modes_for(ModeKind.DPI_RES)[value]