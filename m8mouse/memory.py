"""In-memory copy of the mouse's settings memory."""

from __future__ import annotations

import logging

from .logsetup import TRACE

PACKET_SIZE = 8
PAYLOAD_SIZE = PACKET_SIZE - 2
MEMORY_BUFFER_SIZE = 512
DUMP_WIDTH = 16

log = logging.getLogger(__name__)


class MemoryOverflowError(Exception):
    """Raised when memory would be read or written past its limits."""


class ModeError(ValueError):
    """Raised when a mode cannot be read from or written to memory."""


class DeviceMemory:
    """Settings memory as downloaded from the device, a packet payload at a time."""

    def __init__(self, data=b""):
        data = bytes(data)
        if len(data) > MEMORY_BUFFER_SIZE:
            raise MemoryOverflowError(
                f"{len(data)} bytes do not fit a {MEMORY_BUFFER_SIZE}-byte buffer"
            )
        self._buffer = bytearray(MEMORY_BUFFER_SIZE)
        self._buffer[: len(data)] = data
        self._size = len(data)

    @property
    def size(self):
        return self._size

    @property
    def data(self):
        """The stored bytes."""
        return bytes(self._buffer[: self._size])

    def __len__(self):
        return self._size

    def clear(self):
        """Forget all stored bytes."""
        log.log(TRACE, "clearing memory buffer")
        self._buffer[:] = bytes(MEMORY_BUFFER_SIZE)
        self._size = 0

    def store(self, packet):
        """Append the payload of a received packet (bytes 1 to 6)."""
        if len(packet) < PACKET_SIZE:
            raise ValueError(f"packet must be {PACKET_SIZE} bytes, got {len(packet)}")
        if self._size + PAYLOAD_SIZE > MEMORY_BUFFER_SIZE:
            log.warning(
                "skipping store due to overflow, memsize: %i, adding %i, max is %i",
                self._size, PAYLOAD_SIZE, MEMORY_BUFFER_SIZE,
            )
            raise MemoryOverflowError("device memory buffer is full")
        self._buffer[self._size : self._size + PAYLOAD_SIZE] = packet[1 : 1 + PAYLOAD_SIZE]
        self._size += PAYLOAD_SIZE

    def retrieve(self, index):
        """Return the payload-sized chunk starting at ``index`` for an upload packet."""
        if index < 0 or index > self._size:
            log.warning(
                "skipping retrieve due to overflow, memsize: %i, getting %i from index %i",
                self._size, PAYLOAD_SIZE, index,
            )
            raise MemoryOverflowError(f"index {index} is past the stored {self._size} bytes")
        chunk = bytes(self._buffer[index : index + PAYLOAD_SIZE])
        return chunk.ljust(PAYLOAD_SIZE, b"\x00")

    def _check_address(self, address):
        if address < 0 or address + 1 >= self._size + 1 and self._size <= address:
            raise ModeError(f"address {address:#04x} is outside the stored memory")

    def mode_index(self, address, mask, modes):
        """Return the index in ``modes`` of the value stored under ``mask`` at ``address``.

        The byte after ``address`` holds the inverted value as a check.
        """
        if address < 0 or self._size <= address:
            raise ModeError(f"address {address:#04x} is outside the stored memory")
        value = self._buffer[address] & mask
        check = self._buffer[address + 1] & mask
        if (value | check) != mask:
            log.debug(
                "value and checksum do not match, value: %02x, check: %02x, mask: %02x",
                value, check, mask,
            )
            raise ModeError(f"checksum mismatch at {address:#04x}")
        for index, mode in enumerate(modes):
            if mode.value == value:
                return index
        raise ModeError(f"unknown value {value:#04x} at {address:#04x}")

    def dpires_index(self, address, modes):
        """Return the index in ``modes`` of the byte stored at ``address``."""
        if address < 0 or self._size <= address:
            raise ModeError(f"address {address:#04x} is outside the stored memory")
        value = self._buffer[address]
        for index, mode in enumerate(modes):
            if mode.value == value:
                return index
        raise ModeError(f"unknown resolution value {value:#04x} at {address:#04x}")

    def set_mode(self, address, mask, modes, index):
        """Write ``modes[index]`` under ``mask`` at ``address`` and its check byte."""
        if address < 0 or self._size <= address:
            raise ModeError(f"address {address:#04x} is outside the stored memory")
        if not 0 <= index < len(modes):
            raise ModeError(f"mode index {index} is out of range")
        value = modes[index].value
        current = self._buffer[address]
        current_check = self._buffer[address + 1]
        new_value = ((current & ~mask) | (value & mask)) & 0xFF
        new_check = ((current_check & ~mask) | (~value & mask)) & 0xFF
        log.debug(
            "setting current %02x to %02x  -  check %02x to %02x",
            current, new_value, current_check, new_check,
        )
        self._buffer[address] = new_value
        self._buffer[address + 1] = new_check

    def dump(self, width=DUMP_WIDTH):
        """Return a hex listing of the stored bytes, ``width`` bytes per row."""
        if width <= 0:
            raise ValueError("width must be positive")
        parts = []
        for offset, byte in enumerate(self.data):
            column = offset % width
            if column == 0:
                parts.append(f"#{offset:02X}: ")
            parts.append(f"{byte:02X} ")
            if column == width // 2 - 1:
                parts.append("- ")
            if column == width - 1:
                parts.append("\n")
        return "".join(parts)