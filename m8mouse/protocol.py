"""Feature-report protocol spoken by the mouse: handshake, download, upload, hangup."""

from __future__ import annotations

import logging
import time
from typing import Protocol

from .memory import PACKET_SIZE, PAYLOAD_SIZE, MemoryOverflowError

VENDOR_ID = 0x1BCF
PRODUCT_ID = 0x08A0

OUT_RID = 0x04
INN_RID = 0x04
TERMINATOR = 0xCC
END_OF_DATA = 0xEE

TRANSFER_COUNT = 43
DELAY_AFTER_SET = 0.014

log = logging.getLogger(__name__)


def _packet(*values):
    return bytes(values)


HANDSHAKE_OUT = (
    _packet(OUT_RID, 0x01, 0, 0, 0, 0, 0, 0),
    _packet(OUT_RID, 0x03, 0, 0, 0, 0, 0, 0),
)
HANDSHAKE_IN = (
    _packet(INN_RID, 0xA6, 0, 0, 0, 0, 0, TERMINATOR),
    _packet(INN_RID, 0xAA, 0x0E, 0xFD, 0, 0, 0, TERMINATOR),
)

DOWNLOAD_START_OUT = (
    _packet(OUT_RID, 0x04, 0x36, 0, 0x02, 0, 0, 0),
    _packet(OUT_RID, 0x05, 0, 0, 0, 0, 0, 0),
    _packet(OUT_RID, 0x04, 0, 0, 0xFF, 0, 0, 0),
)
DOWNLOAD_START_IN = (
    _packet(INN_RID, 0xAA, 0x0E, 0xFD, 0, 0, 0, TERMINATOR),
    _packet(INN_RID, 0xFF, 0xFF, 0, 0, 0, 0, TERMINATOR),
    _packet(INN_RID, 0xFF, 0xFF, 0, 0, 0, 0, TERMINATOR),
)
DOWNLOAD_OUT = _packet(OUT_RID, 0x05, 0, 0, 0, 0, 0, 0)

UPLOAD_START_OUT = (_packet(OUT_RID, 0x06, 0, 0, 0xFF, 0, 0, 0),)
UPLOAD_START_IN = (_packet(INN_RID, 0xAA, 0x0E, 0xFD, 0, 0, 0, TERMINATOR),)
UPLOAD_OUT = _packet(OUT_RID, 0x07, 0, 0, 0, 0, 0, 0)

HANGUP_OUT = (
    _packet(OUT_RID, 0x08, 0, 0, 0, 0, 0, 0),
    _packet(OUT_RID, 0x02, 0, 0, 0, 0, 0, 0),
)
HANGUP_IN = (
    _packet(INN_RID, 0xFD, 0xFF, 0xFF, 0, 0, 0, TERMINATOR),
    _packet(INN_RID, 0xFC, 0, 0, 0x01, 0, 0, TERMINATOR),
)


class Transport(Protocol):
    """Anything that exchanges HID feature reports with the mouse."""

    def send_feature_report(self, data):
        """Send a feature report and return the number of bytes written."""

    def get_feature_report(self, report_id, length):
        """Read a feature report of ``length`` bytes and return it."""


class ProtocolError(Exception):
    """Raised when an exchange with the device fails."""


class SendError(ProtocolError):
    """Raised when a packet could not be sent."""


class ReceiveError(ProtocolError):
    """Raised when a packet could not be received."""


def format_packet(packet):
    """Return the packet as upper-case hex without separators."""
    return bytes(packet).hex().upper()


class Session:
    """Runs the command sequences of the protocol over a transport."""

    def __init__(self, transport, delay=DELAY_AFTER_SET):
        self.transport = transport
        self.delay = delay

    def _wait(self):
        if self.delay > 0:
            time.sleep(self.delay)

    def send(self, packet):
        """Send one packet as a feature report."""
        packet = bytes(packet)
        log.debug("send_packet: SEND: %s", format_packet(packet))
        try:
            sent = self.transport.send_feature_report(packet)
        except OSError as err:
            log.error("send_packet: error writing data: %s", err)
            raise SendError(f"sending packet failed: {err}") from err
        if sent != PACKET_SIZE:
            log.error(
                "send_packet: Error with written data, sent %i, actual: %i", PACKET_SIZE, sent
            )
            raise SendError(f"sent {sent} bytes instead of {PACKET_SIZE}")

    def receive(self, expected=None):
        """Read one packet; a mismatch with ``expected`` is only logged."""
        try:
            data = bytes(self.transport.get_feature_report(INN_RID, PACKET_SIZE))
        except OSError as err:
            log.error("recv_packet: Error receiving data: %s", err)
            raise ReceiveError(f"receiving packet failed: {err}") from err
        if len(data) != PACKET_SIZE:
            log.error("recv_packet: Error receiving data, return: %i", len(data))
            raise ReceiveError(f"received {len(data)} bytes instead of {PACKET_SIZE}")
        if expected is not None and data != bytes(expected):
            log.debug(
                "recv_packet: RECV: %s  -  MISMATCH: %s",
                format_packet(data), format_packet(expected),
            )
        else:
            log.debug("recv_packet: RECV: %s", format_packet(data))
        return data

    def _transact(self, packet, expected=None):
        self.send(packet)
        self._wait()
        return self.receive(expected)

    def handshake(self):
        """Open a command exchange with the device."""
        log.info("command_handshake: Sending HANDSHAKE")
        for packet, expected in zip(HANDSHAKE_OUT, HANDSHAKE_IN):
            self._transact(packet, expected)

    def hangup(self):
        """Close a command exchange; an unterminated reply is read once more."""
        log.info("command_hangup: Sending HANGUP")
        for step, (packet, expected) in enumerate(zip(HANGUP_OUT, HANGUP_IN)):
            reply = self._transact(packet, expected)
            if reply[-1] == TERMINATOR:
                continue
            log.log(5, "command_hangup: unterminated response during hangup %i, requesting more", step)
            try:
                reply = self.receive(expected)
            except ReceiveError:
                reply = b""
            if not reply or reply[-1] != TERMINATOR:
                log.debug(
                    "command_hangup: still unterminated response during hangup %i, moving on", step
                )

    def download(self, memory):
        """Read the device memory into ``memory``; return the number of packets stored."""
        log.info("command_download: Sending INIT_DOWNLOAD")
        for packet, expected in zip(DOWNLOAD_START_OUT, DOWNLOAD_START_IN):
            self._transact(packet, expected)

        log.info("command_download: Sending DOWNLOAD")
        stored = 0
        for step in range(TRANSFER_COUNT):
            try:
                self.send(DOWNLOAD_OUT)
            except SendError:
                log.error("command_download: Error sending query_get buffer %i", step)
            self._wait()
            reply = self.receive()
            if reply[-1] == END_OF_DATA:
                log.info(
                    "command_download: unexpected termination, probably smaller mem, stopping at %i",
                    step,
                )
                break
            try:
                memory.store(reply)
            except MemoryOverflowError as err:
                raise ProtocolError(f"cannot store device memory at packet {step}") from err
            stored += 1
        return stored

    def upload(self, memory):
        """Write ``memory`` to the device; each packet must be echoed back."""
        log.info("command_upload: Sending INIT_UPLOAD")
        for packet, expected in zip(UPLOAD_START_OUT, UPLOAD_START_IN):
            self._transact(packet, expected)

        log.info("command_upload: Sending UPLOAD")
        for step in range(TRANSFER_COUNT):
            try:
                payload = memory.retrieve(step * PAYLOAD_SIZE)
            except MemoryOverflowError:
                payload = bytes(PAYLOAD_SIZE)
            packet = UPLOAD_OUT[:2] + payload
            reply = self._transact(packet)
            if reply[-1] != TERMINATOR:
                log.debug(
                    "command_upload: unexpected received termination, looking for %02x, but got %02x",
                    TERMINATOR, reply[-1],
                )
            if packet[2:] != reply[1 : 1 + PAYLOAD_SIZE]:
                log.debug("command_upload: sent/recv buffers don't match")
                log.debug("SENT: %s  -  RECV: %s", format_packet(packet), format_packet(reply))
                log.debug("command_upload: stopping at %i", step)
                raise ProtocolError(f"device did not echo upload packet {step}")