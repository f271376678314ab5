"""Access to the mouse through the Linux hidraw interface."""

from __future__ import annotations

import fcntl
import logging
import os
import re
from pathlib import Path

from .protocol import PRODUCT_ID, VENDOR_ID

SYSFS_ROOT = Path("/sys/class/hidraw")
DEV_DIR = Path("/dev")

_IOC_WRITE = 1
_IOC_READ = 2

log = logging.getLogger(__name__)


def _ioc(direction, kind, number, size):
    return (direction << 30) | (size << 16) | (ord(kind) << 8) | number


def _hidiocsfeature(length):
    return _ioc(_IOC_WRITE | _IOC_READ, "H", 0x06, length)


def _hidiocgfeature(length):
    return _ioc(_IOC_WRITE | _IOC_READ, "H", 0x07, length)


class DeviceNotFoundError(LookupError):
    """Raised when no hidraw device has the requested vendor and product id."""


def _read_ids(uevent):
    for line in uevent.read_text(encoding="utf-8", errors="replace").splitlines():
        key, _, value = line.partition("=")
        if key == "HID_ID":
            parts = value.strip().split(":")
            if len(parts) == 3:
                return int(parts[1], 16), int(parts[2], 16)
    return None


def _node_order(path):
    match = re.search(r"(\d+)$", path.name)
    return (int(match.group(1)) if match else -1, path.name)


def find_device(vendor_id=VENDOR_ID, product_id=PRODUCT_ID, root=SYSFS_ROOT):
    """Return the device node of the first hidraw device with the given ids."""
    root = Path(root)
    try:
        entries = sorted(root.iterdir(), key=_node_order)
    except OSError as err:
        raise DeviceNotFoundError(f"cannot list hidraw devices in {root}") from err
    for entry in entries:
        try:
            ids = _read_ids(entry / "device" / "uevent")
        except (OSError, ValueError):
            continue
        if ids == (vendor_id, product_id):
            node = DEV_DIR / entry.name
            log.info("init_device: Target Device Found at %s!!", node)
            return node
    log.error("init_device: Error, target device not found")
    raise DeviceNotFoundError(f"device {vendor_id:04x}:{product_id:04x} not found")


class HidrawDevice:
    """An open hidraw node that exchanges feature reports."""

    def __init__(self, path):
        self.path = Path(path)
        self._fd = os.open(self.path, os.O_RDWR)

    @classmethod
    def open(cls, vendor_id=VENDOR_ID, product_id=PRODUCT_ID, root=SYSFS_ROOT):
        """Find the device with the given ids and open it."""
        return cls(find_device(vendor_id, product_id, root))

    @property
    def closed(self):
        return self._fd is None

    def _require_open(self):
        if self._fd is None:
            raise ValueError("device is closed")
        return self._fd

    def send_feature_report(self, data):
        """Send a feature report; return the number of bytes written."""
        fd = self._require_open()
        buffer = bytearray(data)
        return fcntl.ioctl(fd, _hidiocsfeature(len(buffer)), buffer, True)

    def get_feature_report(self, report_id, length):
        """Read a feature report, starting with ``report_id``, of up to ``length`` bytes."""
        fd = self._require_open()
        buffer = bytearray(length)
        buffer[0] = report_id
        count = fcntl.ioctl(fd, _hidiocgfeature(length), buffer, True)
        return bytes(buffer[:count])

    def close(self):
        if self._fd is not None:
            log.info("device_shutdown: Closing device")
            os.close(self._fd)
            self._fd = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()