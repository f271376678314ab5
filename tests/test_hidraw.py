from pathlib import Path
from unittest import mock

import pytest

from m8mouse.hidraw import DeviceNotFoundError, HidrawDevice, find_device


def add_node(root, name, hid_id):
    device = root / name / "device"
    device.mkdir(parents=True)
    (device / "uevent").write_text(
        f"DRIVER=hid-generic\nHID_ID={hid_id}\nHID_NAME=Made Up Mouse\n"
    )


def test_find_device_matches_ids(tmp_path):
    add_node(tmp_path, "hidraw0", "0003:0000AAAA:0000BBBB")
    add_node(tmp_path, "hidraw1", "0003:00001BCF:000008A0")
    assert find_device(0x1BCF, 0x08A0, tmp_path) == Path("/dev/hidraw1")


def test_find_device_prefers_lowest_number(tmp_path):
    add_node(tmp_path, "hidraw10", "0003:00001BCF:000008A0")
    add_node(tmp_path, "hidraw2", "0003:00001BCF:000008A0")
    assert find_device(0x1BCF, 0x08A0, tmp_path).name == "hidraw2"


def test_find_device_skips_nodes_without_uevent(tmp_path):
    (tmp_path / "hidraw0").mkdir()
    add_node(tmp_path, "hidraw3", "0003:00001BCF:000008A0")
    assert find_device(0x1BCF, 0x08A0, tmp_path).name == "hidraw3"


def test_find_device_not_found(tmp_path):
    add_node(tmp_path, "hidraw0", "0003:0000AAAA:0000BBBB")
    with pytest.raises(DeviceNotFoundError):
        find_device(0x1BCF, 0x08A0, tmp_path)


def test_find_device_missing_root(tmp_path):
    with pytest.raises(DeviceNotFoundError):
        find_device(0x1BCF, 0x08A0, tmp_path / "absent")


def test_open_without_device(tmp_path):
    with pytest.raises(DeviceNotFoundError):
        HidrawDevice.open(0x1BCF, 0x08A0, tmp_path)


def test_send_feature_report_uses_ioctl(tmp_path):
    node = tmp_path / "node"
    node.write_bytes(b"")
    packet = bytes([4, 1, 0, 0, 0, 0, 0, 0])
    with HidrawDevice(node) as device, mock.patch("fcntl.ioctl", return_value=8) as ioctl:
        assert device.send_feature_report(packet) == 8
        request = ioctl.call_args[0][1]
        sent = ioctl.call_args[0][2]
    assert request == 0xC0084806
    assert bytes(sent) == packet


def test_get_feature_report_returns_buffer(tmp_path):
    node = tmp_path / "node"
    node.write_bytes(b"")
    reply = bytes([4, 0xA6, 0, 0, 0, 0, 0, 0xCC])
    seen = {}

    def fake_ioctl(fd, request, buffer, mutate):
        seen["request"] = request
        seen["first"] = buffer[0]
        buffer[:] = reply
        return len(reply)

    with HidrawDevice(node) as device, mock.patch("fcntl.ioctl", side_effect=fake_ioctl):
        assert device.get_feature_report(4, 8) == reply
    assert seen == {"request": 0xC0084807, "first": 4}


def test_ioctl_on_plain_file_fails(tmp_path):
    node = tmp_path / "node"
    node.write_bytes(b"")
    with HidrawDevice(node) as device:
        with pytest.raises(OSError):
            device.send_feature_report(bytes(8))


def test_closed_after_context(tmp_path):
    node = tmp_path / "node"
    node.write_bytes(b"")
    with HidrawDevice(node) as device:
        assert device.closed is False
    assert device.closed is True
    with pytest.raises(ValueError):
        device.get_feature_report(4, 8)