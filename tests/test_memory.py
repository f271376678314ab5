import pytest

from m8mouse.memory import (
    MEMORY_BUFFER_SIZE,
    PACKET_SIZE,
    PAYLOAD_SIZE,
    DeviceMemory,
    MemoryOverflowError,
    ModeError,
)
from m8mouse.modes import (
    DPI_ADDR,
    DPI_MODE_MASK,
    DPI_RES_ADDR,
    LED_ADDR,
    LED_MODE_MASK,
    LED_SPEED_MASK,
    ModeKind,
    modes_for,
)

TYPICAL_SIZE = 43 * PAYLOAD_SIZE


def _memory(overrides=None, size=TYPICAL_SIZE):
    data = bytearray(size)
    for address, value in (overrides or {}).items():
        data[address] = value
    return DeviceMemory(bytes(data))


def test_store_appends_packet_payload():
    memory = DeviceMemory()
    first = bytes([0x04, 1, 2, 3, 4, 5, 6, 0xCC])
    second = bytes([0x04, 7, 8, 9, 10, 11, 12, 0xCC])
    memory.store(first)
    memory.store(second)
    assert memory.data == first[1:7] + second[1:7]
    assert memory.size == 2 * PAYLOAD_SIZE


def test_store_rejects_short_packet():
    with pytest.raises(ValueError):
        DeviceMemory().store(b"\x04\x01")


def test_store_overflow():
    memory = DeviceMemory()
    packet = bytes(PACKET_SIZE)
    for _ in range(MEMORY_BUFFER_SIZE // PAYLOAD_SIZE):
        memory.store(packet)
    with pytest.raises(MemoryOverflowError):
        memory.store(packet)


def test_clear_empties_memory():
    memory = _memory({0: 0xAB})
    memory.clear()
    assert memory.size == 0
    assert memory.data == b""


def test_retrieve_round_trips_stored_data():
    payloads = [bytes(range(i, i + PAYLOAD_SIZE)) for i in range(0, 60, PAYLOAD_SIZE)]
    memory = DeviceMemory()
    for payload in payloads:
        memory.store(b"\x04" + payload + b"\xcc")
    chunks = [memory.retrieve(i * PAYLOAD_SIZE) for i in range(len(payloads))]
    assert chunks == payloads


def test_retrieve_at_end_gives_zeros_and_past_end_raises():
    memory = _memory(size=PAYLOAD_SIZE)
    assert memory.retrieve(PAYLOAD_SIZE) == bytes(PAYLOAD_SIZE)
    with pytest.raises(MemoryOverflowError):
        memory.retrieve(PAYLOAD_SIZE + 1)


def test_too_much_initial_data():
    with pytest.raises(MemoryOverflowError):
        DeviceMemory(bytes(MEMORY_BUFFER_SIZE + 1))


def test_mode_index_reads_value_with_check():
    memory = _memory({DPI_ADDR: 0x02, DPI_ADDR + 1: 0x0D})
    assert memory.mode_index(DPI_ADDR, DPI_MODE_MASK, modes_for(ModeKind.DPI)) == 2


def test_mode_index_checksum_mismatch():
    memory = _memory({DPI_ADDR: 0x02, DPI_ADDR + 1: 0x02})
    with pytest.raises(ModeError):
        memory.mode_index(DPI_ADDR, DPI_MODE_MASK, modes_for(ModeKind.DPI))


def test_mode_index_unknown_value():
    memory = _memory({DPI_ADDR: 0x0F, DPI_ADDR + 1: 0x00})
    with pytest.raises(ModeError):
        memory.mode_index(DPI_ADDR, DPI_MODE_MASK, modes_for(ModeKind.DPI))


def test_mode_index_outside_memory():
    memory = _memory(size=DPI_ADDR)
    with pytest.raises(ModeError):
        memory.mode_index(DPI_ADDR, DPI_MODE_MASK, modes_for(ModeKind.DPI))


@pytest.mark.parametrize(
    "kind, address, mask",
    [
        (ModeKind.DPI, DPI_ADDR, DPI_MODE_MASK),
        (ModeKind.LED, LED_ADDR, LED_MODE_MASK),
        (ModeKind.SPEED, LED_ADDR, LED_SPEED_MASK),
    ],
)
def test_set_mode_round_trip(kind, address, mask):
    modes = modes_for(kind)
    memory = _memory()
    for index in range(len(modes)):
        memory.set_mode(address, mask, modes, index)
        assert memory.mode_index(address, mask, modes) == index
        value = memory.data[address] & mask
        check = memory.data[address + 1] & mask
        assert value | check == mask
        assert value & check == 0


def test_set_led_mode_keeps_speed():
    memory = _memory()
    speeds = modes_for(ModeKind.SPEED)
    leds = modes_for(ModeKind.LED)
    memory.set_mode(LED_ADDR, LED_SPEED_MASK, speeds, 3)
    memory.set_mode(LED_ADDR, LED_MODE_MASK, leds, 5)
    assert memory.mode_index(LED_ADDR, LED_SPEED_MASK, speeds) == 3
    assert memory.mode_index(LED_ADDR, LED_MODE_MASK, leds) == 5


def test_set_mode_bad_index():
    memory = _memory()
    modes = modes_for(ModeKind.DPI)
    with pytest.raises(ModeError):
        memory.set_mode(DPI_ADDR, DPI_MODE_MASK, modes, len(modes))
    with pytest.raises(ModeError):
        memory.set_mode(DPI_ADDR, DPI_MODE_MASK, modes, -1)


def test_set_mode_outside_memory():
    memory = _memory(size=DPI_ADDR)
    with pytest.raises(ModeError):
        memory.set_mode(DPI_ADDR, DPI_MODE_MASK, modes_for(ModeKind.DPI), 0)


def test_dpires_index():
    res = modes_for(ModeKind.DPI_RES)
    memory = _memory({DPI_RES_ADDR: res[7].value})
    assert memory.dpires_index(DPI_RES_ADDR, res) == 7
    with pytest.raises(ModeError):
        memory.dpires_index(DPI_RES_ADDR + 1, res)


def test_dump_layout():
    memory = DeviceMemory(bytes(range(32)))
    lines = memory.dump().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("#00: 00 01 ")
    assert lines[1].startswith("#10: 10 ")
    assert all(line.count(" - ") == 1 for line in lines)


def test_dump_bad_width():
    with pytest.raises(ValueError):
        DeviceMemory(b"\x00").dump(0)