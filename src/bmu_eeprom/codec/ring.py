"""Frame counter ring: 128 big-endian uint32 slots at 0x0040-0x023F.

The authoritative ("current") slot is the one holding the strictly
highest value other than the 0xFFFFFFFF erased marker. On ties the
lowest index wins.
"""

from __future__ import annotations

from typing import Iterable

from bmu_eeprom.codec.image import check_image
from bmu_eeprom.exceptions import OutOfRangeError
from bmu_eeprom.layout import (
    BYTES_PER_COUNTER,
    COUNTER_INVALID,
    COUNTER_POSITIONS,
    EEPROM_FRAME_COUNTER_BASE,
)
from bmu_eeprom.models.ring import CounterSlot, RingStatus


def _slot_address(index: int) -> int:
    if not 0 <= index < COUNTER_POSITIONS:
        raise OutOfRangeError(
            f"Counter slot {index} outside 0-{COUNTER_POSITIONS - 1}",
            field="slot",
            value=index,
        )
    return EEPROM_FRAME_COUNTER_BASE + index * BYTES_PER_COUNTER


def read_slot(image: bytes | bytearray, index: int) -> int:
    """Read the counter stored in slot ``index`` (MSB first)."""
    check_image(image)
    addr = _slot_address(index)
    return int.from_bytes(image[addr:addr + BYTES_PER_COUNTER], "big")


def _check_counter(value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= COUNTER_INVALID:
        raise OutOfRangeError(
            f"Frame counter {value!r} outside 0-0x{COUNTER_INVALID:08X}",
            field="frame_counter",
            value=value,
        )


def write_slot(image: bytearray, index: int, value: int) -> None:
    """Write ``value`` into slot ``index`` (MSB first)."""
    check_image(image)
    addr = _slot_address(index)
    _check_counter(value)
    image[addr:addr + BYTES_PER_COUNTER] = value.to_bytes(BYTES_PER_COUNTER, "big")


def scan_slots(image: bytes | bytearray) -> list[CounterSlot]:
    """Return every ring slot in index order."""
    return [
        CounterSlot(index=pos, value=read_slot(image, pos))
        for pos in range(COUNTER_POSITIONS)
    ]


def _highest_valid(slots: Iterable[CounterSlot]) -> CounterSlot | None:
    """Pick the strictly highest non-erased slot; the first one wins ties."""
    current: CounterSlot | None = None
    for slot in slots:
        if slot.value == COUNTER_INVALID:
            continue
        if current is None or slot.value > current.value:
            current = slot
    return current


def find_current(image: bytes | bytearray) -> CounterSlot | None:
    """Find the slot with the highest valid counter.

    A fresh scan runs on every call. Returns None when every slot holds
    the erased marker, which callers must not confuse with slot 0.
    """
    return _highest_valid(
        CounterSlot(index=pos, value=read_slot(image, pos))
        for pos in range(COUNTER_POSITIONS)
    )


def ring_status(image: bytes | bytearray) -> RingStatus:
    """Snapshot of the ring for display, built from a single scan."""
    slots = scan_slots(image)
    return RingStatus(current=_highest_valid(slots), slots=slots)


def set_counter(image: bytearray, new_value: int) -> int:
    """Overwrite the current slot with ``new_value``.

    An all-erased ring is bootstrapped at slot 0. The same slot is
    rewritten every time; see rotate_counter for the wear-leveling form.

    Returns:
        Index of the slot written.
    """
    current = find_current(image)
    position = current.index if current is not None else 0
    write_slot(image, position, new_value)
    return position


def rotate_counter(image: bytearray, new_value: int) -> int:
    """Advance to the next slot, invalidating the current one.

    Mirrors the firmware's wear-leveling step: the current slot is marked
    0xFFFFFFFF and ``new_value`` goes into the following slot, wrapping
    after slot 127. An all-erased ring is bootstrapped at slot 0.

    Returns:
        Index of the slot written.
    """
    current = find_current(image)
    if current is None:
        write_slot(image, 0, new_value)
        return 0

    # A rejected value leaves the ring untouched
    _check_counter(new_value)
    next_position = (current.index + 1) % COUNTER_POSITIONS
    write_slot(image, current.index, COUNTER_INVALID)
    write_slot(image, next_position, new_value)
    return next_position
