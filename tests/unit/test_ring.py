"""Unit tests for the frame counter ring."""

from __future__ import annotations

import pytest

from bmu_eeprom.codec.ring import (
    find_current,
    read_slot,
    ring_status,
    rotate_counter,
    scan_slots,
    set_counter,
    write_slot,
)
from bmu_eeprom.exceptions import OutOfRangeError
from bmu_eeprom.layout import COUNTER_INVALID


class TestSlotAccess:
    """Test raw slot read/write."""

    def test_write_is_big_endian(self, erased_image):
        write_slot(erased_image, 0, 0x01020304)
        assert erased_image[0x40:0x44] == b"\x01\x02\x03\x04"

    def test_slot_addresses(self, erased_image):
        write_slot(erased_image, 127, 7)
        assert erased_image[0x23C:0x240] == b"\x00\x00\x00\x07"
        assert read_slot(erased_image, 127) == 7

    def test_erased_slot_reads_invalid(self, erased_image):
        assert read_slot(erased_image, 5) == COUNTER_INVALID

    def test_slot_index_out_of_range(self, erased_image):
        with pytest.raises(OutOfRangeError):
            read_slot(erased_image, 128)

    def test_value_out_of_range(self, erased_image):
        with pytest.raises(OutOfRangeError):
            write_slot(erased_image, 0, 1 << 32)
        with pytest.raises(OutOfRangeError):
            write_slot(erased_image, 0, -1)

    def test_write_stays_inside_ring(self, erased_image):
        write_slot(erased_image, 0, 0)
        assert erased_image[:0x40] == b"\xFF" * 0x40
        assert erased_image[0x44:] == b"\xFF" * (2048 - 0x44)


class TestFindCurrent:
    """Test authoritative slot selection."""

    def test_all_invalid_returns_none(self, erased_image):
        assert find_current(erased_image) is None

    def test_single_valid_slot(self, erased_image):
        write_slot(erased_image, 9, 1234)
        current = find_current(erased_image)
        assert current.index == 9
        assert current.value == 1234
        assert current.address == 0x40 + 9 * 4

    def test_zero_is_a_valid_value(self, erased_image):
        write_slot(erased_image, 3, 0)
        current = find_current(erased_image)
        assert current.index == 3
        assert current.value == 0

    def test_highest_value_wins(self, erased_image):
        write_slot(erased_image, 0, 100)
        write_slot(erased_image, 50, 300)
        write_slot(erased_image, 100, 200)
        assert find_current(erased_image).index == 50

    def test_tie_goes_to_lowest_index(self, erased_image):
        write_slot(erased_image, 10, 500)
        write_slot(erased_image, 20, 500)
        assert find_current(erased_image).index == 10

    def test_sentinel_never_selected(self, erased_image):
        write_slot(erased_image, 4, 0xFFFFFFFE)
        assert find_current(erased_image).value == 0xFFFFFFFE

    def test_idempotent(self, erased_image):
        write_slot(erased_image, 7, 42)
        assert find_current(erased_image) == find_current(erased_image)


class TestSetCounter:
    """Test writing a new counter value."""

    def test_bootstrap_erased_ring_at_slot_0(self, erased_image):
        assert set_counter(erased_image, 256) == 0
        assert read_slot(erased_image, 0) == 256

    def test_overwrites_current_slot(self, erased_image):
        write_slot(erased_image, 30, 1000)
        assert set_counter(erased_image, 2000) == 30
        assert read_slot(erased_image, 30) == 2000
        assert read_slot(erased_image, 31) == COUNTER_INVALID

    def test_lower_value_still_written_to_current(self, erased_image):
        write_slot(erased_image, 2, 10)
        write_slot(erased_image, 5, 900)
        assert set_counter(erased_image, 1) == 5
        assert find_current(erased_image).index == 2

    def test_invalid_value_leaves_image(self, erased_image):
        write_slot(erased_image, 1, 5)
        before = bytes(erased_image)
        with pytest.raises(OutOfRangeError):
            set_counter(erased_image, -5)
        assert bytes(erased_image) == before


class TestRotateCounter:
    """Test the wear-leveling write."""

    def test_moves_to_next_slot(self, erased_image):
        write_slot(erased_image, 3, 256)
        assert rotate_counter(erased_image, 512) == 4
        assert read_slot(erased_image, 3) == COUNTER_INVALID
        assert find_current(erased_image).value == 512

    def test_wraps_after_last_slot(self, erased_image):
        write_slot(erased_image, 127, 9)
        assert rotate_counter(erased_image, 10) == 0
        assert read_slot(erased_image, 127) == COUNTER_INVALID

    def test_bootstrap(self, erased_image):
        assert rotate_counter(erased_image, 1) == 0

    def test_rejected_value_keeps_current(self, erased_image):
        write_slot(erased_image, 3, 256)
        with pytest.raises(OutOfRangeError):
            rotate_counter(erased_image, 1 << 40)
        assert find_current(erased_image).index == 3


class TestRingStatus:
    """Test ring snapshots."""

    def test_scan_covers_all_slots(self, erased_image):
        slots = scan_slots(erased_image)
        assert len(slots) == 128
        assert [s.index for s in slots] == list(range(128))
        assert not any(s.valid for s in slots)

    def test_status_current(self, erased_image):
        write_slot(erased_image, 12, 77)
        status = ring_status(erased_image)
        assert status.current.index == 12
        assert status.slots[12].valid
        assert status.slots[12].value == 77

    def test_status_dump_includes_address(self, erased_image):
        status = ring_status(erased_image)
        dumped = status.model_dump()
        assert dumped["current"] is None
        assert dumped["slots"][1]["address"] == 0x44

    def test_status_current_matches_find_current(self, erased_image):
        write_slot(erased_image, 8, 40)
        write_slot(erased_image, 90, 40)
        write_slot(erased_image, 60, 39)
        status = ring_status(erased_image)
        assert status.current == find_current(erased_image)
        assert status.current.index == 8
        assert status.current == status.slots[8]
