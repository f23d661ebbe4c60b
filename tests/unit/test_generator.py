"""Unit tests for fresh image generation."""

from __future__ import annotations

import pytest

from bmu_eeprom.codec.metadata import decode_metadata
from bmu_eeprom.codec.ring import find_current
from bmu_eeprom.core.generator import generate_image
from bmu_eeprom.exceptions import OutOfRangeError
from bmu_eeprom.layout import FormatRevision


class TestGenerateImage:
    def test_metadata_written(self):
        image = generate_image(0xA1B2C3D4, 24, 100.0, -250.0, 3)
        meta = decode_metadata(image)
        assert meta.unique_id == 0xA1B2C3D4
        assert meta.expected_cell_count == 24
        assert meta.max_charge_current == 100.0
        assert meta.max_discharge_current == -250.0
        assert meta.sequential_count_mismatch == 3

    def test_rest_of_image_erased(self):
        image = generate_image(1, 24, 100.0, -250.0, 0)
        assert image[0x0A:] == b"\xFF" * (2048 - 0x0A)
        assert find_current(image) is None

    def test_negative_charge_rejected(self):
        with pytest.raises(OutOfRangeError, match="positive"):
            generate_image(1, 24, -1.0, -250.0, 0)

    def test_positive_discharge_rejected(self):
        with pytest.raises(OutOfRangeError, match="negative"):
            generate_image(1, 24, 100.0, 0.0, 0)

    def test_too_many_cells(self):
        with pytest.raises(OutOfRangeError):
            generate_image(1, 256, 100.0, -250.0, 0)

    def test_written_in_revised_format(self):
        image = generate_image(1, 24, 100.0, -250.0, 7)
        assert image[0x0A] == 0xFF
        assert decode_metadata(image, FormatRevision.REVISED).sequential_count_mismatch == 7
