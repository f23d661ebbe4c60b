"""Pytest configuration and shared fixtures."""

import pytest

from bmu_eeprom.codec.image import new_image
from bmu_eeprom.models.metadata import MetadataRecord


@pytest.fixture
def erased_image():
    """Provide a fresh, fully erased (0xFF) EEPROM image."""
    return new_image()


@pytest.fixture
def sample_record():
    """Provide a metadata record representable in both format revisions."""
    return MetadataRecord(
        unique_id=0x12345678,
        expected_cell_count=96,
        max_charge_current=150.0,
        max_discharge_current=200.0,
        sequential_count_mismatch=5,
    )
