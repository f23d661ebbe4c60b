"""Build a fresh EEPROM image from module controller parameters."""

from __future__ import annotations

from bmu_eeprom.codec.image import new_image
from bmu_eeprom.codec.metadata import encode_metadata
from bmu_eeprom.exceptions import OutOfRangeError
from bmu_eeprom.layout import MetadataField
from bmu_eeprom.models.metadata import MetadataRecord
from bmu_eeprom.utils.logging import get_logger

logger = get_logger(__name__)


def generate_image(
    unique_id: int,
    cells: int,
    charge_max: float,
    discharge_max: float,
    cell_reset: int,
) -> bytearray:
    """Create an erased image with the metadata region filled in.

    Always written in the revised format; the legacy format cannot hold the
    negative discharge limit. The frame counter ring is left erased.

    Args:
        unique_id: Module controller ID.
        cells: Number of battery cells expected (0-255).
        charge_max: Max charge current in amps, must be >= 0.
        discharge_max: Max discharge current in amps, must be negative.
        cell_reset: Sequential count mismatches tolerated (0 disables).

    Raises:
        OutOfRangeError: If any parameter is out of range.
    """
    if charge_max < 0:
        raise OutOfRangeError(
            "Charge current maximum must be a positive number",
            field=str(MetadataField.MAX_CHARGE_CURRENT),
            value=charge_max,
        )
    if discharge_max >= 0:
        raise OutOfRangeError(
            "Discharge current maximum must be a negative number",
            field=str(MetadataField.MAX_DISCHARGE_CURRENT),
            value=discharge_max,
        )

    record = MetadataRecord(
        unique_id=unique_id,
        expected_cell_count=cells,
        max_charge_current=charge_max,
        max_discharge_current=discharge_max,
        sequential_count_mismatch=cell_reset,
    )
    image = new_image()
    encode_metadata(image, record)
    logger.info("image_generated", unique_id=f"0x{unique_id:08X}", cells=cells)
    return image
