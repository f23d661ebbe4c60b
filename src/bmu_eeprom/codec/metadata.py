"""Metadata region encode/decode for both on-disk format revisions.

Layout (offsets shared by both revisions):
    0x0000  unique ID            uint32, little-endian
    0x0004  expected cell count  uint8
    0x0005  max charge current   uint16, little-endian, scaled
    0x0007  max discharge current uint16, little-endian, scaled
    0x0009  sequential count mismatch
              revised: uint8 (0x000A is not part of the field)
              legacy:  uint16, little-endian

Current scaling:
    revised: amps = CURRENT_FLOOR + raw * 0.02
    legacy:  amps = raw / 10
"""

from __future__ import annotations

import math
import struct

from bmu_eeprom.codec.image import check_image
from bmu_eeprom.exceptions import OutOfRangeError
from bmu_eeprom.layout import (
    CURRENT_FLOOR,
    CURRENT_STEP,
    EEPROM_EXPECTED_CELL_COUNT,
    EEPROM_MAX_CHARGE_CURRENT,
    EEPROM_MAX_DISCHARGE_CURRENT,
    EEPROM_SEQUENTIAL_COUNT_MISMATCH,
    EEPROM_UNIQUE_ID,
    LEGACY_CURRENT_SCALE,
    FormatRevision,
    MetadataField,
)
from bmu_eeprom.models.metadata import FieldEdit, MetadataRecord

_FIELD_OFFSETS: dict[MetadataField, int] = {
    MetadataField.UNIQUE_ID: EEPROM_UNIQUE_ID,
    MetadataField.EXPECTED_CELL_COUNT: EEPROM_EXPECTED_CELL_COUNT,
    MetadataField.MAX_CHARGE_CURRENT: EEPROM_MAX_CHARGE_CURRENT,
    MetadataField.MAX_DISCHARGE_CURRENT: EEPROM_MAX_DISCHARGE_CURRENT,
    MetadataField.SEQUENTIAL_COUNT_MISMATCH: EEPROM_SEQUENTIAL_COUNT_MISMATCH,
}

_CURRENT_FIELDS = frozenset({
    MetadataField.MAX_CHARGE_CURRENT,
    MetadataField.MAX_DISCHARGE_CURRENT,
})

# Field widths in bytes, per revision
_WIDTHS: dict[FormatRevision, dict[MetadataField, int]] = {
    FormatRevision.REVISED: {
        MetadataField.UNIQUE_ID: 4,
        MetadataField.EXPECTED_CELL_COUNT: 1,
        MetadataField.MAX_CHARGE_CURRENT: 2,
        MetadataField.MAX_DISCHARGE_CURRENT: 2,
        MetadataField.SEQUENTIAL_COUNT_MISMATCH: 1,
    },
    FormatRevision.LEGACY: {
        MetadataField.UNIQUE_ID: 4,
        MetadataField.EXPECTED_CELL_COUNT: 1,
        MetadataField.MAX_CHARGE_CURRENT: 2,
        MetadataField.MAX_DISCHARGE_CURRENT: 2,
        MetadataField.SEQUENTIAL_COUNT_MISMATCH: 2,
    },
}

_STRUCT_FORMATS = {1: "<B", 2: "<H", 4: "<I"}


def field_width(field: MetadataField, revision: FormatRevision = FormatRevision.REVISED) -> int:
    """Return the number of bytes ``field`` occupies in ``revision``."""
    return _WIDTHS[revision][field]


def current_limits(revision: FormatRevision = FormatRevision.REVISED) -> tuple[float, float]:
    """Return the (min, max) amps representable by a current field."""
    if revision is FormatRevision.LEGACY:
        return 0.0, 0xFFFF / LEGACY_CURRENT_SCALE
    return CURRENT_FLOOR, round(CURRENT_FLOOR + 0xFFFF * CURRENT_STEP, 2)


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------

def _read_le(image: bytes | bytearray, offset: int, width: int) -> int:
    value = 0
    for i in range(width):
        value |= image[offset + i] << (8 * i)
    return value


def _raw_to_amps(raw: int, revision: FormatRevision) -> float:
    if revision is FormatRevision.LEGACY:
        return round(raw / LEGACY_CURRENT_SCALE, 1)
    # Rounded to the 0.02 A grid so float error does not leak into values
    return round(CURRENT_FLOOR + raw * CURRENT_STEP, 2)


def _decode_revised(image: bytes | bytearray) -> MetadataRecord:
    revision = FormatRevision.REVISED
    charge_raw = _read_le(image, EEPROM_MAX_CHARGE_CURRENT, 2)
    discharge_raw = _read_le(image, EEPROM_MAX_DISCHARGE_CURRENT, 2)
    return MetadataRecord(
        unique_id=_read_le(image, EEPROM_UNIQUE_ID, 4),
        expected_cell_count=image[EEPROM_EXPECTED_CELL_COUNT],
        max_charge_current=_raw_to_amps(charge_raw, revision),
        max_discharge_current=_raw_to_amps(discharge_raw, revision),
        sequential_count_mismatch=image[EEPROM_SEQUENTIAL_COUNT_MISMATCH],
    )


def _decode_legacy(image: bytes | bytearray) -> MetadataRecord:
    revision = FormatRevision.LEGACY
    (unique_id,) = struct.unpack_from("<I", image, EEPROM_UNIQUE_ID)
    (charge_raw,) = struct.unpack_from("<H", image, EEPROM_MAX_CHARGE_CURRENT)
    (discharge_raw,) = struct.unpack_from("<H", image, EEPROM_MAX_DISCHARGE_CURRENT)
    (mismatch,) = struct.unpack_from("<H", image, EEPROM_SEQUENTIAL_COUNT_MISMATCH)
    return MetadataRecord(
        unique_id=unique_id,
        expected_cell_count=image[EEPROM_EXPECTED_CELL_COUNT],
        max_charge_current=_raw_to_amps(charge_raw, revision),
        max_discharge_current=_raw_to_amps(discharge_raw, revision),
        sequential_count_mismatch=mismatch,
    )


def decode_metadata(
    image: bytes | bytearray,
    revision: FormatRevision = FormatRevision.REVISED,
) -> MetadataRecord:
    """Decode the metadata region of an image.

    Every byte pattern decodes; an erased image yields all-ones integers
    and the top of the current range.

    Args:
        image: Full EEPROM image.
        revision: Format revision to interpret the region with. LEGACY is
            a compatibility mode for images written by the older editor.
    """
    check_image(image)
    if revision is FormatRevision.LEGACY:
        return _decode_legacy(image)
    return _decode_revised(image)


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------

def _as_uint(field: MetadataField, value: int | float, width: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise OutOfRangeError(
            f"{field}: expected an integer, got {value!r}", field=str(field), value=value
        )
    if isinstance(value, float):
        if not value.is_integer():
            raise OutOfRangeError(
                f"{field}: expected an integer, got {value!r}", field=str(field), value=value
            )
        value = int(value)
    limit = (1 << (8 * width)) - 1
    if not 0 <= value <= limit:
        raise OutOfRangeError(
            f"{field}: {value} outside 0-{limit}", field=str(field), value=value
        )
    return value


def _amps_to_raw(field: MetadataField, amps: int | float, revision: FormatRevision) -> int:
    if isinstance(amps, bool) or not isinstance(amps, (int, float)):
        raise OutOfRangeError(
            f"{field}: expected amps, got {amps!r}", field=str(field), value=amps
        )
    if not math.isfinite(amps):
        raise OutOfRangeError(f"{field}: {amps} is not a finite current", field=str(field), value=amps)
    if revision is FormatRevision.LEGACY:
        raw = round(amps * LEGACY_CURRENT_SCALE)
    else:
        raw = round((amps - CURRENT_FLOOR) / CURRENT_STEP)
    if not 0 <= raw <= 0xFFFF:
        low, high = current_limits(revision)
        raise OutOfRangeError(
            f"{field}: {amps} A outside {low:.2f} to {high:.2f} A",
            field=str(field),
            value=amps,
        )
    return raw


def _field_bytes(
    field: MetadataField,
    value: int | float,
    revision: FormatRevision,
) -> tuple[int, bytes]:
    """Return (offset, encoded bytes) for one field without touching the image."""
    width = _WIDTHS[revision][field]
    if field in _CURRENT_FIELDS:
        raw = _amps_to_raw(field, value, revision)
    else:
        raw = _as_uint(field, value, width)

    if revision is FormatRevision.LEGACY:
        data = struct.pack(_STRUCT_FORMATS[width], raw)
    else:
        data = raw.to_bytes(width, "little")
    return _FIELD_OFFSETS[field], data


def encode_field(
    image: bytearray,
    field: MetadataField,
    value: int | float,
    revision: FormatRevision = FormatRevision.REVISED,
) -> None:
    """Encode a single metadata field into ``image`` in place.

    Raises:
        OutOfRangeError: If ``value`` does not fit the field. The image is
            left unchanged.
    """
    check_image(image)
    offset, data = _field_bytes(MetadataField(field), value, revision)
    image[offset:offset + len(data)] = data


def encode_metadata(
    image: bytearray,
    record: MetadataRecord,
    revision: FormatRevision = FormatRevision.REVISED,
) -> bytearray:
    """Encode a full metadata record into ``image`` in place.

    All fields are validated before any byte is written, so a failure
    leaves the image untouched. Bytes outside the fields' own ranges
    (including 0x000A in the revised format) are never modified.

    Returns:
        The same ``image`` object.
    """
    check_image(image)
    writes = [
        _field_bytes(field, getattr(record, field.value), revision)
        for field in MetadataField
    ]
    for offset, data in writes:
        image[offset:offset + len(data)] = data
    return image


def apply_edit(
    image: bytearray,
    edit: FieldEdit,
    revision: FormatRevision = FormatRevision.REVISED,
) -> None:
    """Apply a FieldEdit command to ``image``."""
    encode_field(image, edit.field, edit.value, revision)
