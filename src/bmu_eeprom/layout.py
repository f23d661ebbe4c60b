"""EEPROM geometry, field offsets, and format enums.

The module controller's EEPROM is 2 KiB:
  0x0000-0x003F  metadata (11 bytes used)
  0x0040-0x023F  frame counter ring, 128 x 4-byte big-endian slots
  0x0240-0x07FF  unused
"""

from __future__ import annotations

from enum import IntEnum, StrEnum

EEPROM_SIZE = 2048

# Erased EEPROM cells read back as 0xFF
ERASED_BYTE = 0xFF

# Metadata area
EEPROM_METADATA_BASE = 0x0000
EEPROM_METADATA_SIZE = 64
EEPROM_UNIQUE_ID = 0x0000
EEPROM_EXPECTED_CELL_COUNT = 0x0004
EEPROM_MAX_CHARGE_CURRENT = 0x0005
EEPROM_MAX_DISCHARGE_CURRENT = 0x0007
EEPROM_SEQUENTIAL_COUNT_MISMATCH = 0x0009

# All currents in the revised format are stored relative to this floor
CURRENT_FLOOR = -655.36
CURRENT_STEP = 0.02

# Legacy format stores currents as 0.1 A counts
LEGACY_CURRENT_SCALE = 10

# Frame counter ring
EEPROM_FRAME_COUNTER_BASE = 0x0040
EEPROM_FRAME_COUNTER_SIZE = 512
COUNTER_POSITIONS = 128
BYTES_PER_COUNTER = 4
COUNTER_INVALID = 0xFFFFFFFF

# Intel HEX
HEX_RECORD_SIZE = 16
HEX_EOF_RECORD = ":00000001FF"
# ':' + byte count (2) + address (4) + type (2) + checksum (2)
HEX_MIN_LINE_LENGTH = 11


class FormatRevision(StrEnum):
    """On-disk metadata encodings found across editor versions."""

    # Explicit little-endian fields, currents as 0.02 A steps above CURRENT_FLOOR,
    # 1-byte mismatch counter. Native format.
    REVISED = "revised"
    # Currents as raw 0.1 A counts, 2-byte mismatch counter.
    LEGACY = "legacy"


class MetadataField(StrEnum):
    """Named fields of the metadata region."""

    UNIQUE_ID = "unique_id"
    EXPECTED_CELL_COUNT = "expected_cell_count"
    MAX_CHARGE_CURRENT = "max_charge_current"
    MAX_DISCHARGE_CURRENT = "max_discharge_current"
    SEQUENTIAL_COUNT_MISMATCH = "sequential_count_mismatch"


class RecordType(IntEnum):
    """Intel HEX record types."""

    DATA = 0x00
    END_OF_FILE = 0x01
    EXTENDED_SEGMENT_ADDRESS = 0x02
    START_SEGMENT_ADDRESS = 0x03
    EXTENDED_LINEAR_ADDRESS = 0x04
    START_LINEAR_ADDRESS = 0x05


class ChecksumMode(StrEnum):
    """How Intel HEX record checksums are treated on decode."""

    IGNORE = "ignore"
    STRICT = "strict"
