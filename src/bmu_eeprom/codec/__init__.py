"""EEPROM image codecs.

Metadata fields, the frame counter ring, and the Intel HEX file format.
All functions operate on a caller-owned image buffer and perform no I/O.
"""

from bmu_eeprom.codec import ihex
from bmu_eeprom.codec.image import check_image, hexdump, new_image
from bmu_eeprom.codec.metadata import (
    apply_edit,
    decode_metadata,
    encode_field,
    encode_metadata,
)
from bmu_eeprom.codec.ring import (
    find_current,
    ring_status,
    rotate_counter,
    scan_slots,
    set_counter,
)

__all__ = [
    "apply_edit",
    "check_image",
    "decode_metadata",
    "encode_field",
    "encode_metadata",
    "find_current",
    "hexdump",
    "ihex",
    "new_image",
    "ring_status",
    "rotate_counter",
    "scan_slots",
    "set_counter",
]
