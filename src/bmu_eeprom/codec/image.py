"""Whole-image helpers: allocation, size checks, and hex dump rendering."""

from __future__ import annotations

from bmu_eeprom.layout import EEPROM_SIZE, ERASED_BYTE
from bmu_eeprom.exceptions import ImageSizeError


def new_image(fill: int = ERASED_BYTE) -> bytearray:
    """Return a fresh EEPROM image with every byte set to ``fill``."""
    if not 0 <= fill <= 0xFF:
        raise ValueError(f"Fill byte must be 0-255, got {fill}")
    return bytearray([fill]) * EEPROM_SIZE


def check_image(image: bytes | bytearray) -> None:
    """Raise ImageSizeError unless ``image`` is exactly one EEPROM in size."""
    if len(image) != EEPROM_SIZE:
        raise ImageSizeError(
            f"EEPROM image must be {EEPROM_SIZE} bytes, got {len(image)}"
        )


def hexdump(image: bytes | bytearray, width: int = 16) -> str:
    """Render an image as ``AAAA: XX XX ..   ascii`` rows.

    Bytes outside printable ASCII (0x20-0x7E) are shown as ``.``.
    """
    rows: list[str] = []
    for offset in range(0, len(image), width):
        chunk = image[offset:offset + width]
        hex_part = "".join(f"{b:02X} " for b in chunk)
        ascii_part = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)
        rows.append(f"{offset:04X}: {hex_part}  {ascii_part}")
    return "\n".join(rows)
