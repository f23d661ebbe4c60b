"""Intel HEX record parsing and serialization for EEPROM images.

Record layout (one per line):
    ':' [byte_count:2] [address:4] [record_type:2] [data:2*byte_count] [checksum:2]

The checksum is the two's complement of the sum of every byte between
':' and the checksum, truncated to 8 bits. Only 16-bit addressing is
supported: data records (type 00) are applied, every other record type
is parsed and ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from bmu_eeprom.codec.image import check_image
from bmu_eeprom.exceptions import ChecksumMismatchError, MalformedRecordError
from bmu_eeprom.layout import (
    EEPROM_SIZE,
    HEX_EOF_RECORD,
    HEX_MIN_LINE_LENGTH,
    HEX_RECORD_SIZE,
    ChecksumMode,
    RecordType,
)
from bmu_eeprom.utils.logging import get_logger

logger = get_logger(__name__)

_HEX_DIGITS_RE = re.compile(r"[0-9A-Fa-f]*")


@dataclass(frozen=True)
class HexRecord:
    """A single parsed Intel HEX record."""

    byte_count: int
    address: int
    record_type: int
    payload: bytes
    checksum: int

    @property
    def computed_checksum(self) -> int:
        return compute_checksum(self.byte_count, self.address, self.record_type, self.payload)

    @property
    def checksum_valid(self) -> bool:
        return self.checksum == self.computed_checksum


def compute_checksum(byte_count: int, address: int, record_type: int, payload: bytes) -> int:
    """Two's-complement checksum of a record's header and payload bytes."""
    total = byte_count + (address >> 8) + (address & 0xFF) + record_type + sum(payload)
    return (256 - (total & 0xFF)) & 0xFF


def parse_record(line: str, line_number: int | None = None) -> HexRecord:
    """Parse one ':'-prefixed record line.

    Characters after the checksum are ignored. The checksum is parsed but
    not verified here; see HexRecord.checksum_valid.

    Raises:
        MalformedRecordError: On a truncated line or non-hex digits.
    """
    if not line.startswith(":"):
        raise MalformedRecordError("record does not start with ':'", line_number)
    if len(line) < HEX_MIN_LINE_LENGTH:
        raise MalformedRecordError(
            f"record too short: {len(line)} characters, need at least {HEX_MIN_LINE_LENGTH}",
            line_number,
        )

    data = line[1:]
    byte_count = int(_hex_field(data, 0, 2, line_number), 16)
    needed = 8 + byte_count * 2 + 2
    if len(data) < needed:
        raise MalformedRecordError(
            f"byte count {byte_count} needs {needed} hex digits, line has {len(data)}",
            line_number,
        )

    address = int(_hex_field(data, 2, 4, line_number), 16)
    record_type = int(_hex_field(data, 6, 2, line_number), 16)
    payload = bytes.fromhex(_hex_field(data, 8, byte_count * 2, line_number))
    checksum = int(_hex_field(data, 8 + byte_count * 2, 2, line_number), 16)

    return HexRecord(
        byte_count=byte_count,
        address=address,
        record_type=record_type,
        payload=payload,
        checksum=checksum,
    )


def _hex_field(data: str, start: int, length: int, line_number: int | None) -> str:
    digits = data[start:start + length]
    if not _HEX_DIGITS_RE.fullmatch(digits):
        raise MalformedRecordError(f"invalid hex digits {digits!r}", line_number)
    return digits


def build_record(
    address: int,
    payload: bytes,
    record_type: RecordType = RecordType.DATA,
) -> str:
    """Format one record line (uppercase, zero-padded, no newline)."""
    if not 0 <= address <= 0xFFFF:
        raise ValueError(f"Record address 0x{address:X} exceeds 16 bits")
    if len(payload) > 0xFF:
        raise ValueError(f"Record payload {len(payload)} bytes exceeds 255")
    checksum = compute_checksum(len(payload), address, record_type, payload)
    return f":{len(payload):02X}{address:04X}{record_type:02X}{payload.hex().upper()}{checksum:02X}"


def decode(
    text: str,
    checksum_mode: ChecksumMode = ChecksumMode.IGNORE,
    size: int = EEPROM_SIZE,
    fill: int = 0x00,
) -> bytearray:
    """Decode Intel HEX text into a new image buffer.

    Lines that do not start with ':' are skipped. Data bytes addressed past
    ``size`` are dropped. Bytes no record covers keep ``fill``.

    Args:
        text: Intel HEX file contents.
        checksum_mode: IGNORE accepts any checksum byte; STRICT verifies it
            and also rejects characters after the checksum.
        size: Size of the image to produce.
        fill: Initial value of every byte.

    Raises:
        MalformedRecordError: On an unparsable record. No partial image is
            returned.
        ChecksumMismatchError: In STRICT mode, on a bad checksum.
    """
    image = bytearray([fill]) * size
    strict = checksum_mode is ChecksumMode.STRICT
    records = 0
    dropped = 0

    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.rstrip()
        if not line.startswith(":"):
            continue

        record = parse_record(line, line_number)
        if strict:
            expected_length = 1 + 8 + record.byte_count * 2 + 2
            if len(line) != expected_length:
                raise MalformedRecordError(
                    f"record is {len(line)} characters, byte count implies {expected_length}",
                    line_number,
                )
            if not record.checksum_valid:
                raise ChecksumMismatchError(
                    expected=record.computed_checksum,
                    actual=record.checksum,
                    line_number=line_number,
                )

        if record.record_type != RecordType.DATA:
            logger.debug(
                "ihex_record_ignored",
                line=line_number,
                record_type=record.record_type,
            )
            continue

        records += 1
        for i, value in enumerate(record.payload):
            if record.address + i < size:
                image[record.address + i] = value
            else:
                dropped += 1

    if dropped:
        logger.debug("ihex_bytes_out_of_range", dropped=dropped)
    logger.debug("ihex_decoded", records=records, size=size)
    return image


def encode(image: bytes | bytearray, record_size: int = HEX_RECORD_SIZE) -> str:
    """Serialize a full image as data records followed by the EOF record.

    Returns:
        ASCII text, one record per line, newline-terminated.
    """
    check_image(image)
    if not 1 <= record_size <= 0xFF:
        raise ValueError(f"Record size must be 1-255, got {record_size}")

    lines: list[str] = []
    address = 0
    while address < len(image):
        chunk_size = min(record_size, len(image) - address)
        lines.append(build_record(address, bytes(image[address:address + chunk_size])))
        address += chunk_size
    lines.append(HEX_EOF_RECORD)
    return "\n".join(lines) + "\n"
