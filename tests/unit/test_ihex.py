"""Unit tests for Intel HEX record parsing and serialization."""

from __future__ import annotations

import pytest

from bmu_eeprom.codec.ihex import (
    build_record,
    compute_checksum,
    decode,
    encode,
    parse_record,
)
from bmu_eeprom.codec.image import new_image
from bmu_eeprom.exceptions import ChecksumMismatchError, MalformedRecordError
from bmu_eeprom.layout import ChecksumMode, RecordType

_COUNTING_RECORD = ":10000000000102030405060708090A0B0C0D0E0F78"


class TestChecksum:
    """Test record checksum computation."""

    def test_known_value(self):
        assert compute_checksum(16, 0x0000, 0, bytes(range(16))) == 0x78

    def test_eof_record(self):
        assert compute_checksum(0, 0x0000, RecordType.END_OF_FILE, b"") == 0xFF

    def test_erased_record(self):
        # 0x10 + 0x00 + 0x10 + 16 * 0xFF
        assert compute_checksum(16, 0x0010, 0, b"\xFF" * 16) == 0xF0

    def test_record_sums_to_zero(self):
        payload = b"\x12\x34\xAB"
        checksum = compute_checksum(3, 0x07F0, 0, payload)
        total = 3 + 0x07 + 0xF0 + sum(payload) + checksum
        assert total & 0xFF == 0


class TestRecordLines:
    """Test single-record build/parse."""

    def test_build_counting_record(self):
        assert build_record(0x0000, bytes(range(16))) == _COUNTING_RECORD

    def test_build_eof(self):
        assert build_record(0, b"", RecordType.END_OF_FILE) == ":00000001FF"

    def test_build_uppercase_padded(self):
        assert build_record(0x0A, b"\xab") == ":01000A00AB4A"

    def test_build_address_too_large(self):
        with pytest.raises(ValueError, match="16 bits"):
            build_record(0x10000, b"\x00")

    def test_parse_fields(self):
        rec = parse_record(_COUNTING_RECORD)
        assert rec.byte_count == 16
        assert rec.address == 0
        assert rec.record_type == RecordType.DATA
        assert rec.payload == bytes(range(16))
        assert rec.checksum == 0x78
        assert rec.checksum_valid

    def test_parse_lowercase(self):
        rec = parse_record(":01000a00ab4a")
        assert rec.address == 0x0A
        assert rec.payload == b"\xAB"

    def test_parse_bad_checksum_is_reported_not_raised(self):
        rec = parse_record(":0100000001FF")
        assert not rec.checksum_valid
        assert rec.computed_checksum == 0xFE

    def test_parse_too_short(self):
        with pytest.raises(MalformedRecordError, match="too short"):
            parse_record(":000000")

    def test_parse_bad_digits(self):
        with pytest.raises(MalformedRecordError, match="invalid hex"):
            parse_record(":0100000GAAFF")

    def test_parse_sign_is_not_a_digit(self):
        with pytest.raises(MalformedRecordError):
            parse_record(":+1000000AAFF")

    def test_parse_truncated_payload(self):
        with pytest.raises(MalformedRecordError, match="byte count"):
            parse_record(":10000000000102FF")

    def test_parse_requires_colon(self):
        with pytest.raises(MalformedRecordError):
            parse_record("10000000")


class TestEncode:
    """Test whole-image serialization."""

    def test_record_count_and_eof(self):
        text = encode(new_image())
        lines = text.splitlines()
        assert len(lines) == 129
        assert all(len(line) == 43 for line in lines[:128])
        assert lines[-1] == ":00000001FF"
        assert text.endswith("\n")

    def test_sequential_addresses(self):
        lines = encode(new_image()).splitlines()
        addresses = [int(line[3:7], 16) for line in lines[:128]]
        assert addresses == list(range(0, 2048, 16))

    def test_first_record_content(self):
        image = new_image()
        image[0:16] = bytes(range(16))
        assert encode(image).splitlines()[0] == _COUNTING_RECORD

    def test_custom_record_size(self):
        lines = encode(new_image(), record_size=32).splitlines()
        assert len(lines) == 65

    def test_wrong_size_image(self):
        with pytest.raises(Exception, match="2048"):
            encode(bytearray(16))


class TestDecode:
    """Test Intel HEX text to image decoding."""

    def test_round_trip(self):
        image = bytearray(i * 7 & 0xFF for i in range(2048))
        assert decode(encode(image)) == image

    def test_round_trip_erased(self):
        image = new_image()
        assert decode(encode(image)) == image

    def test_uncovered_bytes_take_fill(self):
        image = decode(":0100100055" + "9A\n:00000001FF\n")
        assert image[0x10] == 0x55
        assert image[0x0F] == 0x00
        assert image[0x11] == 0x00
        assert len(image) == 2048

    def test_custom_fill(self):
        image = decode(":00000001FF\n", fill=0xFF)
        assert image == new_image()

    def test_non_record_lines_ignored(self):
        text = "; comment\n\n" + _COUNTING_RECORD + "\n:00000001FF\n"
        image = decode(text)
        assert image[:16] == bytes(range(16))

    def test_crlf_line_endings(self):
        image = decode(_COUNTING_RECORD + "\r\n:00000001FF\r\n")
        assert image[:16] == bytes(range(16))

    def test_out_of_range_bytes_dropped(self):
        payload = b"\x11\x22\x33\x44"
        image = decode(build_record(0x07FE, payload))
        assert image[0x7FE] == 0x11
        assert image[0x7FF] == 0x22
        assert len(image) == 2048

    def test_non_data_records_ignored(self):
        text = build_record(0, b"\x00\x10", RecordType.EXTENDED_LINEAR_ADDRESS) + "\n"
        assert decode(text) == bytearray(2048)

    def test_checksum_ignored_by_default(self):
        image = decode(":0100000001FF\n")
        assert image[0] == 0x01

    def test_strict_rejects_bad_checksum(self):
        with pytest.raises(ChecksumMismatchError) as exc_info:
            decode(":0100000001FF\n", checksum_mode=ChecksumMode.STRICT)
        assert exc_info.value.line_number == 1
        assert exc_info.value.expected == 0xFE
        assert exc_info.value.actual == 0xFF

    def test_strict_rejects_trailing_characters(self):
        with pytest.raises(MalformedRecordError, match="byte count implies"):
            decode(":00000001FFAA\n", checksum_mode=ChecksumMode.STRICT)

    def test_strict_accepts_valid_file(self):
        image = new_image()
        assert decode(encode(image), checksum_mode=ChecksumMode.STRICT) == image

    def test_malformed_line_reports_number(self):
        text = _COUNTING_RECORD + "\n:10ZZ\n"
        with pytest.raises(MalformedRecordError) as exc_info:
            decode(text)
        assert exc_info.value.line_number == 2
