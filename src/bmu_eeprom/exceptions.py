"""Exception hierarchy for EEPROM image encoding and decoding."""

from __future__ import annotations


class BmuEepromError(Exception):
    """Base exception for all bmu_eeprom errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ImageSizeError(BmuEepromError):
    """The buffer passed in is not a full EEPROM image."""


class OutOfRangeError(BmuEepromError):
    """A value cannot be represented in its field's width and scale."""

    def __init__(self, message: str, field: str | None = None, value: object = None) -> None:
        self.field = field
        self.value = value
        super().__init__(message)


class MalformedRecordError(BmuEepromError):
    """An Intel HEX line could not be parsed."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class ChecksumMismatchError(MalformedRecordError):
    """A record's trailing checksum does not match its contents."""

    def __init__(
        self,
        expected: int,
        actual: int,
        line_number: int | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"checksum mismatch: record has 0x{actual:02X}, computed 0x{expected:02X}",
            line_number=line_number,
        )


class ConfigError(BmuEepromError):
    """Editor configuration could not be loaded."""
