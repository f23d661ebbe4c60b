"""Pydantic data models for bmu_eeprom."""

from bmu_eeprom.models.metadata import FieldEdit, MetadataRecord
from bmu_eeprom.models.ring import CounterSlot, RingStatus

__all__ = [
    "CounterSlot",
    "FieldEdit",
    "MetadataRecord",
    "RingStatus",
]
