"""Metadata region models."""

from __future__ import annotations

from pydantic import BaseModel

from bmu_eeprom.layout import MetadataField


class MetadataRecord(BaseModel):
    """Decoded metadata region (0x0000-0x003F).

    Currents are in amps. Limits are enforced by the encoder for the
    selected format revision, not here.
    """

    unique_id: int
    expected_cell_count: int
    max_charge_current: float
    max_discharge_current: float
    sequential_count_mismatch: int


class FieldEdit(BaseModel):
    """A single metadata field change to be applied to an image."""

    field: MetadataField
    value: int | float
