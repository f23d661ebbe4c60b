"""Frame counter ring models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

from bmu_eeprom.layout import (
    BYTES_PER_COUNTER,
    COUNTER_INVALID,
    EEPROM_FRAME_COUNTER_BASE,
)


class CounterSlot(BaseModel):
    """One 4-byte position in the frame counter ring."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    value: int = Field(ge=0, le=COUNTER_INVALID)

    @computed_field
    @property
    def address(self) -> int:
        return EEPROM_FRAME_COUNTER_BASE + self.index * BYTES_PER_COUNTER

    @computed_field
    @property
    def valid(self) -> bool:
        return self.value != COUNTER_INVALID


class RingStatus(BaseModel):
    """All ring slots plus the authoritative one, if any."""

    current: CounterSlot | None = None
    slots: list[CounterSlot] = Field(default_factory=list)
