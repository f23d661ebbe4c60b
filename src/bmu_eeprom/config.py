"""Editor configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bmu_eeprom.exceptions import ConfigError
from bmu_eeprom.layout import HEX_RECORD_SIZE, ChecksumMode, FormatRevision


class EditorConfig(BaseModel):
    """Settings for an EEPROM edit session."""

    model_config = ConfigDict(extra="forbid")

    revision: FormatRevision = FormatRevision.REVISED
    checksum_mode: ChecksumMode = ChecksumMode.IGNORE
    wear_leveling: bool = Field(
        default=False,
        description="Rotate to the next ring slot on counter writes instead of overwriting",
    )
    record_size: int = Field(default=HEX_RECORD_SIZE, ge=1, le=255)


def load_config(path: str | Path) -> EditorConfig:
    """Load an EditorConfig from a JSON file.

    Raises:
        ConfigError: If the file is missing or its contents are invalid.
    """
    path = Path(path)
    try:
        return EditorConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {path}: {exc}") from exc
