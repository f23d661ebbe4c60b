"""EEPROM edit session: one image, loaded from and saved to Intel HEX."""

from __future__ import annotations

from pathlib import Path

from bmu_eeprom.codec import ihex
from bmu_eeprom.codec.image import check_image, hexdump, new_image
from bmu_eeprom.codec.metadata import apply_edit, decode_metadata, encode_metadata
from bmu_eeprom.codec.ring import find_current, ring_status, rotate_counter, set_counter
from bmu_eeprom.config import EditorConfig
from bmu_eeprom.models.metadata import FieldEdit, MetadataRecord
from bmu_eeprom.models.ring import CounterSlot, RingStatus
from bmu_eeprom.utils.logging import get_logger

logger = get_logger(__name__)


class EepromEditor:
    """Owns one EEPROM image and applies decoded edits to it.

    Callers must serialize access; the image is mutated in place.
    """

    def __init__(self, config: EditorConfig | None = None) -> None:
        self._config = config or EditorConfig()
        self._image = new_image()
        self._dirty = False
        self._path: Path | None = None

    @property
    def config(self) -> EditorConfig:
        return self._config

    @property
    def image(self) -> bytearray:
        return self._image

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def has_unsaved_changes(self) -> bool:
        return self._dirty

    def new(self) -> None:
        """Reset to an erased image."""
        self._image = new_image()
        self._path = None
        self._dirty = False
        logger.info("image_reset")

    def load_image(self, image: bytes | bytearray) -> None:
        """Replace the session image with a copy of ``image``."""
        check_image(image)
        self._image = bytearray(image)
        self._dirty = False

    # -- Intel HEX ---------------------------------------------------------

    def load_text(self, text: str) -> None:
        """Decode Intel HEX text into the session.

        On failure the current image is kept.
        """
        image = ihex.decode(text, checksum_mode=self._config.checksum_mode)
        self._image = image
        self._dirty = False

    def dump_text(self) -> str:
        """Encode the session image as Intel HEX text."""
        return ihex.encode(self._image, record_size=self._config.record_size)

    def load_file(self, path: str | Path) -> None:
        """Load an ``.eep``/``.hex`` file."""
        path = Path(path)
        self.load_text(path.read_text(encoding="ascii", errors="replace"))
        self._path = path
        logger.info("image_loaded", path=str(path))

    def save_file(self, path: str | Path | None = None) -> Path:
        """Write the whole image to ``path`` (or the path it was loaded from)."""
        target = Path(path) if path is not None else self._path
        if target is None:
            raise ValueError("No file path given and no file loaded")
        target.write_text(self.dump_text(), encoding="ascii")
        self._path = target
        self._dirty = False
        logger.info("image_saved", path=str(target))
        return target

    # -- Metadata ----------------------------------------------------------

    @property
    def metadata(self) -> MetadataRecord:
        return decode_metadata(self._image, self._config.revision)

    def apply_edit(self, edit: FieldEdit) -> None:
        """Apply one field edit to the image."""
        apply_edit(self._image, edit, self._config.revision)
        self._dirty = True
        logger.info("field_edited", field=str(edit.field), value=edit.value)

    def apply_metadata(self, record: MetadataRecord) -> None:
        """Encode a whole metadata record; nothing is written if any field is invalid."""
        encode_metadata(self._image, record, self._config.revision)
        self._dirty = True
        logger.info("metadata_applied", unique_id=f"0x{record.unique_id:08X}")

    # -- Frame counter -----------------------------------------------------

    @property
    def current_counter(self) -> CounterSlot | None:
        return find_current(self._image)

    def counter_status(self) -> RingStatus:
        return ring_status(self._image)

    def set_counter(self, value: int) -> int:
        """Store a new frame counter value and return the slot written."""
        if self._config.wear_leveling:
            slot = rotate_counter(self._image, value)
        else:
            slot = set_counter(self._image, value)
        self._dirty = True
        logger.info("frame_counter_set", slot=slot, value=value)
        return slot

    def hexdump(self) -> str:
        return hexdump(self._image)
