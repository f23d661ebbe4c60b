"""Edit session layer on top of the image codecs."""

from bmu_eeprom.core.editor import EepromEditor
from bmu_eeprom.core.generator import generate_image

__all__ = [
    "EepromEditor",
    "generate_image",
]
