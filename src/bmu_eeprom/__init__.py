"""bmu_eeprom - battery module controller EEPROM image tools."""

__version__ = "0.1.0"
