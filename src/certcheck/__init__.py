"""certcheck: insurance certificate extraction and requirement validation."""

__version__ = "0.1.0"
