"""Park Linking — link national-park records to their open-data counterparts."""

__version__ = "0.1.0"
