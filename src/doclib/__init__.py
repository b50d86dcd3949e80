"""doclib - document library storage and consistency engine."""

__version__ = "0.1.0"
