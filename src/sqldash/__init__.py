"""SQL-backed dashboard builder."""

__version__ = "0.1.0"
