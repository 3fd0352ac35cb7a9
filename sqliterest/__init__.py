"""SQLite database exposed as a REST resource collection."""
__version__ = "0.1.0"
