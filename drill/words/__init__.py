"""
Words Module - Word lists (units) owned by users.

The session core only reads words; units are created from uploaded
CSV files and can be deleted by their owner.
"""

from .store import InMemoryWordStore, Unit, parse_word_rows, load_directory

__all__ = [
    "InMemoryWordStore",
    "Unit",
    "parse_word_rows",
    "load_directory",
]
