"""
Search-unit sources.
"""

from src.sources.file_source import FileSearchUnitSource, read_entries, slugify

__all__ = [
    "FileSearchUnitSource",
    "read_entries",
    "slugify",
]
