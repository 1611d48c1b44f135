"""
Record store and renderer interfaces, plus the level dump implementations.
"""

from .protocols import AreaHeader, RecordStore, Renderer
from .json_store import JsonRecordStore, LevelDumpSchema, LEVEL_DUMP_FILENAME
from .prerendered import PrerenderedRenderer

__all__ = [
    "AreaHeader",
    "RecordStore",
    "Renderer",
    "JsonRecordStore",
    "LevelDumpSchema",
    "LEVEL_DUMP_FILENAME",
    "PrerenderedRenderer",
]
