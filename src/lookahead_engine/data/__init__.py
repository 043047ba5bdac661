"""Data module - Persistence of schedules, vendors and job codes."""

from lookahead_engine.data.storage import (
    CSVStore,
    MemoryStore,
    ScheduleStore,
    create_store,
)

__all__ = [
    "ScheduleStore",
    "MemoryStore",
    "CSVStore",
    "create_store",
]
