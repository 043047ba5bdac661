"""Look-Ahead Engine - well operations look-ahead scheduling.

Modules:
- schedule: Tasks, time cascading and schedule editing
- catalog: Job codes and vendors
- reminders: Vendor call reminder planning
- analytics: Summaries and estimate accuracy
- data: Memory and CSV storage
"""

from lookahead_engine.catalog import JobCode, JobCodeCategory, Vendor, VendorServiceType
from lookahead_engine.config import EngineConfig, configure_logging, load_config
from lookahead_engine.data import CSVStore, MemoryStore, ScheduleStore, create_store
from lookahead_engine.manager import ScheduleManager
from lookahead_engine.schedule import (
    LookAheadSchedule,
    LookAheadTask,
    ScheduleEditor,
    TaskStatus,
    TaskVendorAssignment,
    recalculate_all_times,
)

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "load_config",
    "configure_logging",
    "JobCode",
    "JobCodeCategory",
    "Vendor",
    "VendorServiceType",
    "LookAheadSchedule",
    "LookAheadTask",
    "TaskStatus",
    "TaskVendorAssignment",
    "ScheduleEditor",
    "recalculate_all_times",
    "ScheduleManager",
    "ScheduleStore",
    "MemoryStore",
    "CSVStore",
    "create_store",
]
