"""Schedule module - Look-ahead tasks, time cascading and editing."""

from lookahead_engine.schedule.cascade import (
    cascade_times,
    chain_violations,
    recalculate_all_times,
    renumber,
)
from lookahead_engine.schedule.editor import ScheduleEditor
from lookahead_engine.schedule.models import (
    CallLogEntry,
    CallOutcome,
    LookAheadSchedule,
    LookAheadTask,
    TaskStatus,
    TaskVendorAssignment,
)

__all__ = [
    # Models
    "TaskStatus",
    "LookAheadTask",
    "LookAheadSchedule",
    "TaskVendorAssignment",
    "CallOutcome",
    "CallLogEntry",
    # Cascade
    "cascade_times",
    "recalculate_all_times",
    "renumber",
    "chain_violations",
    # Editing
    "ScheduleEditor",
]
