"""Schedule lifecycle: creation, activation, duplication.

At most one schedule is active at a time. Creating, activating or
duplicating a schedule deactivates every other schedule in the store.
"""

import logging
import uuid
from datetime import datetime

from lookahead_engine import reminders
from lookahead_engine.analytics import AccuracyMetrics, accuracy_metrics
from lookahead_engine.config import EngineConfig
from lookahead_engine.data.storage import MemoryStore, ScheduleStore
from lookahead_engine.schedule.editor import ScheduleEditor
from lookahead_engine.schedule.models import (
    LookAheadSchedule,
    LookAheadTask,
    TaskVendorAssignment,
)

logger = logging.getLogger(__name__)


class ScheduleManager:
    """Keeps track of all schedules and the one currently being worked on.

    Args:
        store: Storage backend (in-memory when omitted)
        config: Engine configuration

    Example:
        >>> manager = ScheduleManager()
        >>> schedule = manager.create_schedule("Pad A look ahead", datetime(2025, 1, 1, 8))
        >>> manager.editor().append_task(LookAheadTask(name="Rig up"))
        >>> manager.save()
    """

    def __init__(self, store: ScheduleStore | None = None, config: EngineConfig | None = None):
        self.store = store if store is not None else MemoryStore()
        self.config = config or EngineConfig()
        self.schedule: LookAheadSchedule | None = next(
            (s for s in self.store.list_schedules() if s.is_active), None
        )

    @property
    def schedules(self) -> list[LookAheadSchedule]:
        return self.store.list_schedules()

    @property
    def active_schedule(self) -> LookAheadSchedule | None:
        return next((s for s in self.schedules if s.is_active), None)

    def _require_current(self) -> LookAheadSchedule:
        if self.schedule is None:
            raise RuntimeError("No current schedule. Create or switch to one first.")
        return self.schedule

    def _deactivate_others(self, keep: LookAheadSchedule) -> None:
        for other in self.schedules:
            if other.id != keep.id and other.is_active:
                other.is_active = False
                self.store.save_schedule(other)

    def create_schedule(
        self, name: str, start_date: datetime, well: str | None = None, pad: str | None = None
    ) -> LookAheadSchedule:
        """Create a new active schedule and make it current."""
        schedule = LookAheadSchedule(name=name, start_date=start_date, well=well, pad=pad)
        self._deactivate_others(schedule)
        self.store.save_schedule(schedule)
        self.schedule = schedule

        logger.info(f"Created schedule '{name}' starting {start_date.isoformat()}")
        return schedule

    def switch_to(self, schedule_id: uuid.UUID) -> LookAheadSchedule:
        """Make a schedule current without changing which one is active."""
        self.schedule = self.store.get_schedule(schedule_id)
        return self.schedule

    def activate(self, schedule_id: uuid.UUID) -> LookAheadSchedule:
        """Make a schedule the single active one and switch to it."""
        schedule = self.store.get_schedule(schedule_id)
        self._deactivate_others(schedule)
        schedule.is_active = True
        self.store.save_schedule(schedule)
        self.schedule = schedule
        return schedule

    def duplicate_schedule(self) -> LookAheadSchedule:
        """Copy the current schedule, deactivate the source, switch to the copy.

        Tasks and vendor assignments get fresh ids; vendors and job codes are
        shared with the source. Status and actuals start over.
        """
        source = self._require_current()
        copy = LookAheadSchedule(
            name=f"{source.name} (Copy)",
            start_date=source.start_date,
            notes=source.notes,
            well=source.well,
            pad=source.pad,
        )

        for task in source.sorted_tasks:
            new_task = LookAheadTask(
                name=task.name,
                notes=task.notes,
                sequence_order=task.sequence_order,
                start_time=task.start_time,
                estimated_duration_min=task.estimated_duration_min,
                start_depth_m=task.start_depth_m,
                end_depth_m=task.end_depth_m,
                is_meterage_based=task.is_meterage_based,
                call_reminder_minutes_before=task.call_reminder_minutes_before,
                vendor_comments=task.vendor_comments,
                final_call_description=task.final_call_description,
                job_code=task.job_code,
                well=task.well,
                pad=task.pad,
            )
            new_task.assignments = [
                TaskVendorAssignment(
                    vendor=a.vendor,
                    call_reminder_minutes_before=a.call_reminder_minutes_before,
                    notes=a.notes,
                )
                for a in task.assignments
            ]
            copy.tasks.append(new_task)

        source.is_active = False
        self.store.save_schedule(source)
        self._deactivate_others(copy)
        self.store.save_schedule(copy)
        self.schedule = copy

        logger.info(f"Duplicated schedule '{source.name}' with {len(copy.tasks)} tasks")
        return copy

    def delete_schedule(self, schedule_id: uuid.UUID) -> None:
        self.store.delete_schedule(schedule_id)
        if self.schedule is not None and self.schedule.id == schedule_id:
            self.schedule = None

    def editor(self) -> ScheduleEditor:
        """Editor for the current schedule."""
        return ScheduleEditor(self._require_current(), self.config)

    def save(self) -> None:
        """Persist the current schedule."""
        self.store.save_schedule(self._require_current())

    # Views over the current schedule

    def tasks_requiring_calls(self, now: datetime | None = None) -> list[LookAheadTask]:
        """Tasks whose call reminder falls within the configured window."""
        now = now or datetime.now()
        window = self.config.reminder_window_min
        return [
            t
            for t in self._require_current().sorted_tasks
            if reminders.needs_call_reminder(t, now, window)
        ]

    def overdue_tasks(self, now: datetime | None = None) -> list[LookAheadTask]:
        """Scheduled tasks whose start time has passed."""
        now = now or datetime.now()
        return [t for t in self._require_current().sorted_tasks if t.is_overdue(now)]

    def accuracy(self) -> AccuracyMetrics:
        return accuracy_metrics(self._require_current(), self.config.accuracy_tolerance_pct)
