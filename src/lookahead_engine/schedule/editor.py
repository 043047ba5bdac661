"""Editing operations for a look-ahead schedule.

Every structural edit (insert, delete, move, duration or start date change)
rewrites sequence orders to 0..n-1 and then cascades start times through the
whole schedule, so the chain invariant holds after each call.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Iterable

from lookahead_engine.catalog.job_codes import JobCode
from lookahead_engine.catalog.vendors import Vendor
from lookahead_engine.config import EngineConfig
from lookahead_engine.schedule.cascade import recalculate_all_times
from lookahead_engine.schedule.models import (
    LookAheadSchedule,
    LookAheadTask,
    TaskStatus,
    TaskVendorAssignment,
)

logger = logging.getLogger(__name__)


class ScheduleEditor:
    """Applies edits to one schedule and keeps its timeline linked.

    Args:
        schedule: Schedule to edit in place
        config: Engine configuration (defaults used when omitted)

    Example:
        >>> editor = ScheduleEditor(schedule)
        >>> editor.append_task(LookAheadTask(name="Drill 311mm", estimated_duration_min=600))
        >>> editor.update_duration(task, 720)
    """

    def __init__(self, schedule: LookAheadSchedule, config: EngineConfig | None = None):
        self.schedule = schedule
        self.config = config or EngineConfig()

    # Internals

    def _ordered(self) -> list[LookAheadTask]:
        return self.schedule.sorted_tasks

    def _apply_order(self, ordered: list[LookAheadTask], now: datetime | None = None) -> None:
        """Assign sequence orders from list position and cascade times."""
        for i, task in enumerate(ordered):
            if task.sequence_order != i:
                task.sequence_order = i
        recalculate_all_times(self.schedule)
        self.schedule.updated_at = now or datetime.now()

    def _require(self, task: LookAheadTask) -> LookAheadTask:
        return self.schedule.get_task(task.id)

    def _check_timeline(self, start: datetime, durations: Iterable[float]) -> None:
        """Raise ValueError if a chain with these durations cannot be represented."""
        end = start
        try:
            for minutes in durations:
                end += timedelta(minutes=minutes)
        except OverflowError as exc:
            raise ValueError(
                f"Schedule '{self.schedule.name}' would run past the latest representable date"
            ) from exc

    # Insertion and deletion

    def insert_task(self, position: int, task: LookAheadTask) -> LookAheadTask:
        """Insert a task at a position and cascade subsequent times.

        Tasks at or after ``position`` move down one place. Positions outside
        ``[0, n]`` are clamped.

        Args:
            position: Target index in the sorted task list
            task: New task (must not already belong to the schedule)

        Returns:
            The inserted task
        """
        if any(t.id == task.id for t in self.schedule.tasks):
            raise ValueError(f"Task {task.id} is already in schedule '{self.schedule.name}'")

        ordered = self._ordered()
        self._check_timeline(
            self.schedule.start_date,
            [t.estimated_duration_min for t in ordered] + [task.estimated_duration_min],
        )
        position = min(max(position, 0), len(ordered))
        ordered.insert(position, task)
        self.schedule.tasks.append(task)
        self._apply_order(ordered)

        logger.debug(f"Inserted task '{task.name}' at position {position}")
        return task

    def append_task(self, task: LookAheadTask) -> LookAheadTask:
        """Insert a task at the end of the schedule."""
        return self.insert_task(len(self.schedule.tasks), task)

    def delete_task(self, task: LookAheadTask) -> None:
        """Remove a task and pull later tasks forward."""
        target = self._require(task)
        self.schedule.tasks = [t for t in self.schedule.tasks if t.id != target.id]
        self._apply_order(self._ordered())

        logger.debug(f"Deleted task '{target.name}'")

    def delete_tasks(self, offsets: Iterable[int]) -> None:
        """Delete tasks by their offsets in the sorted list.

        Offsets that fall outside the list are ignored.
        """
        ordered = self._ordered()
        doomed = {ordered[i].id for i in set(offsets) if 0 <= i < len(ordered)}
        if not doomed:
            return

        self.schedule.tasks = [t for t in self.schedule.tasks if t.id not in doomed]
        self._apply_order(self._ordered())

        logger.debug(f"Deleted {len(doomed)} tasks")

    # Reordering

    def move_task(self, task: LookAheadTask, new_position: int) -> None:
        """Move a task to a new position.

        ``new_position`` is the destination index in the list before the task
        is removed, the convention used by drag-and-drop lists: moving the
        first of three tasks to position 3 places it last.

        Raises:
            IndexError: If ``new_position`` is outside ``[0, n]``
        """
        target = self._require(task)
        ordered = self._ordered()
        if not 0 <= new_position <= len(ordered):
            raise IndexError(f"Position {new_position} out of range for {len(ordered)} tasks")

        old_position = next(i for i, t in enumerate(ordered) if t.id == target.id)
        self.move_tasks([old_position], new_position)

    def move_tasks(self, offsets: Iterable[int], destination: int) -> None:
        """Move tasks at the given offsets to a destination index.

        The moved tasks keep their relative order and land before the task
        that was at ``destination`` before the move.

        Raises:
            IndexError: If an offset or the destination is out of range
        """
        ordered = self._ordered()
        offsets = sorted(set(offsets))
        if not offsets:
            return
        if offsets[0] < 0 or offsets[-1] >= len(ordered):
            raise IndexError(f"Offsets {offsets} out of range for {len(ordered)} tasks")
        if not 0 <= destination <= len(ordered):
            raise IndexError(f"Destination {destination} out of range for {len(ordered)} tasks")

        moving = [ordered[i] for i in offsets]
        remaining = [t for i, t in enumerate(ordered) if i not in offsets]
        insert_at = destination - sum(1 for i in offsets if i < destination)
        reordered = remaining[:insert_at] + moving + remaining[insert_at:]

        if [t.id for t in reordered] == [t.id for t in ordered]:
            return

        self._apply_order(reordered)
        logger.debug(f"Moved tasks {offsets} to {destination}")

    # Timing

    def update_duration(self, task: LookAheadTask, new_duration_min: float) -> None:
        """Change a task's estimated duration and cascade later tasks."""
        if not math.isfinite(new_duration_min) or new_duration_min < 0:
            raise ValueError(f"Duration must be finite and non-negative, got {new_duration_min}")

        target = self._require(task)
        self._check_timeline(
            self.schedule.start_date,
            [
                new_duration_min if t.id == target.id else t.estimated_duration_min
                for t in self._ordered()
            ],
        )
        target.estimated_duration_min = new_duration_min
        target.updated_at = datetime.now()
        self._apply_order(self._ordered())

        logger.debug(f"Duration of '{target.name}' set to {new_duration_min} min")

    def update_schedule_start_date(self, new_date: datetime) -> None:
        """Move the schedule start and cascade every task."""
        self._check_timeline(new_date, [t.estimated_duration_min for t in self._ordered()])
        self.schedule.start_date = new_date
        self._apply_order(self._ordered())

        logger.debug(f"Schedule '{self.schedule.name}' now starts {new_date.isoformat()}")

    def shift_schedule(self, minutes: float) -> None:
        """Shift the whole schedule by a signed number of minutes."""
        self.update_schedule_start_date(self.schedule.start_date + timedelta(minutes=minutes))

    def recalculate_all_times(self) -> None:
        """Repair orders and times from the schedule start."""
        self._apply_order(self._ordered())

    # Estimation

    def estimate_duration(self, job_code: JobCode | None, meters: float | None = None) -> float:
        """Estimate a duration from a job code, or the configured default."""
        if job_code is None:
            return self.config.default_task_duration_min
        return job_code.estimate_duration(meters)

    def recalculate_duration_for_meterage(self, task: LookAheadTask) -> None:
        """Re-estimate a meterage-based task after its depths change."""
        if not task.is_meterage_based or task.job_code is None:
            return
        self.update_duration(task, task.job_code.estimate_duration(task.meterage_m))

    # Vendors

    def assign_vendor(
        self, task: LookAheadTask, vendor: Vendor, lead_time_min: int | None = None
    ) -> TaskVendorAssignment:
        """Assign a vendor to a task, using the configured lead time by default."""
        target = self._require(task)
        if any(a.vendor.id == vendor.id for a in target.assignments):
            raise ValueError(f"{vendor.company_name} is already assigned to '{target.name}'")

        if lead_time_min is None:
            lead_time_min = self.config.default_call_reminder_min
        assignment = target.add_vendor(vendor, lead_time_min)
        target.notification_scheduled = False
        return assignment

    def confirm_vendor(self, task: LookAheadTask, vendor: Vendor) -> None:
        """Mark a vendor's call for a task as confirmed."""
        target = self._require(task)
        for assignment in target.assignments:
            if assignment.vendor.id == vendor.id:
                assignment.is_confirmed = True
                assignment.updated_at = datetime.now()
                return
        raise KeyError(f"{vendor.company_name} is not assigned to '{target.name}'")

    # Status transitions

    def start_task(self, task: LookAheadTask, now: datetime | None = None) -> None:
        target = self._require(task)
        now = now or datetime.now()
        target.set_status(TaskStatus.IN_PROGRESS, now)
        self.schedule.updated_at = now

    def delay_task(self, task: LookAheadTask, now: datetime | None = None) -> None:
        target = self._require(task)
        now = now or datetime.now()
        target.set_status(TaskStatus.DELAYED, now)
        self.schedule.updated_at = now

    def complete_task(
        self, task: LookAheadTask, actual_duration_min: float, now: datetime | None = None
    ) -> None:
        """Mark a task completed and teach its job code the actual duration."""
        if not math.isfinite(actual_duration_min) or actual_duration_min < 0:
            raise ValueError(f"Actual duration must be finite and non-negative, got {actual_duration_min}")

        target = self._require(task)
        now = now or datetime.now()
        target.set_status(TaskStatus.COMPLETED, now)
        target.actual_duration_min = actual_duration_min

        if target.job_code is not None:
            target.job_code.record_completion(actual_duration_min, target.meterage_m)

        self.schedule.updated_at = now
        logger.info(f"Completed '{target.name}' in {actual_duration_min} min")

    # Filtering

    def filtered_tasks(
        self,
        status: TaskStatus | None = None,
        show_completed: bool = True,
        search: str = "",
    ) -> list[LookAheadTask]:
        """Sorted tasks matching a status, completion toggle and search text.

        The search is case-insensitive over task name, job code name, vendor
        company names and well name.
        """
        tasks = self._ordered()

        if status is not None:
            tasks = [t for t in tasks if t.status == status]

        if not show_completed:
            tasks = [
                t for t in tasks if t.status not in (TaskStatus.COMPLETED, TaskStatus.CANCELLED)
            ]

        if search:
            needle = search.lower()
            tasks = [t for t in tasks if _matches(t, needle)]

        return tasks


def _matches(task: LookAheadTask, needle: str) -> bool:
    if needle in task.name.lower():
        return True
    if task.job_code is not None and needle in task.job_code.name.lower():
        return True
    if any(needle in v.company_name.lower() for v in task.assigned_vendors):
        return True
    return task.well is not None and needle in task.well.lower()
