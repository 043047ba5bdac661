"""Look-ahead schedule data models.

A schedule owns an ordered sequence of tasks. Only a task's start time is
stored; its end time is always derived from the start time and the estimated
duration, so ``end_time == start_time + duration`` can never drift.

Ordering within a schedule is defined by ``sequence_order``. Start times are
maintained by :mod:`lookahead_engine.schedule.cascade`.
"""

import uuid
from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from lookahead_engine.catalog.job_codes import JobCode
from lookahead_engine.catalog.vendors import Vendor


class TaskStatus(str, Enum):
    """Lifecycle status of a look-ahead task."""

    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    DELAYED = "Delayed"
    CANCELLED = "Cancelled"

    @property
    def sort_order(self) -> int:
        """Display priority, most urgent first."""
        return _STATUS_SORT_ORDER[self]


_STATUS_SORT_ORDER = {
    TaskStatus.IN_PROGRESS: 0,
    TaskStatus.DELAYED: 1,
    TaskStatus.SCHEDULED: 2,
    TaskStatus.COMPLETED: 3,
    TaskStatus.CANCELLED: 4,
}


class CallOutcome(str, Enum):
    CONFIRMED = "Confirmed"
    NO_ANSWER = "No Answer"
    LEFT_MESSAGE = "Left Message"
    RESCHEDULED = "Rescheduled"
    CANCELLED = "Cancelled"
    STANDBY = "On Standby"
    CALLBACK = "Callback Requested"


class CallLogEntry(BaseModel):
    """Record of a vendor call made for a task."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    timestamp: datetime = Field(default_factory=datetime.now)
    caller_name: str = ""
    contacted_name: str = ""
    outcome: CallOutcome = CallOutcome.CONFIRMED
    notes: str = ""
    follow_up_required: bool = False
    follow_up_time: datetime | None = None
    duration_seconds: int = Field(0, ge=0)
    vendor: Vendor | None = None


class TaskVendorAssignment(BaseModel):
    """Links a vendor to a task with its own call reminder lead time."""

    model_config = ConfigDict(validate_assignment=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    vendor: Vendor
    call_reminder_minutes_before: int = Field(60, ge=0, description="Lead time before task start")
    is_confirmed: bool = False
    notes: str = ""

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def reminder_time(self, task_start: datetime) -> datetime:
        """Time to call this vendor for a task starting at ``task_start``."""
        return task_start - timedelta(minutes=self.call_reminder_minutes_before)

    def is_reminder_overdue(self, task_start: datetime, now: datetime) -> bool:
        return self.reminder_time(task_start) < now and not self.is_confirmed

    @property
    def lead_time_formatted(self) -> str:
        presets = {
            30: "30 min before",
            60: "1 hour before",
            120: "2 hours before",
            240: "4 hours before",
            1440: "1 day before",
        }
        minutes = self.call_reminder_minutes_before
        if minutes in presets:
            return presets[minutes]
        hours, mins = divmod(minutes, 60)
        if hours > 0 and mins > 0:
            return f"{hours}h {mins}m before"
        if hours > 0:
            return f"{hours}h before"
        return f"{mins}m before"


class LookAheadTask(BaseModel):
    """Individual task in a look-ahead schedule.

    Attributes:
        name: Task name
        sequence_order: Position within the schedule (0-based)
        start_time: Scheduled start, maintained by the cascade
        estimated_duration_min: Planned duration in minutes
        actual_duration_min: Recorded duration once completed
        start_depth_m: Start depth for meterage-based estimates
        end_depth_m: End depth for meterage-based estimates
        status: Current lifecycle status
        job_code: Optional job code used for estimates and learning
        well: Well name the task applies to
        pad: Pad name the task applies to
        assignments: Vendors to call for this task
    """

    model_config = ConfigDict(validate_assignment=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    notes: str = ""
    sequence_order: int = Field(0, ge=0)

    # Timing
    start_time: datetime = Field(default_factory=datetime.now)
    estimated_duration_min: float = Field(60.0, ge=0, allow_inf_nan=False)
    actual_duration_min: float | None = Field(None, ge=0, allow_inf_nan=False)

    # Meterage-based estimation
    start_depth_m: float | None = None
    end_depth_m: float | None = None
    is_meterage_based: bool = False

    status: TaskStatus = TaskStatus.SCHEDULED
    started_at: datetime | None = None
    completed_at: datetime | None = None

    # Call scheduling
    call_reminder_minutes_before: int = Field(60, ge=0)
    notification_scheduled: bool = False
    vendor_comments: str = ""
    final_call_description: str = ""

    job_code: JobCode | None = None
    well: str | None = None
    pad: str | None = None
    assignments: list[TaskVendorAssignment] = Field(default_factory=list)
    call_log: list[CallLogEntry] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.estimated_duration_min)

    @property
    def actual_end_time(self) -> datetime | None:
        if self.actual_duration_min is None:
            return None
        return self.start_time + timedelta(minutes=self.actual_duration_min)

    @property
    def meterage_m(self) -> float | None:
        """Metres between start and end depth, never negative."""
        if self.start_depth_m is None or self.end_depth_m is None:
            return None
        return max(0.0, self.end_depth_m - self.start_depth_m)

    @property
    def duration_variance_min(self) -> float | None:
        if self.actual_duration_min is None:
            return None
        return self.actual_duration_min - self.estimated_duration_min

    @property
    def variance_percentage(self) -> float | None:
        variance = self.duration_variance_min
        if variance is None or self.estimated_duration_min <= 0:
            return None
        return variance / self.estimated_duration_min * 100

    def set_status(self, status: TaskStatus, now: datetime | None = None) -> None:
        """Change status, stamping completion and first start times."""
        now = now or datetime.now()
        self.status = status
        self.updated_at = now
        if status == TaskStatus.COMPLETED:
            self.completed_at = now
        elif status == TaskStatus.IN_PROGRESS and self.started_at is None:
            self.started_at = now

    @property
    def is_active(self) -> bool:
        return self.status in (TaskStatus.SCHEDULED, TaskStatus.IN_PROGRESS)

    def is_overdue(self, now: datetime | None = None) -> bool:
        """Scheduled task whose start time has already passed."""
        now = now or datetime.now()
        return self.status == TaskStatus.SCHEDULED and self.start_time < now

    # Vendors

    @property
    def assigned_vendors(self) -> list[Vendor]:
        return [a.vendor for a in self.assignments]

    @property
    def primary_vendor(self) -> Vendor | None:
        return self.assignments[0].vendor if self.assignments else None

    @property
    def pending_assignments(self) -> list[TaskVendorAssignment]:
        return [a for a in self.assignments if not a.is_confirmed]

    @property
    def all_vendors_confirmed(self) -> bool:
        return bool(self.assignments) and not self.pending_assignments

    @property
    def has_confirmed_call(self) -> bool:
        return any(a.is_confirmed for a in self.assignments)

    @property
    def reminder_time(self) -> datetime:
        """Earliest call reminder across assignments.

        Falls back to the task-level lead time when no vendor is assigned.
        """
        times = [a.reminder_time(self.start_time) for a in self.assignments]
        if times:
            return min(times)
        return self.start_time - timedelta(minutes=self.call_reminder_minutes_before)

    def add_vendor(self, vendor: Vendor, call_reminder_minutes_before: int = 60) -> TaskVendorAssignment:
        assignment = TaskVendorAssignment(
            vendor=vendor, call_reminder_minutes_before=call_reminder_minutes_before
        )
        self.assignments.append(assignment)
        return assignment

    def remove_vendor(self, vendor: Vendor) -> None:
        self.assignments = [a for a in self.assignments if a.vendor.id != vendor.id]

    @property
    def latest_call(self) -> CallLogEntry | None:
        if not self.call_log:
            return None
        return max(self.call_log, key=lambda entry: entry.timestamp)

    @property
    def location_name(self) -> str | None:
        return self.well or self.pad

    @property
    def summary_line(self) -> str:
        parts = [f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"]
        if self.location_name:
            parts.append(self.location_name)
        if self.job_code is not None:
            parts.append(self.job_code.code)
        return " | ".join(parts)


class LookAheadSchedule(BaseModel):
    """Container for a sequence of linked look-ahead tasks."""

    model_config = ConfigDict(validate_assignment=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = "New Schedule"
    start_date: datetime = Field(default_factory=datetime.now)
    notes: str = ""
    is_active: bool = True
    well: str | None = None
    pad: str | None = None
    tasks: list[LookAheadTask] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def sorted_tasks(self) -> list[LookAheadTask]:
        """Tasks sorted by sequence order (stable for ties)."""
        return sorted(self.tasks, key=lambda t: t.sequence_order)

    @property
    def calculated_end_date(self) -> datetime:
        ordered = self.sorted_tasks
        return ordered[-1].end_time if ordered else self.start_date

    @property
    def total_duration(self) -> timedelta:
        return self.calculated_end_date - self.start_date

    @property
    def task_count(self) -> int:
        return len(self.tasks)

    def count_by_status(self, status: TaskStatus) -> int:
        return sum(1 for t in self.tasks if t.status == status)

    @property
    def progress_percentage(self) -> float:
        """Fraction of tasks completed (0.0 to 1.0)."""
        if not self.tasks:
            return 0.0
        return self.count_by_status(TaskStatus.COMPLETED) / len(self.tasks)

    def get_task(self, task_id: uuid.UUID) -> LookAheadTask:
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise KeyError(f"Task {task_id} not in schedule '{self.name}'")
