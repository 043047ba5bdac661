"""Vendor call reminder planning.

Works out which vendor calls are due for a schedule and builds the reminder
content (title, body, fire time). Delivering the reminder through an OS
notification service is left to the caller.

Reminders depend on task start times, so they should be re-planned after
any edit that cascades the schedule.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from lookahead_engine.schedule.models import LookAheadSchedule, LookAheadTask, TaskStatus

logger = logging.getLogger(__name__)

REMINDER_PREFIX = "call-"


@dataclass(frozen=True)
class CallReminder:
    """A planned vendor call reminder for one task.

    Attributes:
        identifier: Stable id, one per task (``call-<task id>``)
        task_id: Id of the task the reminder belongs to
        fire_at: When the reminder should fire
        title: Short headline
        body: One line per vendor, plus the well if known
        vendor_ids: Vendors to call
    """

    identifier: str
    task_id: str
    fire_at: datetime
    title: str
    body: str
    vendor_ids: tuple[str, ...] = field(default_factory=tuple)


def reminder_identifier(task: LookAheadTask) -> str:
    return f"{REMINDER_PREFIX}{task.id}"


def needs_call_reminder(task: LookAheadTask, now: datetime, window_min: int = 60) -> bool:
    """Whether a scheduled task's call reminder falls within the coming window."""
    if not task.assignments or task.status != TaskStatus.SCHEDULED:
        return False
    until = task.reminder_time - now
    return timedelta(0) < until < timedelta(minutes=window_min)


def is_call_overdue(task: LookAheadTask, now: datetime) -> bool:
    """A scheduled task with an unconfirmed vendor whose reminder has passed."""
    if task.status != TaskStatus.SCHEDULED:
        return False
    return any(a.is_reminder_overdue(task.start_time, now) for a in task.assignments)


def plan_call_reminder(task: LookAheadTask, now: datetime) -> CallReminder | None:
    """Build the reminder for a task.

    Returns None when no vendor is assigned or the reminder time has passed.
    """
    vendors = task.assigned_vendors
    if not vendors:
        logger.debug(f"No vendors assigned, skipping reminder for: {task.name}")
        return None

    fire_at = task.reminder_time
    if fire_at <= now:
        logger.debug(f"Reminder time has passed, skipping for: {task.name}")
        return None

    if len(vendors) == 1:
        title = f"Call Reminder: {task.name}"
    else:
        title = f"Call Reminder: {task.name} ({len(vendors)} vendors)"

    lines = []
    for vendor in vendors:
        line = f"• {vendor.company_name}"
        if vendor.phone:
            line += f" - {vendor.phone}"
        lines.append(line)
    if task.well:
        lines.append(f"Well: {task.well}")

    return CallReminder(
        identifier=reminder_identifier(task),
        task_id=str(task.id),
        fire_at=fire_at,
        title=title,
        body="\n".join(lines),
        vendor_ids=tuple(str(v.id) for v in vendors),
    )


def plan_schedule_reminders(schedule: LookAheadSchedule, now: datetime) -> list[CallReminder]:
    """Plan reminders for every active task with vendors, in sequence order."""
    reminders = []
    for task in schedule.sorted_tasks:
        if not task.is_active:
            continue
        reminder = plan_call_reminder(task, now)
        if reminder is not None:
            reminders.append(reminder)

    logger.debug(f"Planned {len(reminders)} call reminders for '{schedule.name}'")
    return reminders


def tasks_needing_calls(schedule: LookAheadSchedule) -> list[LookAheadTask]:
    """Active tasks with vendors but no confirmed call yet."""
    return [
        t
        for t in schedule.sorted_tasks
        if t.assignments and not t.has_confirmed_call and t.is_active
    ]


def tasks_with_overdue_calls(schedule: LookAheadSchedule, now: datetime) -> list[LookAheadTask]:
    return [t for t in schedule.sorted_tasks if is_call_overdue(t, now)]


def tasks_with_confirmed_calls(schedule: LookAheadSchedule) -> list[LookAheadTask]:
    return [t for t in schedule.sorted_tasks if t.has_confirmed_call]
