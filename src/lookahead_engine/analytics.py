"""Schedule analytics.

Summaries and estimate-accuracy metrics for look-ahead schedules, plus a
tabular view of the tasks as a pandas DataFrame.
"""

from dataclasses import dataclass
from datetime import date, datetime

import pandas as pd

from lookahead_engine.schedule.models import LookAheadSchedule, LookAheadTask, TaskStatus

TASK_COLUMNS = [
    "sequence_order",
    "name",
    "status",
    "start_time",
    "end_time",
    "estimated_duration_min",
    "actual_duration_min",
    "variance_pct",
    "job_code",
    "well",
    "vendors",
]


@dataclass(frozen=True)
class AccuracyMetrics:
    """Estimate accuracy over completed tasks with recorded actuals.

    Attributes:
        average_variance_pct: Mean variance percentage, None without data
        total_tasks: Completed tasks with an actual duration
        accurate_count: Tasks whose variance is within tolerance
    """

    average_variance_pct: float | None
    total_tasks: int
    accurate_count: int


def format_duration(minutes: float) -> str:
    """Format minutes as "2h 30m" or "45m"."""
    hours, mins = divmod(int(minutes), 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def format_total_duration(schedule: LookAheadSchedule) -> str:
    """Format a schedule's span as "1d 4h" or "6h"."""
    hours = int(schedule.total_duration.total_seconds()) // 3600
    days, remaining = divmod(hours, 24)
    if days > 0:
        return f"{days}d {remaining}h"
    return f"{hours}h"


def tasks_to_frame(schedule: LookAheadSchedule) -> pd.DataFrame:
    """Tabulate a schedule's tasks in sequence order.

    Returns:
        DataFrame with TASK_COLUMNS, one row per task

    Example:
        >>> df = tasks_to_frame(schedule)
        >>> df[["name", "start_time", "end_time"]]
    """
    records = [
        {
            "sequence_order": t.sequence_order,
            "name": t.name,
            "status": t.status.value,
            "start_time": t.start_time,
            "end_time": t.end_time,
            "estimated_duration_min": t.estimated_duration_min,
            "actual_duration_min": t.actual_duration_min,
            "variance_pct": t.variance_percentage,
            "job_code": t.job_code.code if t.job_code is not None else None,
            "well": t.well,
            "vendors": ", ".join(v.company_name for v in t.assigned_vendors),
        }
        for t in schedule.sorted_tasks
    ]
    return pd.DataFrame(records, columns=TASK_COLUMNS)


def duration_by_job_code(schedule: LookAheadSchedule) -> pd.DataFrame:
    """Estimated and actual minutes per job code.

    Tasks without a job code are grouped under "(none)".

    Returns:
        DataFrame with columns: job_code, tasks, estimated_min, actual_min
    """
    df = tasks_to_frame(schedule)
    if df.empty:
        return pd.DataFrame(columns=["job_code", "tasks", "estimated_min", "actual_min"])

    df["job_code"] = df["job_code"].fillna("(none)")
    df["actual_duration_min"] = pd.to_numeric(df["actual_duration_min"])
    return (
        df.groupby("job_code")
        .agg(
            tasks=("name", "count"),
            estimated_min=("estimated_duration_min", "sum"),
            actual_min=("actual_duration_min", "sum"),
        )
        .reset_index()
    )


def completed_with_actuals(schedule: LookAheadSchedule) -> list[LookAheadTask]:
    return [t for t in schedule.sorted_tasks if t.actual_duration_min is not None]


def accuracy_metrics(schedule: LookAheadSchedule, tolerance_pct: float = 10.0) -> AccuracyMetrics:
    """Measure how close estimates were to actual durations.

    Args:
        schedule: Schedule to analyze
        tolerance_pct: Absolute variance percentage counted as accurate

    Returns:
        AccuracyMetrics

    Example:
        >>> metrics = accuracy_metrics(schedule)
        >>> print(f"{metrics.accurate_count}/{metrics.total_tasks} within 10%")
    """
    tasks = completed_with_actuals(schedule)
    if not tasks:
        return AccuracyMetrics(None, 0, 0)

    variances = [t.variance_percentage for t in tasks if t.variance_percentage is not None]
    average = sum(variances) / len(variances) if variances else None
    accurate = sum(1 for v in variances if abs(v) <= tolerance_pct)
    return AccuracyMetrics(average, len(tasks), accurate)


def schedule_summary(schedule: LookAheadSchedule) -> dict:
    """Headline numbers for a schedule."""
    tasks = completed_with_actuals(schedule)
    return {
        "name": schedule.name,
        "start_date": schedule.start_date,
        "end_date": schedule.calculated_end_date,
        "task_count": schedule.task_count,
        "completed": schedule.count_by_status(TaskStatus.COMPLETED),
        "scheduled": schedule.count_by_status(TaskStatus.SCHEDULED),
        "in_progress": schedule.count_by_status(TaskStatus.IN_PROGRESS),
        "delayed": schedule.count_by_status(TaskStatus.DELAYED),
        "progress": schedule.progress_percentage,
        "total_estimated_min": sum(t.estimated_duration_min for t in schedule.tasks),
        "total_actual_min": sum(t.actual_duration_min for t in tasks),
        "average_variance_pct": accuracy_metrics(schedule).average_variance_pct,
    }


def tasks_for_date(schedule: LookAheadSchedule, day: date) -> list[LookAheadTask]:
    """Tasks starting on a calendar day."""
    return [t for t in schedule.sorted_tasks if t.start_time.date() == day]


def task_dates(schedule: LookAheadSchedule) -> list[date]:
    """Distinct calendar days on which tasks start, ascending."""
    return sorted({t.start_time.date() for t in schedule.tasks})


def next_pending_task(schedule: LookAheadSchedule, now: datetime) -> LookAheadTask | None:
    """First scheduled task that has not started yet."""
    return next(
        (
            t
            for t in schedule.sorted_tasks
            if t.status == TaskStatus.SCHEDULED and t.start_time > now
        ),
        None,
    )


def current_task(schedule: LookAheadSchedule, now: datetime) -> LookAheadTask | None:
    """The task in progress, else the scheduled task whose window covers now."""
    ordered = schedule.sorted_tasks
    in_progress = next((t for t in ordered if t.status == TaskStatus.IN_PROGRESS), None)
    if in_progress is not None:
        return in_progress
    return next(
        (
            t
            for t in ordered
            if t.status == TaskStatus.SCHEDULED and t.start_time <= now < t.end_time
        ),
        None,
    )
