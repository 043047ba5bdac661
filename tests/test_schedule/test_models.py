"""Tests for schedule data models."""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from lookahead_engine.schedule.models import (
    CallLogEntry,
    CallOutcome,
    LookAheadSchedule,
    LookAheadTask,
    TaskStatus,
    TaskVendorAssignment,
)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, 1, hour, minute)


class TestLookAheadTask:
    """Tests for LookAheadTask model."""

    def test_end_time_derived(self):
        task = LookAheadTask(name="Cement", start_time=at(8), estimated_duration_min=150)
        assert task.end_time == at(10, 30)

        task.estimated_duration_min = 30
        assert task.end_time == at(8, 30)

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            LookAheadTask(estimated_duration_min=-5)

        task = LookAheadTask()
        with pytest.raises(ValidationError):
            task.estimated_duration_min = -1

    def test_infinite_duration_rejected(self):
        with pytest.raises(ValidationError):
            LookAheadTask(estimated_duration_min=float("inf"))

        task = LookAheadTask()
        with pytest.raises(ValidationError):
            task.actual_duration_min = float("inf")

    def test_meterage(self):
        task = LookAheadTask(start_depth_m=1200, end_depth_m=1450)
        assert task.meterage_m == 250

        task.end_depth_m = 1000
        assert task.meterage_m == 0

        assert LookAheadTask(start_depth_m=1200).meterage_m is None

    def test_variance(self):
        task = LookAheadTask(estimated_duration_min=100, actual_duration_min=120, start_time=at(8))
        assert task.duration_variance_min == 20
        assert task.variance_percentage == pytest.approx(20.0)
        assert task.actual_end_time == at(10)

    def test_variance_zero_estimate(self):
        task = LookAheadTask(estimated_duration_min=0, actual_duration_min=10)
        assert task.variance_percentage is None

    def test_set_status_stamps_times(self):
        task = LookAheadTask()
        task.set_status(TaskStatus.IN_PROGRESS, at(8))
        task.set_status(TaskStatus.DELAYED, at(9))
        task.set_status(TaskStatus.IN_PROGRESS, at(10))
        assert task.started_at == at(8)

        task.set_status(TaskStatus.COMPLETED, at(11))
        assert task.completed_at == at(11)
        assert not task.is_active

    def test_is_overdue(self):
        task = LookAheadTask(start_time=at(8))
        assert task.is_overdue(at(9))
        assert not task.is_overdue(at(7))

        task.set_status(TaskStatus.IN_PROGRESS, at(8))
        assert not task.is_overdue(at(9))

    def test_reminder_time_without_vendors(self):
        task = LookAheadTask(start_time=at(12), call_reminder_minutes_before=90)
        assert task.reminder_time == at(10, 30)

    def test_reminder_time_earliest_assignment(self, cement_vendor, wireline_vendor):
        task = LookAheadTask(start_time=at(12))
        task.add_vendor(cement_vendor, 60)
        task.add_vendor(wireline_vendor, 240)
        assert task.reminder_time == at(8)

    def test_remove_vendor(self, cement_vendor, wireline_vendor):
        task = LookAheadTask()
        task.add_vendor(cement_vendor)
        task.add_vendor(wireline_vendor)
        task.remove_vendor(cement_vendor)
        assert task.primary_vendor is wireline_vendor

    def test_latest_call(self, cement_vendor):
        task = LookAheadTask()
        task.call_log.append(CallLogEntry(timestamp=at(9), outcome=CallOutcome.NO_ANSWER))
        task.call_log.append(CallLogEntry(timestamp=at(10), vendor=cement_vendor))
        task.call_log.append(CallLogEntry(timestamp=at(8)))
        assert task.latest_call.timestamp == at(10)

    def test_summary_line(self, casing_code):
        task = LookAheadTask(start_time=at(8), estimated_duration_min=90, well="14-22", job_code=casing_code)
        assert task.summary_line == "08:00 - 09:30 | 14-22 | CSG"

    def test_shared_job_code_reference(self, casing_code):
        task = LookAheadTask(job_code=casing_code)
        assert task.job_code is casing_code


class TestTaskVendorAssignment:
    """Tests for TaskVendorAssignment model."""

    def test_reminder_time(self, cement_vendor):
        assignment = TaskVendorAssignment(vendor=cement_vendor, call_reminder_minutes_before=120)
        assert assignment.reminder_time(at(12)) == at(10)

    def test_overdue_until_confirmed(self, cement_vendor):
        assignment = TaskVendorAssignment(vendor=cement_vendor)
        assert assignment.is_reminder_overdue(at(12), now=at(11, 30))
        assignment.is_confirmed = True
        assert not assignment.is_reminder_overdue(at(12), now=at(11, 30))

    @pytest.mark.parametrize(
        "minutes,expected",
        [(60, "1 hour before"), (1440, "1 day before"), (90, "1h 30m before"), (180, "3h before"), (45, "45m before")],
    )
    def test_lead_time_formatted(self, cement_vendor, minutes, expected):
        assignment = TaskVendorAssignment(vendor=cement_vendor, call_reminder_minutes_before=minutes)
        assert assignment.lead_time_formatted == expected


class TestLookAheadSchedule:
    """Tests for LookAheadSchedule model."""

    def test_sorted_tasks(self):
        schedule = LookAheadSchedule()
        schedule.tasks = [
            LookAheadTask(name="second", sequence_order=1),
            LookAheadTask(name="first", sequence_order=0),
        ]
        assert [t.name for t in schedule.sorted_tasks] == ["first", "second"]

    def test_end_date_and_duration(self, schedule):
        assert schedule.calculated_end_date == at(11)
        assert schedule.total_duration == timedelta(hours=3)

    def test_progress(self, schedule, tasks):
        assert schedule.progress_percentage == 0
        tasks["A"].set_status(TaskStatus.COMPLETED)
        assert schedule.progress_percentage == pytest.approx(1 / 3)
        assert schedule.count_by_status(TaskStatus.SCHEDULED) == 2

    def test_empty_progress(self, empty_schedule):
        assert empty_schedule.progress_percentage == 0.0

    def test_get_task(self, schedule, tasks):
        assert schedule.get_task(tasks["B"].id) is tasks["B"]
        with pytest.raises(KeyError):
            schedule.get_task(LookAheadTask().id)


class TestTaskStatus:
    """Tests for TaskStatus enum."""

    def test_sort_order(self):
        ordered = sorted(TaskStatus, key=lambda s: s.sort_order)
        assert ordered[0] == TaskStatus.IN_PROGRESS
        assert ordered[-1] == TaskStatus.CANCELLED

    def test_values(self):
        assert TaskStatus("In Progress") == TaskStatus.IN_PROGRESS
