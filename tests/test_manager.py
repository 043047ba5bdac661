"""Tests for ScheduleManager."""

from datetime import datetime

import pytest

from lookahead_engine.config import EngineConfig
from lookahead_engine.data.storage import MemoryStore
from lookahead_engine.manager import ScheduleManager
from lookahead_engine.schedule.cascade import chain_violations
from lookahead_engine.schedule.models import LookAheadTask, TaskStatus


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, 1, hour, minute)


@pytest.fixture
def manager() -> ScheduleManager:
    return ScheduleManager(MemoryStore())


class TestCreateSchedule:
    """Tests for schedule creation and activation."""

    def test_create_makes_current(self, manager):
        schedule = manager.create_schedule("Pad A", at(8), well="14-22")
        assert manager.schedule is schedule
        assert schedule.is_active

    def test_single_active(self, manager):
        first = manager.create_schedule("Week 1", at(8))
        second = manager.create_schedule("Week 2", at(8))

        assert not first.is_active
        assert second.is_active
        assert manager.active_schedule is second
        assert [s.name for s in manager.schedules] == ["Week 1", "Week 2"]

    def test_activate(self, manager):
        first = manager.create_schedule("Week 1", at(8))
        second = manager.create_schedule("Week 2", at(8))

        manager.activate(first.id)

        assert first.is_active and not second.is_active
        assert manager.schedule is first

    def test_switch_keeps_active_flag(self, manager):
        first = manager.create_schedule("Week 1", at(8))
        manager.create_schedule("Week 2", at(8))

        manager.switch_to(first.id)

        assert manager.schedule is first
        assert not first.is_active

    def test_unknown_schedule(self, manager):
        with pytest.raises(KeyError):
            manager.switch_to(LookAheadTask().id)

    def test_picks_up_active_schedule_from_store(self):
        store = MemoryStore()
        ScheduleManager(store).create_schedule("Week 1", at(8))
        assert ScheduleManager(store).schedule.name == "Week 1"

    def test_editor_requires_schedule(self, manager):
        with pytest.raises(RuntimeError, match="No current schedule"):
            manager.editor()


class TestDuplicateSchedule:
    """Tests for duplicate_schedule."""

    def test_copies_tasks_and_assignments(self, manager, cement_vendor, casing_code):
        source = manager.create_schedule("Week 1", at(8))
        editor = manager.editor()
        cement = editor.append_task(LookAheadTask(name="Cement", estimated_duration_min=120, job_code=casing_code))
        editor.append_task(LookAheadTask(name="WOC", estimated_duration_min=480))
        editor.assign_vendor(cement, cement_vendor, 240)
        editor.confirm_vendor(cement, cement_vendor)
        editor.complete_task(cement, 150)

        copy = manager.duplicate_schedule()

        assert copy.name == "Week 1 (Copy)"
        assert manager.schedule is copy
        assert copy.is_active and not source.is_active
        assert [t.name for t in copy.sorted_tasks] == ["Cement", "WOC"]
        assert chain_violations(copy) == []

        copied = copy.sorted_tasks[0]
        assert copied.id != cement.id
        assert copied.job_code is casing_code
        assert copied.status == TaskStatus.SCHEDULED
        assert copied.actual_duration_min is None
        assert copied.assignments[0].vendor is cement_vendor
        assert copied.assignments[0].call_reminder_minutes_before == 240
        assert not copied.assignments[0].is_confirmed

    def test_edits_do_not_touch_source(self, manager):
        source = manager.create_schedule("Week 1", at(8))
        manager.editor().append_task(LookAheadTask(name="Rig up", estimated_duration_min=60))

        manager.duplicate_schedule()
        manager.editor().update_duration(manager.schedule.sorted_tasks[0], 600)

        assert source.sorted_tasks[0].estimated_duration_min == 60

    def test_requires_schedule(self, manager):
        with pytest.raises(RuntimeError):
            manager.duplicate_schedule()


class TestDeleteSchedule:
    """Tests for delete_schedule."""

    def test_delete_current(self, manager):
        schedule = manager.create_schedule("Week 1", at(8))
        manager.delete_schedule(schedule.id)

        assert manager.schedule is None
        assert manager.schedules == []


class TestViews:
    """Tests for call and accuracy views."""

    def test_tasks_requiring_calls(self, cement_vendor):
        manager = ScheduleManager(config=EngineConfig(reminder_window_min=120))
        manager.create_schedule("Week 1", at(8))
        editor = manager.editor()
        editor.append_task(LookAheadTask(name="Rig up", estimated_duration_min=180))
        cement = editor.append_task(LookAheadTask(name="Cement", estimated_duration_min=60))
        editor.assign_vendor(cement, cement_vendor, 60)  # reminder 10:00

        assert manager.tasks_requiring_calls(now=at(8, 30)) == [cement]
        assert manager.tasks_requiring_calls(now=at(7, 30)) == []

    def test_overdue_tasks(self, manager):
        manager.create_schedule("Week 1", at(8))
        task = manager.editor().append_task(LookAheadTask(name="Rig up"))
        assert manager.overdue_tasks(now=at(9)) == [task]

    def test_accuracy_uses_configured_tolerance(self):
        manager = ScheduleManager(config=EngineConfig(accuracy_tolerance_pct=25))
        manager.create_schedule("Week 1", at(8))
        editor = manager.editor()
        task = editor.append_task(LookAheadTask(name="Rig up", estimated_duration_min=100))
        editor.complete_task(task, 120)

        assert manager.accuracy().accurate_count == 1
