"""Shared test fixtures for the Look-Ahead Engine.

Provides a three-task schedule starting 2025-01-01 08:00, vendors and
job codes.
"""

from datetime import datetime

import pytest

from lookahead_engine.catalog.job_codes import JobCode, JobCodeCategory
from lookahead_engine.catalog.vendors import Vendor, VendorServiceType
from lookahead_engine.schedule.editor import ScheduleEditor
from lookahead_engine.schedule.models import LookAheadSchedule, LookAheadTask

START = datetime(2025, 1, 1, 8, 0)


@pytest.fixture
def start() -> datetime:
    return START


@pytest.fixture
def empty_schedule() -> LookAheadSchedule:
    return LookAheadSchedule(name="Pad A", start_date=START)


@pytest.fixture
def schedule() -> LookAheadSchedule:
    """A (60 min), B (30 min), C (90 min) in sequence, times cascaded."""
    sched = LookAheadSchedule(name="Pad A", start_date=START, well="14-22")
    editor = ScheduleEditor(sched)
    editor.append_task(LookAheadTask(name="A", estimated_duration_min=60, well="14-22"))
    editor.append_task(LookAheadTask(name="B", estimated_duration_min=30, well="14-22"))
    editor.append_task(LookAheadTask(name="C", estimated_duration_min=90, well="14-22"))
    return sched


@pytest.fixture
def editor(schedule) -> ScheduleEditor:
    return ScheduleEditor(schedule)


@pytest.fixture
def tasks(schedule) -> dict[str, LookAheadTask]:
    """Fixture schedule tasks by name."""
    return {t.name: t for t in schedule.tasks}


@pytest.fixture
def cement_vendor() -> Vendor:
    return Vendor(
        company_name="Prairie Cementing",
        service_type=VendorServiceType.CEMENTING,
        contact_name="Dana",
        phone="403-555-0101",
    )


@pytest.fixture
def wireline_vendor() -> Vendor:
    return Vendor(company_name="Deep Wireline", service_type=VendorServiceType.WIRELINE)


@pytest.fixture
def drilling_code() -> JobCode:
    return JobCode(
        code="DRL",
        name="Drill intermediate",
        category=JobCodeCategory.DRILLING,
        default_estimate_min=600,
        is_meterage_based=True,
    )


@pytest.fixture
def casing_code() -> JobCode:
    return JobCode(code="CSG", name="Run casing", category=JobCodeCategory.CASING)
