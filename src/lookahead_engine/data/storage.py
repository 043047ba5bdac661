"""Storage backends for schedules, vendors and job codes.

- memory: MemoryStore holding live objects in dictionaries
- csv: CSVStore persisting flat tables to a data directory with pandas

Vendors and job codes are shared references. Saving a schedule registers the
vendors and job codes its tasks point at, so reloading restores the links.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict

import pandas as pd
from pydantic import BaseModel

from lookahead_engine.catalog.job_codes import JobCode
from lookahead_engine.catalog.vendors import Vendor
from lookahead_engine.schedule.models import (
    CallLogEntry,
    LookAheadSchedule,
    LookAheadTask,
    TaskVendorAssignment,
)

if TYPE_CHECKING:
    from lookahead_engine.config import EngineConfig

logger = logging.getLogger(__name__)


class ScheduleStore(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod
    def list_schedules(self) -> list[LookAheadSchedule]:
        """Get all schedules."""
        pass

    @abstractmethod
    def get_schedule(self, schedule_id: uuid.UUID) -> LookAheadSchedule:
        """Get one schedule. Raises KeyError if unknown."""
        pass

    @abstractmethod
    def save_schedule(self, schedule: LookAheadSchedule) -> None:
        """Insert or update a schedule with its tasks."""
        pass

    @abstractmethod
    def delete_schedule(self, schedule_id: uuid.UUID) -> None:
        """Delete a schedule and its tasks. Raises KeyError if unknown."""
        pass

    @abstractmethod
    def list_vendors(self) -> list[Vendor]:
        pass

    @abstractmethod
    def save_vendor(self, vendor: Vendor) -> None:
        pass

    @abstractmethod
    def list_job_codes(self) -> list[JobCode]:
        pass

    @abstractmethod
    def save_job_code(self, job_code: JobCode) -> None:
        pass


class MemoryStore(ScheduleStore):
    """In-process store keeping the saved objects themselves."""

    def __init__(self) -> None:
        self._schedules: Dict[uuid.UUID, LookAheadSchedule] = {}
        self._vendors: Dict[uuid.UUID, Vendor] = {}
        self._job_codes: Dict[uuid.UUID, JobCode] = {}

    def list_schedules(self) -> list[LookAheadSchedule]:
        return sorted(self._schedules.values(), key=lambda s: s.created_at)

    def get_schedule(self, schedule_id: uuid.UUID) -> LookAheadSchedule:
        if schedule_id not in self._schedules:
            raise KeyError(f"Unknown schedule: {schedule_id}")
        return self._schedules[schedule_id]

    def save_schedule(self, schedule: LookAheadSchedule) -> None:
        self._schedules[schedule.id] = schedule
        for task in schedule.tasks:
            if task.job_code is not None:
                self._register_job_code(task.job_code)
            for assignment in task.assignments:
                self._vendors.setdefault(assignment.vendor.id, assignment.vendor)
            for entry in task.call_log:
                if entry.vendor is not None:
                    self._vendors.setdefault(entry.vendor.id, entry.vendor)

    def delete_schedule(self, schedule_id: uuid.UUID) -> None:
        if schedule_id not in self._schedules:
            raise KeyError(f"Unknown schedule: {schedule_id}")
        del self._schedules[schedule_id]

    def list_vendors(self) -> list[Vendor]:
        return sorted(self._vendors.values(), key=lambda v: v.company_name.lower())

    def save_vendor(self, vendor: Vendor) -> None:
        self._vendors[vendor.id] = vendor

    def list_job_codes(self) -> list[JobCode]:
        return sorted(self._job_codes.values(), key=lambda j: j.code)

    def save_job_code(self, job_code: JobCode) -> None:
        self._register_job_code(job_code)

    def _register_job_code(self, job_code: JobCode) -> None:
        self._job_codes[job_code.id] = job_code
        if job_code.default_vendor is not None:
            self._vendors.setdefault(job_code.default_vendor.id, job_code.default_vendor)


# Table layout for CSVStore: file name -> (model, excluded fields, link columns)
TABLES: dict[str, tuple[type[BaseModel], set[str], list[str]]] = {
    "vendors.csv": (Vendor, set(), []),
    "job_codes.csv": (JobCode, {"default_vendor"}, ["default_vendor_id"]),
    "schedules.csv": (LookAheadSchedule, {"tasks"}, []),
    "tasks.csv": (
        LookAheadTask,
        {"job_code", "assignments", "call_log"},
        ["schedule_id", "job_code_id"],
    ),
    "assignments.csv": (TaskVendorAssignment, {"vendor"}, ["task_id", "vendor_id"]),
    "call_log.csv": (CallLogEntry, {"vendor"}, ["task_id", "vendor_id"]),
}


def _columns(table: str) -> list[str]:
    model, exclude, links = TABLES[table]
    return [name for name in model.model_fields if name not in exclude] + links


def _text_fields(table: str) -> set[str]:
    """Plain string fields, where an empty cell is a real empty value."""
    model, _, _ = TABLES[table]
    return {name for name, field in model.model_fields.items() if field.annotation is str}


def _row(model: BaseModel, table: str, **links: Any) -> dict[str, Any]:
    _, exclude, _ = TABLES[table]
    row = model.model_dump(mode="json", exclude=exclude)
    row.update({k: (str(v) if v is not None else None) for k, v in links.items()})
    return row


def _ref_id(obj: BaseModel | None) -> uuid.UUID | None:
    return obj.id if obj is not None else None


class CSVStore(MemoryStore):
    """Store persisting one CSV file per table in ``data_dir``.

    Everything is loaded into memory on construction; each save rewrites the
    tables. Write errors propagate to the caller.
    """

    def __init__(self, data_dir: str = "data"):
        super().__init__()
        self.data_dir = Path(data_dir)
        self._load()

    # Reading

    def _read(self, table: str) -> list[dict[str, Any]]:
        """Read a table as records.

        Empty cells are dropped so that model defaults apply, except in plain
        string fields, where an empty cell is the saved value.
        """
        path = self.data_dir / table
        if not path.exists():
            logger.warning(f"File not found: {path}")
            return []

        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        text = _text_fields(table)
        return [
            {k: v for k, v in record.items() if v != "" or k in text}
            for record in df.to_dict("records")
        ]

    def _load(self) -> None:
        for record in self._read("vendors.csv"):
            vendor = Vendor.model_validate(record)
            self._vendors[vendor.id] = vendor

        for record in self._read("job_codes.csv"):
            vendor_id = record.pop("default_vendor_id", None)
            job_code = JobCode.model_validate(record)
            if vendor_id is not None:
                job_code.default_vendor = self._lookup_vendor(vendor_id, f"job code {job_code.code}")
            self._job_codes[job_code.id] = job_code

        tasks_by_id: dict[str, LookAheadTask] = {}
        tasks_by_schedule: dict[str, list[LookAheadTask]] = {}
        for record in self._read("tasks.csv"):
            schedule_id = record.pop("schedule_id")
            job_code_id = record.pop("job_code_id", None)
            task = LookAheadTask.model_validate(record)
            if job_code_id is not None:
                job_code = self._job_codes.get(uuid.UUID(job_code_id))
                if job_code is None:
                    logger.warning(f"Task '{task.name}' references unknown job code {job_code_id}")
                task.job_code = job_code
            tasks_by_id[str(task.id)] = task
            tasks_by_schedule.setdefault(schedule_id, []).append(task)

        for record in self._read("assignments.csv"):
            task = tasks_by_id.get(record.pop("task_id"))
            vendor = self._lookup_vendor(record.pop("vendor_id"), "assignment")
            if task is None or vendor is None:
                continue
            task.assignments.append(TaskVendorAssignment.model_validate({**record, "vendor": vendor}))

        for record in self._read("call_log.csv"):
            task = tasks_by_id.get(record.pop("task_id"))
            vendor_id = record.pop("vendor_id", None)
            if task is None:
                continue
            entry = CallLogEntry.model_validate(record)
            if vendor_id is not None:
                entry.vendor = self._lookup_vendor(vendor_id, "call log entry")
            task.call_log.append(entry)

        for record in self._read("schedules.csv"):
            schedule = LookAheadSchedule.model_validate(record)
            schedule.tasks = tasks_by_schedule.get(str(schedule.id), [])
            self._schedules[schedule.id] = schedule

        logger.info(
            f"Loaded {len(self._schedules)} schedules, {len(self._vendors)} vendors "
            f"and {len(self._job_codes)} job codes from {self.data_dir}"
        )

    def _lookup_vendor(self, vendor_id: str, owner: str) -> Vendor | None:
        vendor = self._vendors.get(uuid.UUID(vendor_id))
        if vendor is None:
            logger.warning(f"Dropping {owner} link to unknown vendor {vendor_id}")
        return vendor

    # Writing

    def _write(self, table: str, rows: list[dict[str, Any]]) -> None:
        df = pd.DataFrame(rows, columns=_columns(table))
        df.to_csv(self.data_dir / table, index=False)

    def flush(self) -> None:
        """Write every table to disk."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._write("vendors.csv", [_row(v, "vendors.csv") for v in self._vendors.values()])
        self._write(
            "job_codes.csv",
            [
                _row(j, "job_codes.csv", default_vendor_id=_ref_id(j.default_vendor))
                for j in self._job_codes.values()
            ],
        )
        self._write("schedules.csv", [_row(s, "schedules.csv") for s in self._schedules.values()])

        tasks, assignments, calls = [], [], []
        for schedule in self._schedules.values():
            for task in schedule.sorted_tasks:
                tasks.append(
                    _row(task, "tasks.csv", schedule_id=schedule.id, job_code_id=_ref_id(task.job_code))
                )
                assignments.extend(
                    _row(a, "assignments.csv", task_id=task.id, vendor_id=a.vendor.id)
                    for a in task.assignments
                )
                calls.extend(
                    _row(c, "call_log.csv", task_id=task.id, vendor_id=_ref_id(c.vendor))
                    for c in task.call_log
                )
        self._write("tasks.csv", tasks)
        self._write("assignments.csv", assignments)
        self._write("call_log.csv", calls)

        logger.debug(f"Wrote {len(tasks)} tasks to {self.data_dir}")

    def save_schedule(self, schedule: LookAheadSchedule) -> None:
        super().save_schedule(schedule)
        self.flush()

    def delete_schedule(self, schedule_id: uuid.UUID) -> None:
        super().delete_schedule(schedule_id)
        self.flush()

    def save_vendor(self, vendor: Vendor) -> None:
        super().save_vendor(vendor)
        self.flush()

    def save_job_code(self, job_code: JobCode) -> None:
        super().save_job_code(job_code)
        self.flush()


def create_store(config: "EngineConfig") -> ScheduleStore:
    """Factory function to create the configured store."""
    if config.storage == "memory":
        logger.info("Creating MemoryStore")
        return MemoryStore()

    if config.storage == "csv":
        logger.info(f"Creating CSVStore (data_dir: {config.data_dir})")
        return CSVStore(config.data_dir)

    raise ValueError(f"Unknown storage: {config.storage}")
