"""Schedule time cascading.

Given a schedule start date and tasks ordered by ``sequence_order``, each
task starts when its predecessor ends:

    task[0].start_time = schedule.start_date
    task[i].start_time = task[i-1].end_time

End times are derived (start + estimated duration), so setting start times
in order is the whole recomputation. Every function here is a linear walk
over the sorted task list.
"""

from lookahead_engine.schedule.models import LookAheadSchedule


def cascade_times(schedule: LookAheadSchedule, from_position: int = 0) -> None:
    """Recompute start times from a position to the end of the schedule.

    Tasks before ``from_position`` are left untouched and serve as the anchor
    for the first recomputed task. Positions past the end are a no-op.

    Args:
        schedule: Schedule whose tasks are updated in place
        from_position: Index in the sorted task list to start from

    Example:
        >>> cascade_times(schedule, from_position=3)
    """
    ordered = schedule.sorted_tasks
    start = max(0, from_position)

    for i in range(start, len(ordered)):
        if i == 0:
            ordered[i].start_time = schedule.start_date
        else:
            ordered[i].start_time = ordered[i - 1].end_time


def recalculate_all_times(schedule: LookAheadSchedule) -> None:
    """Recompute every task's start time from the schedule start date.

    Idempotent: a second call leaves all times unchanged.
    """
    cascade_times(schedule, 0)


def renumber(schedule: LookAheadSchedule) -> None:
    """Rewrite sequence orders to 0..n-1, keeping the current relative order."""
    for i, task in enumerate(schedule.sorted_tasks):
        if task.sequence_order != i:
            task.sequence_order = i


def chain_violations(schedule: LookAheadSchedule) -> list[int]:
    """Find positions where a task does not start at its predecessor's end.

    Position 0 is checked against the schedule start date. Tasks whose times
    were edited by hand, or orders that were changed without a cascade, show
    up here.

    Returns:
        Sorted list of offending indices into ``schedule.sorted_tasks``
    """
    violations = []
    previous_end = schedule.start_date
    for i, task in enumerate(schedule.sorted_tasks):
        if task.start_time != previous_end:
            violations.append(i)
        previous_end = task.end_time
    return violations
