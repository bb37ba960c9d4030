from __future__ import annotations

import logging
from typing import List

from cpm_core.domain.task import Task
from cpm_core.exceptions import InvalidDateRangeError
from cpm_core.services.scheduling.constraints import earliest_start_for_edge
from cpm_core.services.scheduling.graph import TaskGraph
from cpm_core.services.scheduling.models import ScheduleIssue
from cpm_core.services.scheduling.policy import SchedulingPolicy

logger = logging.getLogger(__name__)


def has_inverted_schedule(task: Task) -> bool:
    return task.start_date is not None and task.end_date is not None and task.start_date > task.end_date


def has_inverted_baseline(task: Task) -> bool:
    return (
        task.baseline_start is not None
        and task.baseline_end is not None
        and task.baseline_start > task.baseline_end
    )


def check_date_ranges(graph: TaskGraph, policy: SchedulingPolicy) -> List[ScheduleIssue]:
    """
    Start/end and baseline ordering for every task.

    Under the "abort" policy the first inverted range raises; under "flag"
    every inverted range becomes an issue and scheduling goes on.
    """
    issues: List[ScheduleIssue] = []
    for task_id in graph.task_ids:
        task = graph.task(task_id)
        for field_name, inverted in (
            ("schedule", has_inverted_schedule(task)),
            ("baseline", has_inverted_baseline(task)),
        ):
            if not inverted:
                continue
            error = InvalidDateRangeError(task_id=task_id, field=field_name)
            if not policy.flags_invalid_dates:
                raise error
            logger.warning("Flagged task %s: %s", task_id, error)
            issues.append(ScheduleIssue(code=error.code, task_id=task_id, message=str(error)))
    return issues


def check_stored_date_conflicts(graph: TaskGraph) -> List[ScheduleIssue]:
    """
    Edges whose stored dates already disagree with the dependency, e.g. a
    Finish-to-Start successor stored as starting before its predecessor ends.
    Only tasks carrying both stored dates take part.
    """
    issues: List[ScheduleIssue] = []
    for task_id in graph.task_ids:
        task = graph.task(task_id)
        if task.start_date is None or task.end_date is None or has_inverted_schedule(task):
            continue
        for edge in graph.incoming[task_id]:
            pred = graph.tasks_by_id.get(edge.predecessor_id)
            if pred is None or pred.start_date is None or pred.end_date is None:
                continue
            if has_inverted_schedule(pred):
                continue
            allowed = earliest_start_for_edge(edge, pred.start_date, pred.end_date, task.effective_duration)
            if task.start_date < allowed:
                issues.append(
                    ScheduleIssue(
                        code="DEPENDENCY_DATE_CONFLICT",
                        task_id=task_id,
                        message=(
                            f"Task '{task_id}' starts {task.start_date.isoformat()} but its "
                            f"{edge.dependency_type.value} link to '{pred.id}' allows "
                            f"{allowed.isoformat()} at the earliest."
                        ),
                    )
                )
    return issues


__all__ = [
    "check_date_ranges",
    "check_stored_date_conflicts",
    "has_inverted_baseline",
    "has_inverted_schedule",
]
