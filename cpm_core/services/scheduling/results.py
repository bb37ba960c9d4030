from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional

from cpm_core.domain.task import Task
from cpm_core.exceptions import ScheduleStateError
from cpm_core.services.scheduling.graph import TaskGraph
from cpm_core.services.scheduling.models import CriticalPathResult, InfeasibleAnchor, ScheduleIssue
from cpm_core.services.scheduling.passes import project_finish_of
from cpm_core.services.scheduling.policy import SchedulingPolicy
from cpm_core.services.scheduling.working_days import approximate_working_days

logger = logging.getLogger(__name__)


def build_critical_path_result(
    graph: TaskGraph,
    topo_order: List[str],
    policy: SchedulingPolicy,
    anchor: Optional[date] = None,
    issues: Optional[List[ScheduleIssue]] = None,
) -> CriticalPathResult:
    """
    Float and critical flags from forward (start/end) and backward
    (latest_start/latest_finish) results already present on the tasks.

    Negative float means the anchor cannot be met: it is clamped to zero on
    the task and reported as an InfeasibleAnchor warning.
    """
    positions = {task_id: index for index, task_id in enumerate(topo_order)}
    warnings: List[InfeasibleAnchor] = []
    annotated: List[Task] = []

    for task_id in graph.task_ids:
        task = graph.task(task_id)
        if task.start_date is None or task.latest_start is None or task.latest_finish is None:
            raise ScheduleStateError(
                f"Task '{task_id}' is missing forward or backward pass dates.",
                task_id=task_id,
            )
        raw_float = (task.latest_start - task.start_date).days
        if raw_float < 0:
            warnings.append(InfeasibleAnchor(task_id=task_id, float_days=raw_float))
        total_float = max(0, raw_float)
        annotated.append(
            replace(
                task,
                float_days=total_float,
                is_critical=total_float <= policy.critical_epsilon_days,
            )
        )

    critical_ids = [
        task.id
        for task in sorted(
            (t for t in annotated if t.is_critical),
            key=lambda t: (t.start_date, positions.get(t.id, len(positions))),
        )
    ]

    project_start = min(task.start_date for task in annotated) if annotated else None
    project_finish = project_finish_of(graph)
    anchor_date = anchor or max(task.latest_finish for task in annotated)

    if warnings:
        worst = min(warnings, key=lambda w: w.float_days)
        logger.warning(
            "Anchor %s cannot be met: %d task(s) have negative float (worst %s at %d day(s))",
            anchor_date,
            len(warnings),
            worst.task_id,
            worst.float_days,
        )

    return CriticalPathResult(
        tasks=annotated,
        critical_ids=critical_ids,
        anchor=anchor_date,
        project_start=project_start,
        project_finish=project_finish,
        project_duration_days=(project_finish - project_start).days + 1 if project_start else 0,
        project_working_days=(
            approximate_working_days(project_start, project_finish, policy.working_days_per_week)
            if project_start
            else 0
        ),
        warnings=warnings,
        issues=list(issues or []),
    )


__all__ = ["build_critical_path_result"]
