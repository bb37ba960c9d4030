from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Dict, List, Optional

from cpm_core.domain.task import Task
from cpm_core.exceptions import ScheduleStateError
from cpm_core.services.scheduling.constraints import (
    binding_constraint,
    earliest_start_for_edge,
    latest_finish_for_edge,
)
from cpm_core.services.scheduling.graph import TaskGraph
from cpm_core.services.scheduling.validation import has_inverted_schedule

logger = logging.getLogger(__name__)


def _forward_duration(task: Task) -> int:
    # a flagged task with inverted dates keeps only its explicit duration
    if has_inverted_schedule(task):
        return max(1, int(task.duration_days)) if task.duration_days is not None else 1
    return task.effective_duration


def run_forward_pass(
    graph: TaskGraph,
    topo_order: List[str],
    default_start: date,
    honor_stored_starts: bool = True,
) -> List[Task]:
    """
    Earliest start/finish for every task, in topological order.

    ES = max(start floor, every incoming edge's constraint); EF = ES + duration - 1.
    Tasks without predecessors start on their stored start_date, or on
    ``default_start`` when they have none. Returns copies in batch order.
    """
    scheduled: Dict[str, Task] = {}

    for task_id in topo_order:
        task = graph.task(task_id)
        duration = _forward_duration(task)
        incoming = graph.incoming[task_id]

        candidate_es: List[date] = []
        for edge in incoming:
            pred = scheduled.get(edge.predecessor_id)
            if pred is None:
                raise ScheduleStateError(
                    f"Predecessor '{edge.predecessor_id}' of task '{task_id}' was not scheduled first.",
                    task_id=task_id,
                )
            candidate_es.append(
                earliest_start_for_edge(edge, pred.start_date, pred.end_date, duration)
            )

        if not incoming:
            floor: Optional[date] = task.start_date or default_start
        elif honor_stored_starts:
            floor = task.start_date
        else:
            floor = None

        est = binding_constraint(candidate_es, floor)
        eft = est + timedelta(days=duration - 1)
        scheduled[task_id] = replace(
            task,
            start_date=est,
            end_date=eft,
            duration_days=duration,
            latest_start=None,
            latest_finish=None,
            float_days=None,
            is_critical=False,
        )

    logger.debug("Forward pass scheduled %d task(s)", len(scheduled))
    return [scheduled[task_id] for task_id in graph.task_ids]


def project_finish_of(graph: TaskGraph) -> date:
    finishes = [graph.task(task_id).end_date for task_id in graph.task_ids]
    known = [d for d in finishes if d is not None]
    if not known:
        raise ScheduleStateError("No computed finish dates; run the forward pass first.")
    return max(known)


def _require_forward_dates(task: Task) -> int:
    if task.start_date is None or task.end_date is None:
        raise ScheduleStateError(
            f"Task '{task.id}' has no forward-pass dates; run the forward pass first.",
            task_id=task.id,
        )
    if has_inverted_schedule(task):
        raise ScheduleStateError(
            f"Task '{task.id}' finishes before it starts; run the forward pass first.",
            task_id=task.id,
        )
    return (task.end_date - task.start_date).days + 1


def run_backward_pass(
    graph: TaskGraph,
    topo_order: List[str],
    anchor: Optional[date] = None,
) -> tuple[List[Task], date]:
    """
    Latest start/finish for every task, in reverse topological order.

    LF = min(anchor, each outgoing edge's required finish); LS = LF - duration + 1.
    The anchor defaults to the latest forward-pass finish. Returns copies in
    batch order together with the anchor actually used.
    """
    durations = {task_id: _require_forward_dates(graph.task(task_id)) for task_id in graph.task_ids}
    anchor_date = anchor if anchor is not None else project_finish_of(graph)

    latest: Dict[str, tuple[date, date]] = {}
    for task_id in reversed(topo_order):
        duration = durations[task_id]
        candidate_lf: List[date] = [anchor_date]
        for succ_id, edge in graph.outgoing[task_id]:
            succ_ls, succ_lf = latest[succ_id]
            candidate_lf.append(latest_finish_for_edge(edge, succ_ls, succ_lf, duration))

        lf = min(candidate_lf)
        ls = lf - timedelta(days=duration - 1)
        latest[task_id] = (ls, lf)

    logger.debug("Backward pass against anchor %s covered %d task(s)", anchor_date, len(latest))
    result = [
        replace(
            graph.task(task_id),
            latest_start=latest[task_id][0],
            latest_finish=latest[task_id][1],
            float_days=None,
            is_critical=False,
        )
        for task_id in graph.task_ids
    ]
    return result, anchor_date


__all__ = ["run_forward_pass", "run_backward_pass", "project_finish_of"]
