# cpm_core/services/scheduling/engine.py
from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from cpm_core.domain.task import Task
from cpm_core.exceptions import BusinessRuleError, ValidationError
from cpm_core.logging_support import bind_run_id
from cpm_core.services.scheduling.cycles import ensure_acyclic, ensure_resolvable
from cpm_core.services.scheduling.diagnostics import DependencyDiagnosticsMixin
from cpm_core.services.scheduling.graph import TaskGraph
from cpm_core.services.scheduling.models import CriticalPathResult, ValidationReport
from cpm_core.services.scheduling.ordering import topological_order
from cpm_core.services.scheduling.passes import run_backward_pass, run_forward_pass
from cpm_core.services.scheduling.policy import SchedulingPolicy
from cpm_core.services.scheduling.results import build_critical_path_result
from cpm_core.services.scheduling.validation import check_date_ranges, check_stored_date_conflicts

logger = logging.getLogger(__name__)

UNASSIGNED_PROJECT = "unassigned"


class SchedulingEngine(DependencyDiagnosticsMixin):
    """
    CPM-style scheduling engine:
    - Validation: dangling references, cycles, inverted date ranges
    - Forward pass: ES/EF
    - Backward pass: LS/LF against a project-end anchor
    - FS, FF, SS, SF with lag_days
    - Float and critical path

    The engine keeps no state between calls and never mutates the tasks it
    is given; every operation returns new Task objects.
    """

    def __init__(
        self,
        policy: Optional[SchedulingPolicy] = None,
        default_start: Optional[date] = None,
        today: Callable[[], date] = date.today,
    ):
        self._policy: SchedulingPolicy = policy or SchedulingPolicy.from_env()
        self._default_start: Optional[date] = default_start
        self._today: Callable[[], date] = today

    @property
    def policy(self) -> SchedulingPolicy:
        return self._policy

    def validate(self, tasks: Sequence[Task]) -> ValidationReport:
        """
        Structural and date checks only; no dates are computed.

        Raises DuplicateTaskError, DanglingReferenceError, CyclicDependencyError
        or InvalidDateRangeError (under the "abort" policy). Non-fatal findings
        come back on the report.
        """
        with bind_run_id():
            graph = self._load_graph(tasks)
            return self._check_dates(graph)

    def schedule_forward(self, tasks: Sequence[Task]) -> List[Task]:
        with bind_run_id():
            graph = self._load_graph(tasks)
            self._require_tasks(graph)
            self._check_dates(graph)
            order = topological_order(graph)
            return run_forward_pass(
                graph,
                order,
                default_start=self._resolve_default_start(),
                honor_stored_starts=self._policy.honor_stored_starts,
            )

    def schedule_backward(self, tasks: Sequence[Task], anchor: Optional[date] = None) -> List[Task]:
        """Latest dates for tasks that already carry forward-pass results."""
        with bind_run_id():
            graph = self._load_graph(tasks)
            self._require_tasks(graph)
            order = topological_order(graph)
            scheduled, _anchor = run_backward_pass(graph, order, anchor)
            return scheduled

    def compute_float(self, tasks: Sequence[Task]) -> CriticalPathResult:
        """Float and critical flags for tasks that already carry both passes' results."""
        with bind_run_id():
            graph = self._load_graph(tasks)
            self._require_tasks(graph)
            order = topological_order(graph)
            return build_critical_path_result(graph, order, self._policy)

    def analyze_critical_path(
        self,
        tasks: Sequence[Task],
        anchor: Optional[date] = None,
    ) -> CriticalPathResult:
        """
        Full CPM run for one batch:
        - validates the batch
        - forward pass, backward pass (anchor defaults to the forward finish)
        - float per task and the ordered list of critical task ids
        """
        with bind_run_id():
            graph = self._load_graph(tasks)
            self._require_tasks(graph)
            report = self._check_dates(graph)
            order = topological_order(graph)

            forward = run_forward_pass(
                graph,
                order,
                default_start=self._resolve_default_start(),
                honor_stored_starts=self._policy.honor_stored_starts,
            )
            backward, anchor_date = run_backward_pass(TaskGraph.from_tasks(forward), order, anchor)
            result = build_critical_path_result(
                TaskGraph.from_tasks(backward),
                order,
                self._policy,
                anchor=anchor_date,
                issues=report.issues,
            )

            logger.info(
                "Scheduled %d task(s): finish %s, anchor %s, %d critical",
                len(result.tasks),
                result.project_finish,
                result.anchor,
                len(result.critical_ids),
            )
            return result

    def analyze_portfolio(
        self,
        tasks: Sequence[Task],
        anchors: Optional[Mapping[str, date]] = None,
    ) -> Dict[str, CriticalPathResult]:
        """
        Critical path per project. Tasks without a project_id are grouped under
        "unassigned". Links between projects are rejected, not resolved.
        """
        graph = TaskGraph.from_tasks(tasks)
        ensure_resolvable(graph)

        groups: Dict[str, List[Task]] = {}
        for task_id in graph.task_ids:
            task = graph.task(task_id)
            for edge in task.predecessors:
                pred = graph.task(edge.predecessor_id)
                if pred.project_id != task.project_id:
                    raise BusinessRuleError(
                        f"Task '{task_id}' depends on '{pred.id}' from a different project.",
                        code="DEPENDENCY_CROSS_PROJECT",
                    )
            groups.setdefault(task.project_id or UNASSIGNED_PROJECT, []).append(task)

        anchors = anchors or {}
        with bind_run_id():
            return {
                project_id: self.analyze_critical_path(project_tasks, anchor=anchors.get(project_id))
                for project_id, project_tasks in groups.items()
            }

    def _load_graph(self, tasks: Sequence[Task]) -> TaskGraph:
        graph = TaskGraph.from_tasks(tasks)
        ensure_resolvable(graph)
        ensure_acyclic(graph)
        return graph

    def _check_dates(self, graph: TaskGraph) -> ValidationReport:
        issues = check_date_ranges(graph, self._policy)
        conflicts = check_stored_date_conflicts(graph)
        for issue in conflicts:
            logger.debug("Stored dates conflict: %s", issue.message)
        return ValidationReport(issues=[*issues, *conflicts])

    @staticmethod
    def _require_tasks(graph: TaskGraph) -> None:
        if not graph.task_ids:
            raise ValidationError("No tasks to schedule.", code="NO_TASKS")

    def _resolve_default_start(self) -> date:
        return self._default_start or self._today()


__all__ = ["SchedulingEngine", "UNASSIGNED_PROJECT"]
