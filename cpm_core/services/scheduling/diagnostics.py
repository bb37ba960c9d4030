from __future__ import annotations

from collections import deque
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

from cpm_core.domain.enums import DependencyType
from cpm_core.domain.task import DependencyEdge, Task
from cpm_core.exceptions import BusinessRuleError, NotFoundError, ValidationError


@dataclass
class DependencyImpactRow:
    task_id: str
    task_name: str
    before_start: date | None
    before_finish: date | None
    after_start: date | None
    after_finish: date | None
    start_shift_days: int | None
    finish_shift_days: int | None
    trace_path: str

    @property
    def largest_shift(self) -> int:
        return max(abs(self.start_shift_days or 0), abs(self.finish_shift_days or 0))


@dataclass
class DependencyDiagnostic:
    is_valid: bool
    code: str
    summary: str
    detail: str
    predecessor_id: str
    successor_id: str
    dependency_type: DependencyType
    lag_days: int
    impact_rows: list[DependencyImpactRow]
    suggestions: list[str]


class DependencyDiagnosticsMixin:
    """Checks a proposed link against a batch and previews how the schedule would move."""

    schedule_forward: Callable[[Sequence[Task]], List[Task]]

    def diagnose_dependency(
        self,
        tasks: Sequence[Task],
        predecessor_id: str,
        successor_id: str,
        dependency_type: DependencyType | str = DependencyType.FINISH_TO_START,
        lag_days: int = 0,
        include_impact: bool = True,
    ) -> DependencyDiagnostic:
        """
        Raises ValidationError (code INVALID_DEPENDENCY_TYPE or INVALID_LAG) for
        a link that cannot be expressed at all; every other problem comes back
        as an invalid diagnostic.
        """
        dependency_type, lag_days = _parse_link(dependency_type, lag_days)
        context = dict(
            predecessor_id=predecessor_id,
            successor_id=successor_id,
            dependency_type=dependency_type,
            lag_days=lag_days,
        )
        if predecessor_id == successor_id:
            return self._invalid_diagnostic(
                code="DEPENDENCY_SELF",
                summary=f"Task '{predecessor_id}' cannot follow itself.",
                detail="Pick a different activity as the predecessor.",
                **context,
            )

        tasks_by_id: Dict[str, Task] = {task.id: task for task in tasks}
        for role, task_id in (("Predecessor", predecessor_id), ("Successor", successor_id)):
            if task_id not in tasks_by_id:
                return self._invalid_diagnostic(
                    code="TASK_NOT_FOUND",
                    summary=f"{role} task not found.",
                    detail=f"No activity with id '{task_id}' in the schedule batch.",
                    **context,
                )
        predecessor = tasks_by_id[predecessor_id]
        successor = tasks_by_id[successor_id]

        if predecessor.project_id != successor.project_id:
            return self._invalid_diagnostic(
                code="DEPENDENCY_CROSS_PROJECT",
                summary="Activities belong to different projects.",
                detail=(
                    f"'{predecessor_id}' is in project {predecessor.project_id!r}, "
                    f"'{successor_id}' in {successor.project_id!r}."
                ),
                **context,
            )
        if any(
            edge.predecessor_id == predecessor_id and edge.dependency_type == dependency_type
            for edge in successor.predecessors
        ):
            return self._invalid_diagnostic(
                code="DEPENDENCY_DUPLICATE",
                summary=f"{dependency_type.value} link already present.",
                detail=(
                    f"'{successor_id}' already waits on '{predecessor_id}' with a "
                    f"{dependency_type.value} link; edit its lag instead."
                ),
                **context,
            )

        cycle_path_ids = self._find_cycle_path_ids(tasks, predecessor_id, successor_id)
        if cycle_path_ids:
            loop = " -> ".join(_label(tasks_by_id, task_id) for task_id in cycle_path_ids)
            return self._invalid_diagnostic(
                code="DEPENDENCY_CYCLE",
                summary="Link would close a loop in the work sequence.",
                detail=f"Cycle path: {loop}",
                suggestions=[
                    f"Make '{successor_id}' the predecessor if site sequencing allows it.",
                    "Split one activity into phases so the loop is broken.",
                ],
                **context,
            )

        if not include_impact:
            return DependencyDiagnostic(
                is_valid=True,
                code="DEPENDENCY_VALID",
                summary="Link can be added.",
                detail="",
                impact_rows=[],
                suggestions=[],
                **context,
            )

        linked = with_dependency(tasks, predecessor_id, successor_id, dependency_type, lag_days)
        before = {task.id: task for task in self.schedule_forward(tasks)}
        after = {task.id: task for task in self.schedule_forward(linked)}
        impact_rows = self._build_impact_rows(before, after, predecessor_id, successor_id)

        if not impact_rows:
            return DependencyDiagnostic(
                is_valid=True,
                code="DEPENDENCY_VALID",
                summary="Link can be added without moving any activity.",
                detail=f"'{successor_id}' already starts late enough to satisfy the link.",
                impact_rows=[],
                suggestions=[],
                **context,
            )

        worst = impact_rows[0]
        return DependencyDiagnostic(
            is_valid=True,
            code="DEPENDENCY_VALID",
            summary=f"Link can be added; {len(impact_rows)} activity(ies) move.",
            detail=(
                f"Largest move: {_label(after, worst.task_id)} by {worst.largest_shift} day(s)."
            ),
            impact_rows=impact_rows,
            suggestions=[
                "Check whether the project end date still holds.",
                "A lead (negative lag) or an SS link may shorten the delay.",
            ],
            **context,
        )

    def link_dependency(
        self,
        tasks: Sequence[Task],
        predecessor_id: str,
        successor_id: str,
        dependency_type: DependencyType | str = DependencyType.FINISH_TO_START,
        lag_days: int = 0,
    ) -> List[Task]:
        """New batch with the link added; raises when the link is not allowed."""
        diagnostic = self.diagnose_dependency(
            tasks,
            predecessor_id=predecessor_id,
            successor_id=successor_id,
            dependency_type=dependency_type,
            lag_days=lag_days,
            include_impact=False,
        )
        if not diagnostic.is_valid:
            message = f"{diagnostic.summary}\n{diagnostic.detail}"
            if diagnostic.code == "TASK_NOT_FOUND":
                raise NotFoundError(message, code=diagnostic.code)
            if diagnostic.code == "DEPENDENCY_CYCLE":
                raise BusinessRuleError(message, code=diagnostic.code)
            raise ValidationError(message, code=diagnostic.code)
        return with_dependency(
            tasks, predecessor_id, successor_id, diagnostic.dependency_type, diagnostic.lag_days
        )

    @staticmethod
    def _invalid_diagnostic(
        code: str,
        summary: str,
        detail: str,
        predecessor_id: str,
        successor_id: str,
        dependency_type: DependencyType,
        lag_days: int,
        suggestions: list[str] | None = None,
    ) -> DependencyDiagnostic:
        return DependencyDiagnostic(
            is_valid=False,
            code=code,
            summary=summary,
            detail=detail,
            predecessor_id=predecessor_id,
            successor_id=successor_id,
            dependency_type=dependency_type,
            lag_days=lag_days,
            impact_rows=[],
            suggestions=suggestions or [],
        )

    @staticmethod
    def _find_cycle_path_ids(
        tasks: Sequence[Task],
        predecessor_id: str,
        successor_id: str,
    ) -> list[str] | None:
        # the new link closes a loop when the predecessor is already downstream
        paths = _downstream_paths(_successor_adjacency(tasks), successor_id)
        path = paths.get(predecessor_id)
        if path is None:
            return None
        return [predecessor_id, *path]

    @staticmethod
    def _build_impact_rows(
        before: dict[str, Task],
        after: dict[str, Task],
        predecessor_id: str,
        successor_id: str,
    ) -> list[DependencyImpactRow]:
        paths = _downstream_paths(_successor_adjacency(list(after.values())), successor_id)

        rows: list[DependencyImpactRow] = []
        for task_id, old in before.items():
            new = after[task_id]
            if (old.start_date, old.end_date) == (new.start_date, new.end_date):
                continue
            chain = [predecessor_id, *paths.get(task_id, [task_id])]
            rows.append(
                DependencyImpactRow(
                    task_id=task_id,
                    task_name=new.name,
                    before_start=old.start_date,
                    before_finish=old.end_date,
                    after_start=new.start_date,
                    after_finish=new.end_date,
                    start_shift_days=_shift(old.start_date, new.start_date),
                    finish_shift_days=_shift(old.end_date, new.end_date),
                    trace_path=" -> ".join(_label(after, tid) for tid in chain),
                )
            )

        # biggest move first, then schedule order
        rows.sort(key=lambda row: (-row.largest_shift, row.after_start or date.max, row.task_id))
        return rows


def _parse_link(dependency_type: DependencyType | str, lag_days: int) -> tuple[DependencyType, int]:
    try:
        parsed_type = DependencyType.parse(dependency_type)
    except ValueError as exc:
        raise ValidationError(str(exc), code="INVALID_DEPENDENCY_TYPE") from exc
    try:
        parsed_lag = int(lag_days)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid lag: {lag_days!r}", code="INVALID_LAG") from exc
    return parsed_type, parsed_lag


def _label(tasks_by_id: dict[str, Task], task_id: str) -> str:
    task = tasks_by_id.get(task_id)
    return (task.name or task_id) if task is not None else task_id


def _shift(before: Optional[date], after: Optional[date]) -> Optional[int]:
    if before is None or after is None:
        return None
    return (after - before).days


def _successor_adjacency(tasks: Sequence[Task]) -> dict[str, list[str]]:
    graph: dict[str, list[str]] = {}
    for task in tasks:
        for edge in task.predecessors:
            graph.setdefault(edge.predecessor_id, []).append(task.id)
    return graph


def _downstream_paths(graph: dict[str, list[str]], source: str) -> dict[str, list[str]]:
    """Shortest successor chain from ``source`` to every task it reaches."""
    paths: dict[str, list[str]] = {source: [source]}
    queue = deque([source])
    while queue:
        current = queue.popleft()
        for nxt in graph.get(current, []):
            if nxt not in paths:
                paths[nxt] = [*paths[current], nxt]
                queue.append(nxt)
    return paths


def with_dependency(
    tasks: Sequence[Task],
    predecessor_id: str,
    successor_id: str,
    dependency_type: DependencyType | str,
    lag_days: int,
) -> List[Task]:
    edge = DependencyEdge(
        predecessor_id=predecessor_id,
        dependency_type=DependencyType.parse(dependency_type),
        lag_days=int(lag_days),
    )
    return [
        replace(task, predecessors=[*task.predecessors, edge])
        if task.id == successor_id
        else replace(task)
        for task in tasks
    ]


__all__ = [
    "DependencyImpactRow",
    "DependencyDiagnostic",
    "DependencyDiagnosticsMixin",
    "with_dependency",
]
