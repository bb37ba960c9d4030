from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from cpm_core.domain.task import Task


@dataclass(frozen=True)
class ScheduleIssue:
    """Non-fatal finding reported alongside a schedule."""

    code: str
    task_id: str
    message: str


@dataclass(frozen=True)
class InfeasibleAnchor:
    """A task whose latest start falls before its earliest start; float_days is negative."""

    task_id: str
    float_days: int


@dataclass
class ValidationReport:
    issues: list[ScheduleIssue] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)

    def issue_codes(self) -> list[str]:
        return [issue.code for issue in self.issues]


@dataclass
class CriticalPathResult:
    tasks: list[Task]
    critical_ids: list[str]
    anchor: date
    project_start: Optional[date]
    project_finish: date
    project_duration_days: int
    project_working_days: int
    warnings: list[InfeasibleAnchor] = field(default_factory=list)
    issues: list[ScheduleIssue] = field(default_factory=list)

    @property
    def has_infeasible_anchor(self) -> bool:
        return bool(self.warnings)

    def by_id(self) -> dict[str, Task]:
        return {task.id: task for task in self.tasks}

    def critical_tasks(self) -> list[Task]:
        tasks_by_id = self.by_id()
        return [tasks_by_id[task_id] for task_id in self.critical_ids]


__all__ = ["ScheduleIssue", "InfeasibleAnchor", "ValidationReport", "CriticalPathResult"]
