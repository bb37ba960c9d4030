from cpm_core.domain import DependencyEdge, DependencyType, Task, task_from_record, task_to_record
from cpm_core.exceptions import (
    BusinessRuleError,
    CyclicDependencyError,
    DanglingReferenceError,
    DomainError,
    DuplicateTaskError,
    InvalidDateRangeError,
    NotFoundError,
    ScheduleStateError,
    ValidationError,
)
from cpm_core.services.scheduling import (
    CriticalPathResult,
    InfeasibleAnchor,
    ScheduleIssue,
    SchedulingEngine,
    SchedulingPolicy,
    ValidationReport,
)

__version__ = "1.0.0"

__all__ = [
    "DependencyEdge",
    "DependencyType",
    "Task",
    "task_from_record",
    "task_to_record",
    "SchedulingEngine",
    "SchedulingPolicy",
    "CriticalPathResult",
    "InfeasibleAnchor",
    "ScheduleIssue",
    "ValidationReport",
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "BusinessRuleError",
    "CyclicDependencyError",
    "DanglingReferenceError",
    "InvalidDateRangeError",
    "DuplicateTaskError",
    "ScheduleStateError",
]
