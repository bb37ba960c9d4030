# cpm_core/exceptions.py
from __future__ import annotations


class DomainError(Exception):
    """Base class for domain-level errors."""
    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when data is invalid or violates constraints."""


class NotFoundError(DomainError):
    """Raised when a referenced task is not in the batch."""


class BusinessRuleError(DomainError):
    """Raised when scheduling rules are violated (e.g., circular dependencies)."""


class CyclicDependencyError(BusinessRuleError):
    """The dependency graph contains a cycle; ``cycle`` lists the task ids on it."""

    def __init__(self, cycle: list[str], message: str | None = None):
        self.cycle = list(cycle)
        path = " -> ".join(self.cycle + self.cycle[:1])
        super().__init__(
            message or f"Cannot schedule project: circular dependency detected ({path}).",
            code="SCHEDULE_CYCLE",
        )


class DanglingReferenceError(ValidationError):
    def __init__(self, task_id: str, missing_predecessor_id: str):
        self.task_id = task_id
        self.missing_predecessor_id = missing_predecessor_id
        super().__init__(
            f"Task '{task_id}' depends on unknown task '{missing_predecessor_id}'.",
            code="DEPENDENCY_NOT_FOUND",
        )


class InvalidDateRangeError(ValidationError):
    def __init__(self, task_id: str, field: str = "schedule"):
        self.task_id = task_id
        self.field = field
        label = "Baseline start" if field == "baseline" else "Start date"
        super().__init__(
            f"{label} cannot be after end date for task '{task_id}'.",
            code="INVALID_DATE_RANGE",
        )


class DuplicateTaskError(ValidationError):
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task id '{task_id}' appears more than once.", code="DUPLICATE_TASK_ID")


class ScheduleStateError(ValidationError):
    """Raised when a pass needs results that an earlier pass has not produced yet."""

    def __init__(self, message: str, *, task_id: str | None = None):
        self.task_id = task_id
        super().__init__(message, code="SCHEDULE_NOT_COMPUTED")


__all__ = [
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
