from .diagnostics import DependencyDiagnostic, DependencyImpactRow
from .engine import SchedulingEngine
from .graph import TaskGraph
from .models import CriticalPathResult, InfeasibleAnchor, ScheduleIssue, ValidationReport
from .policy import SchedulingPolicy
from .working_days import approximate_working_days

__all__ = [
    "SchedulingEngine",
    "SchedulingPolicy",
    "TaskGraph",
    "CriticalPathResult",
    "InfeasibleAnchor",
    "ScheduleIssue",
    "ValidationReport",
    "DependencyDiagnostic",
    "DependencyImpactRow",
    "approximate_working_days",
]
