from cpm_core.domain.enums import DependencyType
from cpm_core.domain.identifiers import generate_id
from cpm_core.domain.records import task_from_record, task_to_record
from cpm_core.domain.task import DependencyEdge, Task, normalize_predecessors

__all__ = [
    "generate_id",
    "DependencyType",
    "DependencyEdge",
    "Task",
    "normalize_predecessors",
    "task_from_record",
    "task_to_record",
]
