from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from cpm_core.domain.task import DependencyEdge, Task
from cpm_core.exceptions import DuplicateTaskError


@dataclass
class TaskGraph:
    """
    Adjacency views over one task batch.

    Edges point from predecessor to dependent. ``incoming`` keeps every edge a
    task declares, including ones whose predecessor is not in the batch;
    ``outgoing`` only holds edges between known tasks.
    """

    tasks_by_id: Dict[str, Task]
    task_ids: List[str]
    incoming: Dict[str, List[DependencyEdge]]
    outgoing: Dict[str, List[tuple[str, DependencyEdge]]]
    positions: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task]) -> "TaskGraph":
        tasks_by_id: Dict[str, Task] = {}
        task_ids: List[str] = []
        for task in tasks:
            if task.id in tasks_by_id:
                raise DuplicateTaskError(task.id)
            tasks_by_id[task.id] = task
            task_ids.append(task.id)

        incoming: Dict[str, List[DependencyEdge]] = {task_id: [] for task_id in task_ids}
        outgoing: Dict[str, List[tuple[str, DependencyEdge]]] = {task_id: [] for task_id in task_ids}
        for task_id in task_ids:
            for edge in tasks_by_id[task_id].predecessors:
                incoming[task_id].append(edge)
                if edge.predecessor_id in tasks_by_id:
                    outgoing[edge.predecessor_id].append((task_id, edge))

        return cls(
            tasks_by_id=tasks_by_id,
            task_ids=task_ids,
            incoming=incoming,
            outgoing=outgoing,
            positions={task_id: index for index, task_id in enumerate(task_ids)},
        )

    def __len__(self) -> int:
        return len(self.task_ids)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.tasks_by_id

    def task(self, task_id: str) -> Task:
        return self.tasks_by_id[task_id]

    def predecessor_ids(self, task_id: str) -> List[str]:
        return [edge.predecessor_id for edge in self.incoming.get(task_id, [])]

    def successor_ids(self, task_id: str) -> List[str]:
        return [succ_id for succ_id, _edge in self.outgoing.get(task_id, [])]

    def roots(self) -> List[str]:
        return [task_id for task_id in self.task_ids if not self.incoming[task_id]]

    def leaves(self) -> List[str]:
        return [task_id for task_id in self.task_ids if not self.outgoing[task_id]]


__all__ = ["TaskGraph"]
