from __future__ import annotations

import heapq
from typing import Dict, List

from cpm_core.exceptions import CyclicDependencyError
from cpm_core.services.scheduling.cycles import find_cycle
from cpm_core.services.scheduling.graph import TaskGraph


def topological_order(graph: TaskGraph) -> List[str]:
    """
    Kahn's algorithm; ties go to the task that comes first in the batch.

    Edges to predecessors outside the batch are ignored here, dangling
    references are reported by validation before ordering runs.
    """
    indegree: Dict[str, int] = {task_id: 0 for task_id in graph.task_ids}
    for task_id in graph.task_ids:
        for succ_id, _edge in graph.outgoing[task_id]:
            indegree[succ_id] += 1

    heap: list[tuple[int, str]] = [
        (graph.positions[task_id], task_id)
        for task_id, degree in indegree.items()
        if degree == 0
    ]
    heapq.heapify(heap)

    order: List[str] = []
    while heap:
        _position, task_id = heapq.heappop(heap)
        order.append(task_id)
        for succ_id, _edge in graph.outgoing[task_id]:
            indegree[succ_id] -= 1
            if indegree[succ_id] == 0:
                heapq.heappush(heap, (graph.positions[succ_id], succ_id))

    if len(order) != len(graph):
        raise CyclicDependencyError(find_cycle(graph) or [])
    return order


__all__ = ["topological_order"]
