from __future__ import annotations

from typing import Iterator, List, Optional

from cpm_core.exceptions import CyclicDependencyError, DanglingReferenceError
from cpm_core.services.scheduling.graph import TaskGraph


def find_dangling_references(graph: TaskGraph) -> List[tuple[str, str]]:
    """(task_id, missing_predecessor_id) pairs, in batch and edge order."""
    dangling: List[tuple[str, str]] = []
    for task_id in graph.task_ids:
        for pred_id in graph.predecessor_ids(task_id):
            if pred_id not in graph:
                dangling.append((task_id, pred_id))
    return dangling


def find_cycle(graph: TaskGraph) -> Optional[List[str]]:
    """
    Depth-first search along predecessor links with an explicit stack.

    Returns the first cycle met as the path from the repeated node to the
    node that reached it, or None when the graph is acyclic. A task listing
    itself comes back as a one-element cycle.
    """
    visited: set[str] = set()
    on_stack: set[str] = set()

    for root in graph.task_ids:
        if root in visited:
            continue

        path: List[str] = [root]
        frames: List[Iterator[str]] = [iter(graph.predecessor_ids(root))]
        visited.add(root)
        on_stack.add(root)

        while frames:
            next_id = next(frames[-1], None)
            if next_id is None:
                frames.pop()
                on_stack.discard(path.pop())
                continue
            if next_id not in graph:
                continue
            if next_id in on_stack:
                return path[path.index(next_id):]
            if next_id in visited:
                continue
            visited.add(next_id)
            on_stack.add(next_id)
            path.append(next_id)
            frames.append(iter(graph.predecessor_ids(next_id)))

    return None


def ensure_resolvable(graph: TaskGraph) -> None:
    dangling = find_dangling_references(graph)
    if dangling:
        task_id, missing_id = dangling[0]
        raise DanglingReferenceError(task_id=task_id, missing_predecessor_id=missing_id)


def ensure_acyclic(graph: TaskGraph) -> None:
    cycle = find_cycle(graph)
    if cycle:
        raise CyclicDependencyError(cycle)


__all__ = [
    "find_cycle",
    "find_dangling_references",
    "ensure_acyclic",
    "ensure_resolvable",
]
