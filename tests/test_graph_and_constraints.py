from datetime import date, timedelta

import pytest

from cpm_core.domain import DependencyEdge, DependencyType, Task
from cpm_core.exceptions import CyclicDependencyError
from cpm_core.services.scheduling.constraints import (
    binding_constraint,
    earliest_start_for_edge,
    latest_finish_for_edge,
)
from cpm_core.services.scheduling.graph import TaskGraph
from cpm_core.services.scheduling.ordering import topological_order

D0 = date(2024, 1, 1)


def day(n: int) -> date:
    return D0 + timedelta(days=n)


def _diamond():
    # batch order deliberately puts dependents first
    return [
        Task(id="D", predecessors=["B", "C"]),
        Task(id="C", predecessors=["A"]),
        Task(id="B", predecessors=["A"]),
        Task(id="A"),
    ]


def test_graph_adjacency_views():
    graph = TaskGraph.from_tasks(_diamond())

    assert graph.task_ids == ["D", "C", "B", "A"]
    assert graph.predecessor_ids("D") == ["B", "C"]
    assert graph.successor_ids("A") == ["C", "B"]
    assert graph.roots() == ["A"]
    assert graph.leaves() == ["D"]
    assert "A" in graph and "Z" not in graph
    assert len(graph) == 4


def test_topological_order_places_predecessors_first():
    tasks = _diamond()
    order = topological_order(TaskGraph.from_tasks(tasks))
    position = {task_id: index for index, task_id in enumerate(order)}

    for task in tasks:
        for pred_id in task.predecessor_ids:
            assert position[pred_id] < position[task.id]
    assert sorted(order) == ["A", "B", "C", "D"]


def test_topological_order_breaks_ties_by_batch_position():
    order = topological_order(TaskGraph.from_tasks(_diamond()))
    assert order == ["A", "C", "B", "D"]


def test_topological_order_refuses_cycles():
    graph = TaskGraph.from_tasks(
        [Task(id="A", predecessors=["B"]), Task(id="B", predecessors=["A"])]
    )
    with pytest.raises(CyclicDependencyError) as exc:
        topological_order(graph)
    assert exc.value.cycle == ["A", "B"]


@pytest.mark.parametrize(
    "dep_type, lag, expected",
    [
        (DependencyType.FINISH_TO_START, 0, day(5)),
        (DependencyType.FINISH_TO_START, 2, day(7)),
        (DependencyType.FINISH_TO_START, -3, day(2)),
        (DependencyType.START_TO_START, 0, day(0)),
        (DependencyType.START_TO_START, 1, day(1)),
        (DependencyType.FINISH_TO_FINISH, 0, day(2)),
        (DependencyType.FINISH_TO_FINISH, 1, day(3)),
        (DependencyType.START_TO_FINISH, 0, day(-3)),
        (DependencyType.START_TO_FINISH, 4, day(1)),
    ],
)
def test_earliest_start_per_dependency_type(dep_type, lag, expected):
    # predecessor occupies day 0..4, dependent lasts 3 days
    edge = DependencyEdge("P", dep_type, lag)
    assert earliest_start_for_edge(edge, day(0), day(4), 3) == expected


@pytest.mark.parametrize(
    "dep_type, lag, expected",
    [
        (DependencyType.FINISH_TO_START, 0, day(9)),
        (DependencyType.FINISH_TO_START, 2, day(7)),
        (DependencyType.START_TO_START, 0, day(12)),
        (DependencyType.START_TO_START, 1, day(11)),
        (DependencyType.FINISH_TO_FINISH, 0, day(12)),
        (DependencyType.FINISH_TO_FINISH, -1, day(13)),
        (DependencyType.START_TO_FINISH, 0, day(15)),
    ],
)
def test_latest_finish_per_dependency_type(dep_type, lag, expected):
    # successor latest dates are day 10..12, predecessor lasts 3 days
    edge = DependencyEdge("P", dep_type, lag)
    assert latest_finish_for_edge(edge, day(10), day(12), 3) == expected


@pytest.mark.parametrize("dep_type", list(DependencyType))
def test_backward_bound_admits_the_forward_schedule(dep_type):
    pred_start, pred_duration, succ_duration = day(0), 4, 3
    pred_finish = pred_start + timedelta(days=pred_duration - 1)
    edge = DependencyEdge("P", dep_type, 2)

    succ_start = earliest_start_for_edge(edge, pred_start, pred_finish, succ_duration)
    succ_finish = succ_start + timedelta(days=succ_duration - 1)

    assert latest_finish_for_edge(edge, succ_start, succ_finish, pred_duration) == pred_finish


def test_binding_constraint_is_the_maximum():
    assert binding_constraint([day(3), day(7), day(5)]) == day(7)
    assert binding_constraint([day(3)], floor=day(4)) == day(4)
    assert binding_constraint([], floor=day(2)) == day(2)
    assert binding_constraint([]) is None
