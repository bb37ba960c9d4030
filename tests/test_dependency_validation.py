from datetime import date, timedelta

import pytest

from cpm_core.domain import Task
from cpm_core.exceptions import (
    BusinessRuleError,
    CyclicDependencyError,
    DanglingReferenceError,
    DuplicateTaskError,
    InvalidDateRangeError,
)
from cpm_core.services.scheduling.cycles import find_cycle, find_dangling_references
from cpm_core.services.scheduling.graph import TaskGraph

D0 = date(2024, 1, 1)


def day(n: int) -> date:
    return D0 + timedelta(days=n)


def test_two_task_cycle_is_rejected_before_scheduling(engine):
    tasks = [
        Task(id="A", start_date=day(0), duration_days=1, predecessors=["B"]),
        Task(id="B", duration_days=1, predecessors=["A"]),
    ]

    with pytest.raises(CyclicDependencyError) as exc:
        engine.validate(tasks)
    assert exc.value.cycle == ["A", "B"]
    assert exc.value.code == "SCHEDULE_CYCLE"
    assert isinstance(exc.value, BusinessRuleError)

    with pytest.raises(CyclicDependencyError):
        engine.schedule_forward(tasks)
    with pytest.raises(CyclicDependencyError):
        engine.analyze_critical_path(tasks)


def test_self_reference_is_a_cycle_of_one(engine):
    tasks = [Task(id="X", start_date=day(0), duration_days=2, predecessors=["X"])]

    with pytest.raises(CyclicDependencyError) as exc:
        engine.validate(tasks)
    assert exc.value.cycle == ["X"]


def test_cycle_path_excludes_the_acyclic_lead_in():
    graph = TaskGraph.from_tasks(
        [
            Task(id="T"),
            Task(id="A", predecessors=["T", "C"]),
            Task(id="B", predecessors=["A"]),
            Task(id="C", predecessors=["B"]),
        ]
    )

    assert find_cycle(graph) == ["A", "C", "B"]


def test_acyclic_graph_has_no_cycle():
    graph = TaskGraph.from_tasks(
        [
            Task(id="A"),
            Task(id="B", predecessors=["A"]),
            Task(id="C", predecessors=["A"]),
            Task(id="D", predecessors=["B", "C"]),
        ]
    )
    assert find_cycle(graph) is None


def test_deep_chain_does_not_exhaust_the_call_stack(engine):
    size = 5000
    tasks = [Task(id="t0", start_date=day(0), duration_days=1)]
    tasks += [Task(id=f"t{i}", duration_days=1, predecessors=[f"t{i - 1}"]) for i in range(1, size)]
    tasks.reverse()

    assert find_cycle(TaskGraph.from_tasks(tasks)) is None
    result = engine.analyze_critical_path(tasks)
    assert result.project_finish == day(size - 1)
    assert len(result.critical_ids) == size


def test_dangling_reference_is_reported_separately(engine):
    tasks = [
        Task(id="W", start_date=day(0), duration_days=1),
        Task(id="X", duration_days=1, predecessors=["W", "Y"]),
    ]

    with pytest.raises(DanglingReferenceError) as exc:
        engine.validate(tasks)
    assert exc.value.task_id == "X"
    assert exc.value.missing_predecessor_id == "Y"
    assert exc.value.code == "DEPENDENCY_NOT_FOUND"
    assert not isinstance(exc.value, CyclicDependencyError)

    assert find_dangling_references(TaskGraph.from_tasks(tasks)) == [("X", "Y")]


def test_duplicate_task_ids_are_rejected(engine):
    with pytest.raises(DuplicateTaskError):
        engine.validate([Task(id="A"), Task(id="A")])


def test_inverted_dates_abort_by_default(engine):
    tasks = [Task(id="A", start_date=day(5), end_date=day(2))]

    with pytest.raises(InvalidDateRangeError) as exc:
        engine.analyze_critical_path(tasks)
    assert exc.value.task_id == "A"
    assert exc.value.field == "schedule"


def test_inverted_baseline_aborts_by_default(engine):
    tasks = [
        Task(
            id="A",
            start_date=day(0),
            duration_days=1,
            baseline_start=day(9),
            baseline_end=day(3),
        )
    ]

    with pytest.raises(InvalidDateRangeError) as exc:
        engine.validate(tasks)
    assert exc.value.field == "baseline"


def test_flag_policy_reports_inverted_dates_and_keeps_scheduling(flagging_engine):
    tasks = [
        Task(id="A", start_date=day(5), end_date=day(2)),
        Task(id="B", duration_days=2, predecessors=["A"]),
    ]

    report = flagging_engine.validate(tasks)
    assert report.issue_codes() == ["INVALID_DATE_RANGE"]

    result = flagging_engine.analyze_critical_path(tasks)
    by_id = result.by_id()
    assert by_id["A"].start_date == day(5)
    assert by_id["A"].end_date == day(5)
    assert by_id["B"].start_date == day(6)
    assert [issue.task_id for issue in result.issues] == ["A"]


def test_stored_dates_that_break_a_link_are_reported(engine):
    tasks = [
        Task(id="A", start_date=day(0), end_date=day(4)),
        Task(id="B", start_date=day(2), end_date=day(3), predecessors=["A"]),
    ]

    report = engine.validate(tasks)
    assert report.has_issues
    assert report.issues[0].code == "DEPENDENCY_DATE_CONFLICT"
    assert report.issues[0].task_id == "B"

    scheduled = {t.id: t for t in engine.schedule_forward(tasks)}
    assert scheduled["B"].start_date == day(5)


def test_consistent_batch_validates_clean(engine):
    tasks = [
        Task(id="A", start_date=day(0), end_date=day(1)),
        Task(id="B", start_date=day(2), end_date=day(4), predecessors=["A"]),
    ]
    assert not engine.validate(tasks).has_issues
