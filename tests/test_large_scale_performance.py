from __future__ import annotations

import os
import time
from dataclasses import dataclass
from datetime import date

import pytest

from cpm_core.domain import DependencyEdge, DependencyType, Task
from cpm_core.services.scheduling import SchedulingEngine, SchedulingPolicy


@dataclass(frozen=True)
class PerfConfig:
    tasks: int
    cross_dependency_gap: int
    start_date: date
    schedule_sla_seconds: float


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _load_config() -> PerfConfig:
    return PerfConfig(
        tasks=_env_int("PM_PERF_TASKS", 3000),
        cross_dependency_gap=max(2, _env_int("PM_PERF_CROSS_DEP_GAP", 29)),
        start_date=date.fromisoformat(os.getenv("PM_PERF_START_DATE", "2025-01-06")),
        schedule_sla_seconds=_env_float("PM_PERF_SLA_SCHEDULE_SECONDS", 20.0),
    )


def _seed_tasks(cfg: PerfConfig) -> list[Task]:
    cycle = list(DependencyType)
    tasks: list[Task] = []
    for index in range(cfg.tasks):
        predecessors: list[DependencyEdge] = []
        if index > 0:
            predecessors.append(DependencyEdge(f"T{index - 1:05d}"))
        if index >= cfg.cross_dependency_gap:
            predecessors.append(
                DependencyEdge(
                    f"T{index - cfg.cross_dependency_gap:05d}",
                    cycle[index % len(cycle)],
                    index % 3 - 1,
                )
            )
        tasks.append(
            Task(
                id=f"T{index:05d}",
                name=f"Task {index}",
                start_date=cfg.start_date if index == 0 else None,
                duration_days=1 + index % 4,
                predecessors=predecessors,
            )
        )
    return tasks


@pytest.mark.skipif(_env_flag("PM_SKIP_PERF"), reason="performance suite disabled")
def test_large_batch_schedules_within_sla():
    cfg = _load_config()
    tasks = _seed_tasks(cfg)
    engine = SchedulingEngine(policy=SchedulingPolicy(), default_start=cfg.start_date)

    started = time.perf_counter()
    result = engine.analyze_critical_path(tasks)
    elapsed = time.perf_counter() - started

    assert len(result.tasks) == cfg.tasks
    assert result.critical_ids
    assert all(task.float_days >= 0 for task in result.tasks)
    assert not result.has_infeasible_anchor
    assert elapsed <= cfg.schedule_sla_seconds, (
        f"Scheduling {cfg.tasks} tasks took {elapsed:.2f}s (SLA {cfg.schedule_sla_seconds}s)"
    )
