from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

from cpm_core.domain.enums import DependencyType
from cpm_core.domain.task import DependencyEdge

# Dates are inclusive calendar days: a task of duration d starting on S
# finishes on S + d - 1, and its finish boundary is the day after that.

_ONE_DAY = timedelta(days=1)


def earliest_start_for_edge(
    edge: DependencyEdge,
    pred_start: date,
    pred_finish: date,
    duration_days: int,
) -> date:
    """Earliest start the edge allows for the dependent task."""
    lag = timedelta(days=edge.lag_days)
    duration = timedelta(days=max(1, duration_days))

    if edge.dependency_type == DependencyType.START_TO_START:
        return pred_start + lag
    if edge.dependency_type == DependencyType.FINISH_TO_FINISH:
        # EF_s >= EF_p + lag => ES_s >= EF_p + lag - duration_s + 1
        return pred_finish + lag - duration + _ONE_DAY
    if edge.dependency_type == DependencyType.START_TO_FINISH:
        # finish boundary of s >= ES_p + lag => ES_s >= ES_p + lag - duration_s
        return pred_start + lag - duration
    # FS: s starts the day after p finishes, shifted by lag
    return pred_finish + _ONE_DAY + lag


def latest_finish_for_edge(
    edge: DependencyEdge,
    succ_latest_start: date,
    succ_latest_finish: date,
    duration_days: int,
) -> date:
    """Latest finish the edge allows for the predecessor, given the dependent's latest dates."""
    lag = timedelta(days=edge.lag_days)
    duration = timedelta(days=max(1, duration_days))

    if edge.dependency_type == DependencyType.START_TO_START:
        # LS_p <= LS_s - lag
        return succ_latest_start - lag + duration - _ONE_DAY
    if edge.dependency_type == DependencyType.FINISH_TO_FINISH:
        return succ_latest_finish - lag
    if edge.dependency_type == DependencyType.START_TO_FINISH:
        # LS_p <= LF_s + 1 - lag
        return succ_latest_finish - lag + duration
    return succ_latest_start - _ONE_DAY - lag


def binding_constraint(candidates: Iterable[date], floor: Optional[date] = None) -> Optional[date]:
    """The latest of the candidate dates, never earlier than ``floor``."""
    values = list(candidates)
    if floor is not None:
        values.append(floor)
    return max(values) if values else None


__all__ = ["earliest_start_for_edge", "latest_finish_for_edge", "binding_constraint"]
