from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping, Optional

from cpm_core.domain.enums import DependencyType
from cpm_core.domain.identifiers import generate_id


@dataclass(frozen=True)
class DependencyEdge:
    predecessor_id: str
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lag_days: int = 0

    @staticmethod
    def from_value(value: Any) -> "DependencyEdge":
        """
        Build an edge from whatever a host record carries:
        - an existing DependencyEdge
        - a bare predecessor id (legacy records) -> FS, lag 0
        - a mapping with predecessor_id / type (or dependency_type) / lag_days
        """
        if isinstance(value, DependencyEdge):
            return value
        if isinstance(value, str):
            return DependencyEdge(predecessor_id=value)
        if isinstance(value, Mapping):
            raw_type = value.get("type", value.get("dependency_type"))
            return DependencyEdge(
                predecessor_id=str(value["predecessor_id"]),
                dependency_type=DependencyType.parse(raw_type),
                lag_days=int(value.get("lag_days") or 0),
            )
        raise TypeError(f"Unsupported predecessor value: {value!r}")


def normalize_predecessors(values: Iterable[Any] | None) -> list[DependencyEdge]:
    edges: list[DependencyEdge] = []
    seen: set[DependencyEdge] = set()
    for value in values or ():
        edge = DependencyEdge.from_value(value)
        if edge in seen:
            continue
        seen.add(edge)
        edges.append(edge)
    return edges


@dataclass
class Task:
    id: str
    name: str = ""
    project_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration_days: Optional[int] = None
    predecessors: list[DependencyEdge] = field(default_factory=list)
    baseline_start: Optional[date] = None
    baseline_end: Optional[date] = None

    # written by the scheduling engine only
    latest_start: Optional[date] = None
    latest_finish: Optional[date] = None
    float_days: Optional[int] = None
    is_critical: bool = False

    def __post_init__(self) -> None:
        self.predecessors = normalize_predecessors(self.predecessors)

    @property
    def predecessor_ids(self) -> list[str]:
        return [edge.predecessor_id for edge in self.predecessors]

    @property
    def effective_duration(self) -> int:
        """
        Duration used by the scheduler:
        - explicit duration_days when set
        - otherwise end - start + 1 (calendar days) when both dates exist
        - otherwise 1
        Always clamped to >= 1.
        """
        if self.duration_days is not None:
            return max(1, int(self.duration_days))
        if self.start_date is not None and self.end_date is not None:
            return max(1, (self.end_date - self.start_date).days + 1)
        return 1

    @staticmethod
    def create(name: str, **extra) -> "Task":
        return Task(id=generate_id(), name=name, **extra)


__all__ = ["DependencyEdge", "Task", "normalize_predecessors"]
