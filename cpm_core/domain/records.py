from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping

from cpm_core.domain.task import DependencyEdge, Task
from cpm_core.exceptions import ValidationError


def _parse_date(value: Any, field_name: str, record_id: str) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as exc:
        raise ValidationError(
            f"Task '{record_id}' has an invalid {field_name}: {value!r}",
            code="INVALID_DATE",
        ) from exc


def _format_date(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def task_from_record(record: Mapping[str, Any]) -> Task:
    """
    Convert a host-application task record into a Task.

    Typed edges come from ``predecessor_configs``; records that only carry the
    legacy ``predecessor_ids`` list get Finish-to-Start edges with zero lag.
    """
    if "id" not in record or record["id"] in (None, ""):
        raise ValidationError("Task record is missing an id.", code="TASK_ID_REQUIRED")
    record_id = str(record["id"])

    raw_edges = record.get("predecessor_configs") or record.get("predecessor_ids") or []
    try:
        predecessors = [DependencyEdge.from_value(item) for item in raw_edges]
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(
            f"Task '{record_id}' has an invalid predecessor entry: {exc}",
            code="INVALID_DEPENDENCY",
        ) from exc

    duration = record.get("duration_days")
    try:
        duration_days = int(duration) if duration not in (None, "") else None
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"Task '{record_id}' has an invalid duration_days: {duration!r}",
            code="INVALID_DURATION",
        ) from exc

    return Task(
        id=record_id,
        name=str(record.get("name") or ""),
        project_id=record.get("project_id"),
        start_date=_parse_date(record.get("start_date"), "start_date", record_id),
        end_date=_parse_date(record.get("end_date"), "end_date", record_id),
        duration_days=duration_days,
        predecessors=predecessors,
        baseline_start=_parse_date(record.get("baseline_start"), "baseline_start", record_id),
        baseline_end=_parse_date(record.get("baseline_end"), "baseline_end", record_id),
    )


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "name": task.name,
        "project_id": task.project_id,
        "start_date": _format_date(task.start_date),
        "end_date": _format_date(task.end_date),
        "duration_days": task.duration_days,
        "predecessor_configs": [
            {
                "predecessor_id": edge.predecessor_id,
                "type": edge.dependency_type.value,
                "lag_days": edge.lag_days,
            }
            for edge in task.predecessors
        ],
        "baseline_start": _format_date(task.baseline_start),
        "baseline_end": _format_date(task.baseline_end),
        "latest_start": _format_date(task.latest_start),
        "latest_finish": _format_date(task.latest_finish),
        "float_days": task.float_days,
        "is_critical": task.is_critical,
    }


__all__ = ["task_from_record", "task_to_record"]
