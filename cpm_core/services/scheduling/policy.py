from __future__ import annotations

import os
from dataclasses import dataclass

from cpm_core.exceptions import ValidationError

INVALID_DATES_ABORT = "abort"
INVALID_DATES_FLAG = "flag"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _env_flag(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    return default


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be an integer, got {raw!r}.", code="INVALID_POLICY") from exc


@dataclass(frozen=True)
class SchedulingPolicy:
    # "abort" raises on inverted start/end or baseline dates, "flag" reports and continues
    invalid_dates: str = INVALID_DATES_ABORT
    critical_epsilon_days: int = 0
    honor_stored_starts: bool = True
    working_days_per_week: int = 5

    def __post_init__(self) -> None:
        mode = (self.invalid_dates or "").strip().lower()
        if mode not in (INVALID_DATES_ABORT, INVALID_DATES_FLAG):
            raise ValidationError(
                f"Unknown invalid-date policy {self.invalid_dates!r}; use 'abort' or 'flag'.",
                code="INVALID_POLICY",
            )
        if not 1 <= self.working_days_per_week <= 7:
            raise ValidationError(
                "Working days per week must be between 1 and 7.",
                code="INVALID_POLICY",
            )
        object.__setattr__(self, "invalid_dates", mode)
        object.__setattr__(self, "critical_epsilon_days", max(0, int(self.critical_epsilon_days)))

    @property
    def flags_invalid_dates(self) -> bool:
        return self.invalid_dates == INVALID_DATES_FLAG

    @classmethod
    def from_env(cls) -> "SchedulingPolicy":
        return cls(
            invalid_dates=(os.getenv("PM_SCHEDULE_INVALID_DATES", INVALID_DATES_ABORT) or INVALID_DATES_ABORT),
            critical_epsilon_days=_env_int("PM_SCHEDULE_CRITICAL_EPSILON", 0),
            honor_stored_starts=_env_flag("PM_SCHEDULE_HONOR_STORED_STARTS", True),
            working_days_per_week=_env_int("PM_SCHEDULE_WORKING_DAYS_PER_WEEK", 5),
        )


__all__ = ["SchedulingPolicy", "INVALID_DATES_ABORT", "INVALID_DATES_FLAG"]
