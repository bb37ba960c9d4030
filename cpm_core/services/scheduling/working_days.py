from __future__ import annotations

from datetime import date


def approximate_working_days(start: date, end: date, working_days_per_week: int = 5) -> int:
    """
    Coarse working-day count for an inclusive date range.

    Whole weeks count ``working_days_per_week`` each and the leftover days are
    capped at the weekly rate. The weekday the range starts on is not taken
    into account, so a Saturday-to-Sunday range still counts two days.
    """
    total_days = (end - start).days + 1
    weeks, remaining_days = divmod(total_days, 7)
    working_days = weeks * working_days_per_week + min(remaining_days, working_days_per_week)
    return max(1, working_days)


__all__ = ["approximate_working_days"]
