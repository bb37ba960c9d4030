from __future__ import annotations

from enum import Enum


class DependencyType(str, Enum):
    FINISH_TO_START = "FS"
    FINISH_TO_FINISH = "FF"
    START_TO_START = "SS"
    START_TO_FINISH = "SF"

    @classmethod
    def parse(cls, value: "DependencyType | str | None") -> "DependencyType":
        """Accepts an enum member, its code ("fs", "SS") or its name; None means FS."""
        if value is None:
            return cls.FINISH_TO_START
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().upper()
        if not normalized:
            return cls.FINISH_TO_START
        for member in cls:
            if normalized in (member.value, member.name):
                return member
        raise ValueError(f"Unknown dependency type: {value!r}")


__all__ = ["DependencyType"]
