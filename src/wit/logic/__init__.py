"""
Wit Logic - Pure decision functions
"""

from wit.logic.schedule import (
    DayType,
    ScheduleAction,
    ScheduleRule,
    TimeOrdering,
    evaluate,
    parse_schedule,
    validate_schedule,
)

__all__ = [
    "DayType",
    "ScheduleAction",
    "ScheduleRule",
    "TimeOrdering",
    "evaluate",
    "parse_schedule",
    "validate_schedule",
]
