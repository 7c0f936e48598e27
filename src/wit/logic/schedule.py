"""
Schedule Evaluator - Time-based on/off rules

A schedule is line oriented, one rule per line::

    # minute hour daytype action
    0 8 weekday on
    30 22 weekday off
    0 10 weekend on

Blank lines and lines starting with ``#`` are ignored. Rules are read as a
sequence of threshold crossings: the last rule whose time has been reached
decides the action. An implicit ``00:00 off`` rule starts each day that has
at least one rule.

Evaluation is a pure function of the schedule text and ``now``.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Sequence

from wit.errors import ScheduleParseError

COMMENT_PREFIX = "#"
RULE_TOKENS = 4


class ScheduleAction(str, Enum):
    """Desired action for the unit"""
    ON = "on"
    OFF = "off"
    NONE = "none"  # schedule has nothing to say right now


class DayType(str, Enum):
    """Which days a rule applies to"""
    WEEKDAY = "weekday"
    WEEKEND = "weekend"
    ANY = "any"  # synthetic rule only, not accepted in schedule text

    def matches(self, now: datetime) -> bool:
        """Check whether this day type covers the day of ``now``"""
        if self is DayType.ANY:
            return True
        is_weekend = now.weekday() >= 5
        return is_weekend == (self is DayType.WEEKEND)


class TimeOrdering(str, Enum):
    """
    How rule times are compared against the current time

    LEGACY is the historical comparison, which requires both the
    hour and the minute of ``now`` to be at or past the rule's. It is not
    chronological: at 23:05 a rule for 00:50 has not been reached.
    CHRONOLOGICAL compares minutes since midnight.
    """
    LEGACY = "legacy"
    CHRONOLOGICAL = "chronological"


@dataclass(frozen=True)
class ScheduleRule:
    """One parsed schedule line"""
    minute: int
    hour: int
    day_type: DayType
    action: ScheduleAction

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute


SYNTHETIC_RULE = ScheduleRule(minute=0, hour=0, day_type=DayType.ANY, action=ScheduleAction.OFF)

_RULE_ACTIONS = {ScheduleAction.ON.value, ScheduleAction.OFF.value}
_RULE_DAY_TYPES = {DayType.WEEKDAY.value, DayType.WEEKEND.value}


def _parse_bounded(
    token: str, name: str, upper: int, line_number: int, line: str
) -> int:
    try:
        value = int(token)
    except ValueError:
        raise ScheduleParseError(line_number, line, f"{name} is not a number") from None
    if value < 0 or value > upper:
        raise ScheduleParseError(line_number, line, f"{name} must be between 0 and {upper}")
    return value


def _parse_line(line_number: int, line: str) -> ScheduleRule:
    parts = line.split()
    if len(parts) != RULE_TOKENS:
        raise ScheduleParseError(
            line_number, line, "expected 'minute hour daytype action'"
        )

    minute_token, hour_token, day_token, action_token = parts

    if action_token not in _RULE_ACTIONS:
        raise ScheduleParseError(line_number, line, "action must be 'on' or 'off'")

    hour = _parse_bounded(hour_token, "hour", 23, line_number, line)
    minute = _parse_bounded(minute_token, "minute", 59, line_number, line)

    if day_token not in _RULE_DAY_TYPES:
        raise ScheduleParseError(
            line_number, line, "day type must be 'weekday' or 'weekend'"
        )

    return ScheduleRule(
        minute=minute,
        hour=hour,
        day_type=DayType(day_token),
        action=ScheduleAction(action_token),
    )


def parse_schedule(text: str) -> List[ScheduleRule]:
    """
    Parse schedule text into rules, in file order

    Args:
        text: Raw schedule text

    Returns:
        All rules, regardless of day type

    Raises:
        ScheduleParseError: On the first invalid line. No rules are
            returned when any line is invalid.
    """
    rules: List[ScheduleRule] = []
    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue
        rules.append(_parse_line(line_number, line))
    return rules


def validate_schedule(text: str) -> None:
    """Raise ScheduleParseError if the text would not parse"""
    parse_schedule(text)


def _reached(rule: ScheduleRule, now: datetime, ordering: TimeOrdering) -> bool:
    if ordering is TimeOrdering.CHRONOLOGICAL:
        return now.hour * 60 + now.minute >= rule.minute_of_day
    return now.minute >= rule.minute and now.hour >= rule.hour


def _beyond(rule: ScheduleRule, now: datetime, ordering: TimeOrdering) -> bool:
    if ordering is TimeOrdering.CHRONOLOGICAL:
        return now.hour * 60 + now.minute < rule.minute_of_day
    return now.minute < rule.minute and now.hour < rule.hour


def match_rules(
    rules: Sequence[ScheduleRule],
    now: datetime,
    ordering: TimeOrdering = TimeOrdering.LEGACY,
) -> ScheduleAction:
    """
    Walk rules in order and return the action of the last one reached

    Scanning stops at the first rule lying beyond ``now`` once something
    has matched.
    """
    match = ScheduleAction.NONE
    for rule in rules:
        if _reached(rule, now, ordering):
            match = rule.action
        if match is not ScheduleAction.NONE and _beyond(rule, now, ordering):
            break
    return match


def evaluate(
    text: str,
    now: datetime,
    ordering: TimeOrdering = TimeOrdering.LEGACY,
) -> ScheduleAction:
    """
    Decide what the unit should be doing at ``now``

    Args:
        text: Raw schedule text
        now: Time to evaluate at (local wall clock)
        ordering: Time comparison to use

    Returns:
        ON or OFF from the last rule reached today, or NONE when no rule
        applies to today's day type

    Raises:
        ScheduleParseError: If the text does not parse
    """
    todays = [rule for rule in parse_schedule(text) if rule.day_type.matches(now)]
    if not todays:
        return ScheduleAction.NONE
    return match_rules([SYNTHETIC_RULE, *todays], now, ordering)
