# phrases.py
"""
Recurrence phrase -> RecurrenceRule (parser only)

Depends on:
  - interval.py (calendar_day rollover for "until" dates)

Public API:
  - parse_rule(phrase, anchor) -> RecurrenceRule
  - parse_date(s) -> date

Notes:
- Keyword driven, case-insensitive; synonyms are matched anywhere in the phrase.
- Weekday indexes are Sunday-based (0 = Sunday), months are 0-based (0 = January).
- Unknown phrases give an empty rule, never an error.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import IntEnum
from typing import Iterable, Optional, Tuple, Union

from .interval import calendar_day

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\s*(\d{4})-(\d{2})-(\d{2})\s*$")

WEEKDAY_MAP = {
    "sunday": 0, "sun": 0,
    "monday": 1, "mon": 1,
    "tuesday": 2, "tue": 2, "tues": 2,
    "wednesday": 3, "wed": 3,
    "thursday": 4, "thu": 4, "thur": 4, "thurs": 4,
    "friday": 5, "fri": 5,
    "saturday": 6, "sat": 6,
}

MONTH_MAP = {
    "january": 0, "jan": 0,
    "february": 1, "feb": 1,
    "march": 2, "mar": 2,
    "april": 3, "apr": 3,
    "may": 4,
    "june": 5, "jun": 5,
    "july": 6, "jul": 6,
    "august": 7, "aug": 7,
    "september": 8, "sep": 8, "sept": 8,
    "october": 9, "oct": 9,
    "november": 10, "nov": 10,
    "december": 11, "dec": 11,
}


class Ordinal(IntEnum):
    FIRST = 1
    SECOND = 2
    THIRD = 3
    FOURTH = 4
    FIFTH = 5
    SIXTH = 6
    LAST = -1


ORDINAL_MAP = {
    "first": Ordinal.FIRST, "1st": Ordinal.FIRST,
    "second": Ordinal.SECOND, "2nd": Ordinal.SECOND,
    "third": Ordinal.THIRD, "3rd": Ordinal.THIRD,
    "fourth": Ordinal.FOURTH, "4th": Ordinal.FOURTH,
    "fifth": Ordinal.FIFTH, "5th": Ordinal.FIFTH,
    "sixth": Ordinal.SIXTH, "6th": Ordinal.SIXTH,
    "last": Ordinal.LAST,
}

ALL_WEEKDAYS = (0, 1, 2, 3, 4, 5, 6)
WORK_WEEKDAYS = (1, 2, 3, 4, 5)
WEEKEND_DAYS = (0, 6)
ALL_MONTHS = tuple(range(12))


def _alternation(names: Iterable[str]) -> str:
    # longest first so "thursday" wins over "thu"
    return "|".join(sorted(names, key=len, reverse=True))


_WEEKDAY = _alternation(WEEKDAY_MAP)
_MONTH = _alternation(MONTH_MAP)

_UNTIL_RE = re.compile(r"(?:^|\s+)until\s+(\d{4})-(\d{2})-(\d{2})\s*$")
_STEP_RE = re.compile(r"\bbiweekly\b|\bfortnightly\b|\bevery\s+other\s+week\b")
_ORDINAL_RE = re.compile(r"\b(%s)\s+(%s)\b" % (_alternation(ORDINAL_MAP), _WEEKDAY))
_WEEKDAY_NAME_RE = re.compile(r"\b(%s)\b" % _WEEKDAY)
_MONTH_NAME_RE = re.compile(r"\b(%s)\b" % _MONTH)
_MONTH_RANGE_RE = re.compile(r"\b(%s)\s+(?:to|through|thru)\s+(%s)\b" % (_MONTH, _MONTH))
_DAILY_RE = re.compile(r"\bdaily\b|\bevery\s+day\b")
_WORKDAYS_RE = re.compile(r"\bweekdays\b|\bevery\s+weekday\b")
_WEEKENDS_RE = re.compile(r"\bweekends\b|\bevery\s+weekend\b")
_WEEKLY_RE = re.compile(r"\bweekly\b|\bevery\s+week\b")
_BIMONTHLY_RE = re.compile(r"\bbimonthly\b|\bevery\s+other\s+month\b")
_MONTHLY_RE = re.compile(r"\bmonthly\b|\bevery\s+month\b")
_YEARLY_RE = re.compile(r"\byearly\b|\bannually\b|\bevery\s+year\b")


def parse_date(s: str) -> date:
    m = _DATE_RE.match(s.strip())
    if not m:
        raise ValueError(f"Invalid date: {s!r} (expected YYYY-MM-DD)")
    return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def weekday_index(d: Union[date, datetime]) -> int:
    """Sunday-based weekday index (0 = Sunday .. 6 = Saturday)."""
    return (d.weekday() + 1) % 7


@dataclass(frozen=True)
class RecurrenceRule:
    weekdays: Tuple[int, ...] = ()        # 0..6, Sunday first
    months: Tuple[int, ...] = ()          # 0..11
    day_of_month: Optional[int] = None    # 1..31
    step_days: Optional[int] = None
    ordinal: Optional[Ordinal] = None
    until: Optional[date] = None          # inclusive

    @property
    def is_empty(self) -> bool:
        return (
            not self.weekdays
            and not self.months
            and self.day_of_month is None
            and self.step_days is None
            and self.ordinal is None
        )


def _month_range(first: int, last: int) -> Tuple[int, ...]:
    if first <= last:
        return tuple(range(first, last + 1))
    # wraps past December ("november to february")
    return tuple(sorted(set(range(first, 12)) | set(range(0, last + 1))))


def _parse_months(s: str) -> Tuple[int, ...]:
    m = _MONTH_RANGE_RE.search(s)
    if m:
        return _month_range(MONTH_MAP[m.group(1)], MONTH_MAP[m.group(2)])
    return tuple(sorted({MONTH_MAP[name] for name in _MONTH_NAME_RE.findall(s)}))


def _parse_weekdays(s: str, anchor: Union[date, datetime]) -> Tuple[int, ...]:
    named = {WEEKDAY_MAP[name] for name in _WEEKDAY_NAME_RE.findall(s)}
    if named:
        return tuple(sorted(named))
    if _DAILY_RE.search(s):
        return ALL_WEEKDAYS
    if _WORKDAYS_RE.search(s):
        return WORK_WEEKDAYS
    if _WEEKENDS_RE.search(s):
        return WEEKEND_DAYS
    if _WEEKLY_RE.search(s):
        return (weekday_index(anchor),)
    return ()


def parse_rule(phrase: str, anchor: Union[date, datetime]) -> RecurrenceRule:
    s = " ".join(phrase.strip().split()).lower()

    # ---- "... until YYYY-MM-DD" suffix ----
    until: Optional[date] = None
    m = _UNTIL_RE.search(s)
    if m:
        last = calendar_day(*(int(g) for g in m.groups()))
        if last is None:
            logger.debug("until date in %r is out of range, ignored", phrase)
        else:
            until = last.date()
        s = s[: m.start()].strip()

    # ---- biweekly: fixed 14 day step from the anchor ----
    if _STEP_RE.search(s):
        return RecurrenceRule(step_days=14, until=until)

    months = _parse_months(s)

    # ---- "<ordinal> <weekday>": nth (or last) weekday of the month ----
    m = _ORDINAL_RE.search(s)
    if m:
        return RecurrenceRule(
            weekdays=(WEEKDAY_MAP[m.group(2)],),
            months=months,
            ordinal=ORDINAL_MAP[m.group(1)],
            until=until,
        )

    # ---- bimonthly: alternate months from the anchor month ----
    if _BIMONTHLY_RE.search(s):
        parity = (anchor.month - 1) % 2
        return RecurrenceRule(
            day_of_month=anchor.day,
            months=tuple(i for i in ALL_MONTHS if i % 2 == parity),
            until=until,
        )

    # ---- weekday sets, optionally limited to named months ----
    weekdays = _parse_weekdays(s, anchor)
    if weekdays:
        return RecurrenceRule(weekdays=weekdays, months=months, until=until)

    if _MONTHLY_RE.search(s):
        return RecurrenceRule(day_of_month=anchor.day, months=months or ALL_MONTHS, until=until)

    if _YEARLY_RE.search(s):
        return RecurrenceRule(day_of_month=anchor.day, months=months or (anchor.month - 1,), until=until)

    if months:
        return RecurrenceRule(months=months, until=until)

    logger.debug("unrecognized recurrence phrase %r", phrase)
    return RecurrenceRule(until=until)
