# interval.py
"""
Text -> Interval

Depends on:
  - scanner.py (date/time token spans)

Public API:
  - resolve(text) -> Interval | None
  - resolve_text(text) -> ResolvedText | None
  - calendar_day(year, month, day) -> datetime | None
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from .scanner import (
    DATE_TOKEN, TIME_TOKEN, TokenMatch,
    find_continuation, find_token, own_text_end,
)

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)
END_OF_DAY = timedelta(hours=23, minutes=59, seconds=59, milliseconds=999)

DayLike = Union[date, datetime]


def _day(d: DayLike) -> date:
    return d.date() if isinstance(d, datetime) else d


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime
    has_explicit_start_time: bool = False

    def is_multi_day(self) -> bool:
        return self.end - self.start > ONE_DAY

    def is_all_day(self) -> bool:
        return not self.has_explicit_start_time and not self.is_multi_day()

    def has_end_time(self) -> bool:
        return self.has_explicit_start_time and self.end.time() != self.start.time()

    def is_multi_day_start(self, d: DayLike) -> bool:
        return self.is_multi_day() and _day(d) == self.start.date()

    def is_multi_day_end(self, d: DayLike) -> bool:
        return self.is_multi_day() and _day(d) == self.end.date()

    def is_multi_day_continuation(self, d: DayLike) -> bool:
        return self.is_multi_day() and self.start.date() < _day(d) < self.end.date()

    def occurs_on(self, d: DayLike) -> bool:
        return self.start.date() <= _day(d) <= self.end.date()

    def days(self) -> List[date]:
        first, last = self.start.date(), self.end.date()
        return [first + timedelta(days=i) for i in range((last - first).days + 1)]

    def year_months(self) -> Tuple[str, ...]:
        keys: List[str] = []
        for d in (self.start, self.end):
            ym = d.strftime("%Y-%m")
            if ym not in keys:
                keys.append(ym)
        return tuple(keys)


@dataclass(frozen=True)
class ResolvedText:
    interval: Interval
    consumed: int
    description: str
    details: str


def calendar_day(year: int, month: int, day: int) -> Optional[datetime]:
    """Midnight of year-month-day, rolling month 13 / day 0 over like date arithmetic.

    None when the result falls outside the range datetime can hold (year 0,
    past 9999).
    """
    try:
        return datetime(year, 1, 1) + relativedelta(months=month - 1, days=day - 1)
    except (ValueError, OverflowError):
        return None


def _calendar_day(groups: Tuple[Optional[str], ...]) -> Optional[datetime]:
    year, month, day = (int(g) for g in groups[:3])
    return calendar_day(year, month, day)


def _clock(groups: Tuple[Optional[str], ...]) -> timedelta:
    hour, minute = int(groups[0]), int(groups[1])
    meridiem = (groups[2] or "").lower()
    if meridiem and 1 <= hour <= 12:
        if hour == 12:
            hour = 0
        if meridiem == "pm":
            hour += 12
    return timedelta(hours=hour, minutes=minute)


def resolve_text(text: str) -> Optional[ResolvedText]:
    boundary = own_text_end(text)

    # ---- date phase ----
    first = find_token(text, DATE_TOKEN, 0, boundary)
    if first is None:
        logger.debug("no date token in %r", text[:40])
        return None

    start_day = _calendar_day(first.groups)
    if start_day is None:
        logger.debug("date %r is out of range", text[first.start:first.end].strip())
        return None
    end_day = start_day
    consumed = first.end

    last: Optional[TokenMatch] = find_continuation(text, first.end, DATE_TOKEN, before=TIME_TOKEN, endpos=boundary)
    if last is not None:
        end_day = _calendar_day(last.groups) or start_day
        consumed = max(consumed, last.end)

    start = start_day
    end = end_day + END_OF_DAY
    explicit_time = False

    # ---- time phase ----
    start_time = find_token(text, TIME_TOKEN, first.end, boundary)
    if start_time is not None:
        explicit_time = True
        end_time = find_continuation(
            text, start_time.end, TIME_TOKEN, before=DATE_TOKEN, after=DATE_TOKEN, endpos=boundary,
        )
        offset = _clock(start_time.groups)
        try:
            start = start_day + offset
            end = end_day + (_clock(end_time.groups) if end_time else offset)
        except OverflowError:
            logger.debug("time %r runs past the last representable day", text[start_time.start:start_time.end])
            return None
        consumed = max(consumed, start_time.end, end_time.end if end_time else 0)

    if end < start:
        end = start

    return ResolvedText(
        interval=Interval(start=start, end=end, has_explicit_start_time=explicit_time),
        consumed=consumed,
        description=text[consumed:boundary].strip(),
        details=text[boundary:],
    )


def resolve(text: str) -> Optional[Interval]:
    resolved = resolve_text(text)
    return resolved.interval if resolved else None
