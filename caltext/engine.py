# engine.py
"""
RecurrenceRule -> occurrences

Depends on:
  - phrases.py (RecurrenceRule, Ordinal, weekday indexes)

Public API:
  - matches(rule, anchor, day) -> bool
  - next_occurrence(rule, anchor, as_of=None) -> date | datetime | None
  - previous_occurrence(rule, anchor, as_of=None) -> date | datetime | None
  - validate(rule, anchor) -> None | raises InvalidRuleError
  - to_rrule(rule, anchor) -> dateutil.rrule.rrule | None
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Union

from dateutil.relativedelta import relativedelta
from dateutil.rrule import (
    rrule,
    DAILY, WEEKLY, MONTHLY,
    MO, TU, WE, TH, FR, SA, SU,
)

from .phrases import Ordinal, RecurrenceRule, weekday_index

logger = logging.getLogger(__name__)

HORIZON_YEARS = 5

ONE_DAY = timedelta(days=1)

# Sunday-based index -> dateutil weekday
IDX_TO_DU = [SU, MO, TU, WE, TH, FR, SA]

DayLike = Union[date, datetime]


class InvalidRuleError(ValueError):
    pass


def _day(d: DayLike) -> date:
    return d.date() if isinstance(d, datetime) else d


def _midnight(d: date) -> datetime:
    return datetime.combine(d, time())


def days_in_month(d: date) -> int:
    return (d + relativedelta(day=31)).day


def _in_months(rule: RecurrenceRule, d: date) -> bool:
    return not rule.months or (d.month - 1) in rule.months


def matches(rule: RecurrenceRule, anchor: DayLike, day: DayLike) -> bool:
    d = _day(day)

    if rule.until is not None and d > rule.until:
        return False

    if rule.step_days:
        delta = (d - _day(anchor)).days
        return delta >= 0 and delta % rule.step_days == 0

    if rule.ordinal is not None:
        if weekday_index(d) not in rule.weekdays or not _in_months(rule, d):
            return False
        if rule.ordinal is Ordinal.LAST:
            return d.day > days_in_month(d) - 7
        return (d.day - 1) // 7 + 1 == rule.ordinal

    if rule.day_of_month is not None:
        return d.day == rule.day_of_month and _in_months(rule, d)

    return weekday_index(d) in rule.weekdays and _in_months(rule, d)


def _shift(d: date, delta: Union[timedelta, relativedelta], limit: date) -> date:
    # saturate at date.min / date.max
    try:
        return d + delta
    except (ValueError, OverflowError):
        return limit


def _daily(first: date, last: date) -> Iterable[date]:
    for dt in rrule(DAILY, dtstart=_midnight(first), until=_midnight(last)):
        yield dt.date()


def _search(
    rule: Optional[RecurrenceRule],
    anchor: DayLike,
    as_of: Optional[DayLike],
    forward: bool,
    horizon_years: int,
) -> Optional[DayLike]:
    if rule is None:
        return None

    ref = as_of if as_of is not None else anchor
    origin = _day(ref)
    first_day = _day(anchor)
    span = relativedelta(years=horizon_years)

    # occurrences never precede the anchor day
    if forward:
        low = max(_shift(origin, ONE_DAY, date.max), first_day)
        high = _shift(origin, span, date.max)
        if high <= origin:
            return None
        candidates = _daily(low, high)
    else:
        low = max(first_day, _shift(origin, -span, date.min))
        high = _shift(origin, -ONE_DAY, date.min)
        if high < low or high >= origin:
            return None
        candidates = reversed(list(_daily(low, high)))

    for d in candidates:
        if matches(rule, anchor, d):
            return ref.replace(year=d.year, month=d.month, day=d.day)

    logger.debug("no %s occurrence within %d years of %s", "next" if forward else "previous", horizon_years, origin)
    return None


def next_occurrence(
    rule: Optional[RecurrenceRule],
    anchor: DayLike,
    as_of: Optional[DayLike] = None,
    horizon_years: int = HORIZON_YEARS,
) -> Optional[DayLike]:
    return _search(rule, anchor, as_of, True, horizon_years)


def previous_occurrence(
    rule: Optional[RecurrenceRule],
    anchor: DayLike,
    as_of: Optional[DayLike] = None,
    horizon_years: int = HORIZON_YEARS,
) -> Optional[DayLike]:
    return _search(rule, anchor, as_of, False, horizon_years)


def validate(rule: Optional[RecurrenceRule], anchor: DayLike, horizon_years: int = HORIZON_YEARS) -> None:
    if rule is None or rule.is_empty:
        raise InvalidRuleError("Recurrence rule is empty")
    if matches(rule, anchor, anchor):
        return
    if next_occurrence(rule, anchor, horizon_years=horizon_years) is None:
        raise InvalidRuleError(f"No occurrence exists within {horizon_years} years of {_day(anchor)}")


def to_rrule(rule: Optional[RecurrenceRule], anchor: DayLike) -> Optional[rrule]:
    """Express the rule as a dateutil rrule starting at the anchor.

    Yields the same days as `matches` from the anchor onwards.
    """
    if rule is None or rule.is_empty:
        return None

    dtstart = anchor if isinstance(anchor, datetime) else _midnight(anchor)
    until = datetime.combine(rule.until, time.max) if rule.until else None
    bymonth = [m + 1 for m in rule.months] or None

    if rule.step_days:
        return rrule(DAILY, interval=rule.step_days, dtstart=dtstart, until=until)

    if rule.ordinal is not None:
        n = int(rule.ordinal)
        return rrule(
            MONTHLY, dtstart=dtstart, until=until, bymonth=bymonth,
            byweekday=[IDX_TO_DU[i](n) for i in rule.weekdays],
        )

    if rule.day_of_month is not None:
        return rrule(MONTHLY, dtstart=dtstart, until=until, bymonth=bymonth, bymonthday=rule.day_of_month)

    if not rule.weekdays:
        return None
    return rrule(
        WEEKLY, dtstart=dtstart, until=until, bymonth=bymonth,
        byweekday=[IDX_TO_DU[i] for i in rule.weekdays],
    )
