from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Union

from . import engine
from .interval import Interval, resolve_text
from .phrases import RecurrenceRule, parse_rule

logger = logging.getLogger(__name__)

DayLike = Union[date, datetime]


def _day(d: DayLike) -> date:
    return d.date() if isinstance(d, datetime) else d


@dataclass(frozen=True)
class CalendarEvent:
    interval: Interval
    description: str = ""
    details: str = ""
    rule: Optional[RecurrenceRule] = None
    source: str = ""

    @property
    def start(self) -> datetime:
        return self.interval.start

    @property
    def end(self) -> datetime:
        return self.interval.end

    def repeats_on(self, day: DayLike) -> bool:
        if self.rule is None or _day(day) < self.start.date():
            return False
        return engine.matches(self.rule, self.start, day)

    def occurs_on(self, day: DayLike) -> bool:
        return self.interval.occurs_on(day) or self.repeats_on(day)

    def next_occurrence(self, as_of: Optional[DayLike] = None) -> Optional[DayLike]:
        return engine.next_occurrence(self.rule, self.start, as_of)

    def previous_occurrence(self, as_of: Optional[DayLike] = None) -> Optional[DayLike]:
        return engine.previous_occurrence(self.rule, self.start, as_of)


def parse_event(text: str, repeat: Optional[str] = None) -> Optional[CalendarEvent]:
    resolved = resolve_text(text)
    if resolved is None:
        return None

    rule = None
    if repeat and repeat.strip():
        rule = parse_rule(repeat, resolved.interval.start)
        if rule.is_empty:
            logger.debug("repeat phrase %r produced an empty rule", repeat)

    return CalendarEvent(
        interval=resolved.interval,
        description=resolved.description,
        details=resolved.details,
        rule=rule,
        source=text,
    )


def events_on(events: Iterable[CalendarEvent], day: DayLike) -> List[CalendarEvent]:
    return sorted((e for e in events if e.occurs_on(day)), key=lambda e: (e.start.time(), e.start))
