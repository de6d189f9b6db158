from .engine import InvalidRuleError, matches, next_occurrence, previous_occurrence, to_rrule, validate
from .interval import Interval, ResolvedText, resolve, resolve_text
from .parser import CalendarEvent, events_on, parse_event
from .phrases import Ordinal, RecurrenceRule, parse_rule

__all__ = [
    "CalendarEvent",
    "InvalidRuleError",
    "Interval",
    "Ordinal",
    "RecurrenceRule",
    "ResolvedText",
    "events_on",
    "matches",
    "next_occurrence",
    "parse_event",
    "parse_rule",
    "previous_occurrence",
    "resolve",
    "resolve_text",
    "to_rrule",
    "validate",
]
