# scanner.py
"""
Text -> token spans

Public API:
  - find_token(text, token, pos=0, endpos=None) -> TokenMatch | None
  - find_continuation(text, pos, token, before=None, after=None, endpos=None) -> TokenMatch | None
  - own_text_end(text) -> int

Notes:
- Lookups never cross into a nested block element (<details>, <div>, ...).
- A continuation is "to"/"until" + a token of the same kind, directly adjacent.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

logger = logging.getLogger(__name__)

DATE_TOKEN = re.compile(r"(?<!\d)(\d{4})-(\d{2})-(\d{2})(?!\d)")
TIME_TOKEN = re.compile(r"(?<![\d:])(\d{1,2}):(\d{2})(?!\d)(?:\s*([AaPp][Mm])(?![A-Za-z]))?")

CONTINUATION_KEYWORDS = ("to", "until")
NESTED_BLOCK_TAGS = (
    "details", "div", "p", "ul", "ol", "dl", "table",
    "section", "blockquote", "pre", "figure",
)

_KEYWORD_RE = re.compile(r"(?:%s)(?![\w-])" % "|".join(CONTINUATION_KEYWORDS))
_NESTED_RE = re.compile(r"<(?:%s)(?=[\s/>])" % "|".join(NESTED_BLOCK_TAGS), re.I)
_WS_RE = re.compile(r"\s*")


@dataclass(frozen=True)
class TokenMatch:
    groups: Tuple[Optional[str], ...]
    start: int
    end: int  # past the token and its trailing whitespace


def own_text_end(text: str) -> int:
    m = _NESTED_RE.search(text)
    return m.start() if m else len(text)


def _skip_ws(text: str, pos: int, endpos: int) -> int:
    return _WS_RE.match(text, pos, endpos).end()


def _token_match(m: "re.Match[str]", text: str, endpos: int) -> TokenMatch:
    return TokenMatch(groups=m.groups(), start=m.start(), end=_skip_ws(text, m.end(), endpos))


def find_token(
    text: str,
    token: Pattern[str],
    pos: int = 0,
    endpos: Optional[int] = None,
) -> Optional[TokenMatch]:
    if endpos is None:
        endpos = own_text_end(text)
    m = token.search(text, pos, endpos)
    if not m:
        return None
    return _token_match(m, text, endpos)


def find_continuation(
    text: str,
    pos: int,
    token: Pattern[str],
    before: Optional[Pattern[str]] = None,
    after: Optional[Pattern[str]] = None,
    endpos: Optional[int] = None,
) -> Optional[TokenMatch]:
    """Match "to <token>" / "until <token>" starting right at `pos`.

    Leading whitespace is trimmed; anything else before the keyword rejects
    the continuation. `before` is a token of the other kind allowed directly
    before the keyword ("1:01 to 2025-01-06"), `after` one allowed between
    the keyword and the token ("8:30 AM to 2025-01-03 5:00 PM").
    """
    if endpos is None:
        endpos = own_text_end(text)

    cur = _skip_ws(text, pos, endpos)
    if before is not None:
        b = before.match(text, cur, endpos)
        if b:
            cur = _skip_ws(text, b.end(), endpos)

    kw = _KEYWORD_RE.match(text, cur, endpos)
    if not kw:
        return None
    cur = _skip_ws(text, kw.end(), endpos)
    if cur == kw.end():
        return None  # keyword must be followed by whitespace

    m = token.match(text, cur, endpos)
    if not m and after is not None:
        b = after.match(text, cur, endpos)
        if b:
            m = token.match(text, _skip_ws(text, b.end(), endpos), endpos)
    if not m:
        logger.debug("continuation keyword at %d not followed by a token", kw.start())
        return None
    return _token_match(m, text, endpos)
