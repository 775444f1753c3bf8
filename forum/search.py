"""
Search expression parsing.

The first character of the raw input picks the filter:

- `@name`      questions asked by users whose name contains `name`
- `#tag`       questions carrying a tag whose name contains `tag`
- `:accepted`  questions with (or, for any other word, without) an accepted answer
- `>n`         questions with more than `n` answers
- anything else: free text matched against title and body text

Only the leading character counts; sigils later in the input are plain text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class SearchKind(str, Enum):
    USERNAME = "username"
    TAG = "tag"
    ACCEPTANCE = "acceptance"
    ANSWER_COUNT = "answer_count"
    TEXT = "text"


_SIGILS = {
    "@": SearchKind.USERNAME,
    "#": SearchKind.TAG,
    ":": SearchKind.ACCEPTANCE,
    ">": SearchKind.ANSWER_COUNT,
}

ACCEPTED_KEYWORD = "accepted"

BIGINT_MIN = -(2**63)
BIGINT_MAX = 2**63 - 1

_COUNT_RE = re.compile(r"\s*[+-]?\d+\s*", re.ASCII)


@dataclass(frozen=True)
class SearchFilter:
    kind: SearchKind
    # str for text-like kinds, bool for ACCEPTANCE, int or None for ANSWER_COUNT.
    value: str | bool | int | None

    @property
    def is_substring(self) -> bool:
        return self.kind in (SearchKind.USERNAME, SearchKind.TAG, SearchKind.TEXT)

    @property
    def matches_nothing(self) -> bool:
        """
        An answer-count filter whose operand is not an integer.
        """
        return self.kind is SearchKind.ANSWER_COUNT and self.value is None

    @property
    def pattern(self) -> str | bool | int | None:
        """
        The value as bound to the statement: `%value%` for substring kinds,
        the bare value otherwise.
        """
        if self.is_substring:
            return f"%{self.value}%"
        return self.value


def _parse_count(raw: str) -> int | None:
    # ASCII digits only, and only what fits the bigint answer count.
    if not _COUNT_RE.fullmatch(raw):
        return None
    count = int(raw)
    if not BIGINT_MIN <= count <= BIGINT_MAX:
        return None
    return count


def parse_search(raw: str) -> SearchFilter:
    kind = _SIGILS.get(raw[:1], SearchKind.TEXT)
    if kind is SearchKind.TEXT:
        return SearchFilter(kind, raw)

    rest = raw[1:]
    if kind is SearchKind.ACCEPTANCE:
        return SearchFilter(kind, rest.lower() == ACCEPTED_KEYWORD)
    if kind is SearchKind.ANSWER_COUNT:
        return SearchFilter(kind, _parse_count(rest))
    return SearchFilter(kind, rest)
