"""Search relevance scoring for scraped listings."""

import re
from typing import List, Sequence

from partpicker.scrapers.base import Listing


_TOKEN_RE = re.compile(r"[\w.+#-]+")

EXACT_MATCH = 100
PREFIX_MATCH = 80
WHOLE_WORD_MATCH = 70
SUBSTRING_MATCH = 60
ALL_WORDS_MATCH = 50
ANY_WORD_MATCH = 30
NO_MATCH = 10


def _tokens(text: str) -> List[str]:
    return _TOKEN_RE.findall(text.lower())


def _contains_run(tokens: Sequence[str], run: Sequence[str]) -> bool:
    size = len(run)
    if size == 0 or size > len(tokens):
        return False
    return any(list(tokens[i:i + size]) == list(run) for i in range(len(tokens) - size + 1))


def calculate_search_relevance(name: str, query: str) -> int:
    """Score how well a product name matches a search query.

    Case-insensitive tiers, first match wins:
        100 exact, 80 prefix, 70 whole-word(s), 60 substring,
        50 every query word present, 30 some query word present, 10 otherwise.
    """
    name_l = " ".join((name or "").lower().split())
    query_l = " ".join((query or "").lower().split())
    if not query_l:
        return NO_MATCH

    if name_l == query_l:
        return EXACT_MATCH
    if name_l.startswith(query_l):
        return PREFIX_MATCH

    name_tokens = _tokens(name_l)
    query_tokens = _tokens(query_l)
    if _contains_run(name_tokens, query_tokens):
        return WHOLE_WORD_MATCH
    if query_l in name_l:
        return SUBSTRING_MATCH

    words = query_l.split(" ")
    present = [word for word in words if word in name_l]
    if len(present) == len(words):
        return ALL_WORDS_MATCH
    if present:
        return ANY_WORD_MATCH
    return NO_MATCH


def sort_by_relevance(listings: List[Listing], query: str) -> List[Listing]:
    """Return listings ordered by descending relevance; ties keep their order."""
    return sorted(listings, key=lambda listing: calculate_search_relevance(listing.name, query), reverse=True)
