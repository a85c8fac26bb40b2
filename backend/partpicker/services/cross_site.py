"""Cross-site product matching.

Given a product chosen at one retailer, find the closest offer of the
same product at every other retailer. Retailer names are noisy
("AMD Ryzen 5 5600X Processor (6 Core, 3.7GHz)"), so the search query is
reduced to its model token and candidates are scored on token overlap.
"""

import re
from typing import Dict, List, Optional

import structlog

from partpicker.scrapers.base import BaseRetailerAdapter, Listing
from partpicker.services.aggregator import gather_settled

logger = structlog.get_logger(__name__)


# Words that describe the category rather than the product
STOP_WORDS = frozenset({
    "processor", "cpu", "desktop", "gaming", "graphics", "card", "video",
    "motherboard", "mainboard", "ram", "memory", "ssd", "hdd", "nvme",
    "internal", "solid", "state", "drive", "hard", "disk", "cooler",
    "cooling", "casing", "case", "tower", "power", "supply", "psu",
    "monitor", "display", "edition", "with", "and", "for", "the", "new",
    "box", "tray", "bd", "price",
})

_BRACKETED_RE = re.compile(r"\([^)]*\)|\[[^\]]*\]")
_PUNCT_RE = re.compile(r"[^a-z0-9\s]")
# 16gb, 3200mhz, 650w, 27", 1 tb, 3.7ghz
_UNIT_RE = re.compile(r"\b\d+(?:\.\d+)?\s?(?:gb|tb|mb|mhz|ghz|w|hz|mm|cm|inch\b|\")(?![a-z0-9])")
_UNIT_WORDS = frozenset({"gb", "tb", "mb", "mhz", "ghz", "w", "hz", "inch", "watt", "rgb"})

# Tokens that carry digits but name a memory type, multiplier, revision or bus
# generation rather than a model (gddr6, ddr4, 2x, v2, gen4, pcie4)
_NOISE_TOKEN_RE = re.compile(r"(?:lp)?g?ddr\d[a-z]?|\d{1,2}x|x\d{1,2}|v\d{1,2}|gen\d{1,2}|pcie\d{0,2}|m2")

SCORE_EXACT = 1000
SCORE_MODEL_BONUS = 5


def simplify_name(name: str) -> str:
    """Lowercase ``name`` and strip brackets, punctuation, category words and units."""
    text = _BRACKETED_RE.sub(" ", (name or "").lower())
    text = _UNIT_RE.sub(" ", text)
    text = _PUNCT_RE.sub(" ", text)

    tokens = [t for t in text.split() if t not in STOP_WORDS and t not in _UNIT_WORDS]
    return " ".join(tokens)


def extract_model_token(name: str) -> Optional[str]:
    """Most distinctive token of a product name.

    Candidates are tokens mixing letters and digits (``5600x``, ``b550m``)
    and all-digit tokens of three or more digits (``3060``), minus memory
    types, multipliers and revisions. The token with the most digits wins;
    ties prefer a mixed token, then the longer one, then the earlier one.
    """
    best = None
    best_rank = None
    for token in simplify_name(name).split():
        if _NOISE_TOKEN_RE.fullmatch(token):
            continue
        digits = sum(c.isdigit() for c in token)
        mixed = digits < len(token)
        if digits == 0 or (not mixed and digits < 3):
            continue
        rank = (digits, mixed, len(token))
        if best_rank is None or rank > best_rank:
            best, best_rank = token, rank
    return best


def build_search_query(name: str) -> str:
    model = extract_model_token(name)
    if model:
        return model
    return simplify_name(name) or (name or "").strip()


def score_candidate(simplified_query: str, candidate_name: str, model_token: Optional[str] = None) -> int:
    """Similarity of a candidate name to an already simplified query name."""
    candidate = simplify_name(candidate_name)
    if simplified_query and candidate == simplified_query:
        return SCORE_EXACT

    query_tokens = set(simplified_query.split())
    score = 0
    for token in set(candidate.split()):
        if token in query_tokens:
            score += 1
            if model_token and token == model_token:
                score += SCORE_MODEL_BONUS
    return score


def pick_best_match(name: str, candidates: List[Listing]) -> Optional[Listing]:
    """Best-scoring candidate; ties keep the earliest, all-zero keeps the first."""
    if not candidates:
        return None

    simplified = simplify_name(name)
    model = extract_model_token(name)

    best = candidates[0]
    best_score = score_candidate(simplified, best.name, model)
    for candidate in candidates[1:]:
        score = score_candidate(simplified, candidate.name, model)
        if score > best_score:
            best, best_score = candidate, score
    return best


class CrossSiteMatcher:
    """Looks a product up at every other retailer."""

    def __init__(self, adapters: List[BaseRetailerAdapter]):
        self.adapters = adapters
        self.logger = logger.bind(service="cross_site_matcher")

    async def find_matches(
        self,
        name: str,
        exclude_source: Optional[str] = None,
        limit: int = 10,
    ) -> Dict[str, Optional[Listing]]:
        """Best match per retailer, keyed by retailer display name.

        Every non-excluded retailer gets a key; it maps to None when that
        retailer returned nothing (or failed).
        """
        query = build_search_query(name)
        targets = [a for a in self.adapters if a.retailer_name != exclude_source]

        async def _lookup(adapter: BaseRetailerAdapter) -> Optional[Listing]:
            candidates = await adapter.search_products(query, limit)
            return pick_best_match(name, candidates)

        matches: Dict[str, Optional[Listing]] = {adapter.retailer_name: None for adapter in targets}
        results = await gather_settled(
            (_wrap(adapter.retailer_name, _lookup(adapter)) for adapter in targets),
            labels=[adapter.retailer_slug for adapter in targets],
        )
        for retailer_name, match in results:
            matches[retailer_name] = match

        self.logger.info(
            "cross_site_search",
            name=name,
            query=query,
            exclude_source=exclude_source,
            found=[k for k, v in matches.items() if v is not None],
        )
        return matches


async def _wrap(key: str, coro):
    return key, await coro
