"""Data normalization utilities for prices, availability and component typing."""

import re
from decimal import Decimal, InvalidOperation
from typing import Dict, List, NamedTuple, Optional
from urllib.parse import urljoin


TAKA = "৳"

# Keyword heuristic used to drop off-category hits from free-text search pages
COMPONENT_KEYWORDS: Dict[str, List[str]] = {
    "cpu": ["processor", "cpu", "ryzen", "intel", "core i", "pentium", "celeron", "athlon"],
    "cpu-cooler": ["cooler", "cooling", "heatsink", "fan", "radiator", "aio"],
    "motherboard": ["motherboard", "mainboard", "mobo"],
    "memory": ["ram", "memory", "ddr", "dimm"],
    "storage": ["ssd", "hdd", "solid state", "hard drive", "storage", "nvme", "m.2"],
    "video-card": ["graphics", "gpu", "video card", "geforce", "radeon", "rtx", "gtx"],
    "case": ["case", "casing", "chassis", "tower"],
    "power-supply": ["power supply", "psu", "watt"],
    "monitor": ["monitor", "display", "screen", "inch"],
}

COMPONENT_TYPES: List[str] = list(COMPONENT_KEYWORDS)


_NUMBER_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


class PriceParts(NamedTuple):
    """Discounted and (optional) original price strings, e.g. ("12,500", "13,000")."""

    discounted: str
    original: Optional[str]


class PriceNormalizer:
    """Parsing and formatting of Taka price strings.

    Retailers render prices as free text such as ``"৳ 12,500"``; when a
    discount is running both prices are kept, discounted first:
    ``"৳ 12,500 ৳ 13,000"``.
    """

    @staticmethod
    def collapse_whitespace(text: str) -> str:
        # \s also matches the non-breaking spaces retailers put around the glyph
        return re.sub(r"\s+", " ", text or "").strip()

    @classmethod
    def merge_price_text(cls, current: str, new: str = "", old: str = "") -> str:
        """Combine special/regular price spans into one price string.

        Args:
            current: Full text of the price container
            new: Text of the discounted ("new"/"special") span
            old: Text of the original ("old"/"regular") span

        Returns:
            ``"{new} {old}"`` when both spans exist, else the collapsed container text
        """
        new = cls.collapse_whitespace(new)
        old = cls.collapse_whitespace(old)
        if new and old:
            return f"{new} {old}"
        return cls.collapse_whitespace(current)

    @classmethod
    def split_price(cls, text: str) -> PriceParts:
        """Split a price string into discounted and original parts.

        Handles:
        - "৳ 12,500 ৳ 13,000" -> ("12,500", "13,000")
        - "৳ 9,800" -> ("9,800", None)
        - "12500" -> ("12500", None)

        Args:
            text: Raw price text

        Returns:
            PriceParts; ``discounted`` is empty when no number is found
        """
        normalized = cls.collapse_whitespace(text)
        if not normalized:
            return PriceParts("", None)

        if TAKA in normalized:
            numbers = []
            for chunk in normalized.split(TAKA):
                match = _NUMBER_RE.search(chunk)
                if match:
                    numbers.append(match.group(0).rstrip(","))
        else:
            numbers = [m.rstrip(",") for m in _NUMBER_RE.findall(normalized)]

        if not numbers:
            return PriceParts("", None)
        return PriceParts(numbers[0], numbers[1] if len(numbers) > 1 else None)

    @staticmethod
    def to_decimal(number: Optional[str]) -> Optional[Decimal]:
        if not number:
            return None
        try:
            return Decimal(number.replace(",", ""))
        except InvalidOperation:
            return None

    @classmethod
    def extract_numeric_price(cls, text: str) -> Decimal:
        """Numeric discounted price used for build totals; 0 when unparseable."""
        value = cls.to_decimal(cls.split_price(text).discounted)
        return value if value is not None else Decimal("0")

    @classmethod
    def extract_original_price(cls, text: str) -> Optional[Decimal]:
        return cls.to_decimal(cls.split_price(text).original)

    @staticmethod
    def format_price(amount: Decimal, original: Optional[Decimal] = None) -> str:
        """Render a stored price back into retailer-style text."""
        text = f"{TAKA} {amount:,.0f}"
        if original is not None and original > amount:
            text = f"{text} {TAKA} {original:,.0f}"
        return text

    @classmethod
    def display_price(cls, text: str) -> str:
        """First (discounted) price only, with a single space after the glyph."""
        text = cls.collapse_whitespace(text)
        if text.count(TAKA) > 1:
            parts = cls.split_price(text)
            if parts.discounted:
                return f"{TAKA} {parts.discounted}"
        if text.startswith(TAKA) and not text.startswith(f"{TAKA} "):
            return text.replace(TAKA, f"{TAKA} ", 1)
        return text


class AvailabilityNormalizer:
    """Map retailer stock text onto In Stock / Out of Stock / Unknown."""

    IN_STOCK = "In Stock"
    OUT_OF_STOCK = "Out of Stock"
    UNKNOWN = "Unknown"

    # Checked first: several of these contain a positive phrase ("not available")
    NEGATIVE_PHRASES = ("out of stock", "stock out", "not available", "unavailable", "upcoming")
    POSITIVE_PHRASES = ("in stock", "available", "pre order", "pre-order")

    @classmethod
    def normalize(cls, text: Optional[str]) -> str:
        lowered = PriceNormalizer.collapse_whitespace(text or "").lower()
        if not lowered:
            return cls.UNKNOWN
        if any(phrase in lowered for phrase in cls.NEGATIVE_PHRASES):
            return cls.OUT_OF_STOCK
        if any(phrase in lowered for phrase in cls.POSITIVE_PHRASES):
            return cls.IN_STOCK
        return cls.OUT_OF_STOCK


class ComponentTypeMatcher:
    """Keyword-based check that a product name belongs to a component category."""

    @staticmethod
    def matches(name: str, category: str) -> bool:
        keywords = COMPONENT_KEYWORDS.get(category)
        if not keywords or not name:
            return False
        name_lower = name.lower()
        return any(kw in name_lower for kw in keywords)


class SpecExtractor:
    """Heuristic spec extraction from product names (CPUs only)."""

    CPU_PATTERNS = (
        ("Clock Speed", re.compile(r"(\d+\.\d+)GHz"), 0),
        ("Cores", re.compile(r"(\d+)[ -]Core"), 1),
        ("Threads", re.compile(r"(\d+)[ -]Thread"), 1),
        ("Cache", re.compile(r"(\d+)MB Cache"), 0),
    )

    @classmethod
    def extract(cls, name: str, category: str) -> Dict[str, str]:
        if category != "cpu" or not name:
            return {}
        specs: Dict[str, str] = {}
        for label, pattern, group in cls.CPU_PATTERNS:
            match = pattern.search(name)
            if match:
                specs[label] = match.group(group)
        return specs


def absolute_url(base_url: str, href: Optional[str]) -> str:
    """Resolve a relative or protocol-relative link against the retailer site."""
    if not href:
        return ""
    href = href.strip()
    if href.startswith(("http://", "https://")):
        return href
    return urljoin(base_url, href)
