"""Scraper utilities for normalization, request headers, pacing and retries."""

from .rate_limiter import DomainRateLimiter, TokenBucket
from .user_agents import USER_AGENTS, build_browser_headers, get_random_user_agent
from .normalizer import (
    TAKA,
    COMPONENT_KEYWORDS,
    COMPONENT_TYPES,
    AvailabilityNormalizer,
    ComponentTypeMatcher,
    PriceNormalizer,
    PriceParts,
    SpecExtractor,
    absolute_url,
)
from .retry import db_retry


__all__ = [
    # Rate limiting
    "DomainRateLimiter",
    "TokenBucket",
    # User agents
    "USER_AGENTS",
    "build_browser_headers",
    "get_random_user_agent",
    # Normalization
    "TAKA",
    "COMPONENT_KEYWORDS",
    "COMPONENT_TYPES",
    "AvailabilityNormalizer",
    "ComponentTypeMatcher",
    "PriceNormalizer",
    "PriceParts",
    "SpecExtractor",
    "absolute_url",
    # Retry decorators
    "db_retry",
]
