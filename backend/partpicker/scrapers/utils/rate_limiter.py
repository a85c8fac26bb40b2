"""Per-host request pacing for long sequential sweeps."""

import asyncio
import time
from typing import Dict, Optional


class TokenBucket:
    """Starts full, refills at ``rate`` tokens per second up to ``capacity``."""

    def __init__(self, rate: float, capacity: float):
        self.rate = rate
        self.capacity = capacity
        self.tokens = capacity
        self.updated_at = time.monotonic()
        self._lock = asyncio.Lock()

    def _top_up(self) -> None:
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self.updated_at) * self.rate)
        self.updated_at = now

    async def acquire(self, tokens: float = 1.0) -> None:
        async with self._lock:
            self._top_up()
            while self.tokens < tokens:
                await asyncio.sleep((tokens - self.tokens) / self.rate)
                self._top_up()
            self.tokens -= tokens


class DomainRateLimiter:
    """One token bucket per host.

    The price refresh walks stored product pages one by one; each retailer
    host gets ``rpm`` requests per minute with a small burst allowance.
    """

    DEFAULT_RPM = 20

    def __init__(self, default_rpm: int = DEFAULT_RPM, host_rpm: Optional[Dict[str, int]] = None):
        self.default_rpm = default_rpm
        self.host_rpm = {host.lower(): rpm for host, rpm in (host_rpm or {}).items()}
        self._buckets: Dict[str, TokenBucket] = {}

    def rpm_for(self, host: str) -> int:
        return self.host_rpm.get(host.lower(), self.default_rpm)

    async def acquire(self, domain: str, tokens: float = 1.0) -> None:
        host = domain.lower()
        bucket = self._buckets.get(host)
        if bucket is None:
            rpm = self.rpm_for(host)
            bucket = TokenBucket(rate=rpm / 60.0, capacity=max(2.0, rpm / 10.0))
            self._buckets[host] = bucket
        await bucket.acquire(tokens)
