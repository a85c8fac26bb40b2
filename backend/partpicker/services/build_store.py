"""Short-link storage for shared PC builds.

Builds live in process memory only and expire after ``BUILD_EXPIRY_DAYS``.
"""

import base64
import copy
import secrets
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import structlog

from partpicker.config import settings
from partpicker.core.exceptions import BuildNotFoundError

logger = structlog.get_logger(__name__)

BUILD_ID_BYTES = 6


def generate_build_id() -> str:
    """6 random bytes as unpadded URL-safe base64 (8 characters)."""
    return base64.urlsafe_b64encode(secrets.token_bytes(BUILD_ID_BYTES)).rstrip(b"=").decode("ascii")


@dataclass
class _StoredBuild:
    payload: Any
    saved_at: float


class BuildStore:
    """In-memory map of build id -> payload with time-based expiry."""

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        expiry_seconds: Optional[float] = None,
    ):
        self.clock = clock
        self.expiry_seconds = (
            expiry_seconds if expiry_seconds is not None else settings.BUILD_EXPIRY_DAYS * 24 * 60 * 60
        )
        self._builds: Dict[str, _StoredBuild] = {}
        self.logger = logger.bind(service="build_store")

    def __len__(self) -> int:
        return len(self._builds)

    def save(self, payload: Any) -> str:
        build_id = generate_build_id()
        while build_id in self._builds:
            build_id = generate_build_id()

        self._builds[build_id] = _StoredBuild(payload=copy.deepcopy(payload), saved_at=self.clock())
        self.logger.info("build_saved", build_id=build_id)
        return build_id

    def get(self, build_id: str) -> Any:
        """Return a copy of the stored payload.

        Raises:
            BuildNotFoundError: unknown or expired id
        """
        stored = self._builds.get(build_id or "")
        if stored is None or self._is_expired(stored):
            raise BuildNotFoundError(build_id)
        return copy.deepcopy(stored.payload)

    def sweep(self) -> int:
        """Drop expired builds; returns how many were removed."""
        expired = [build_id for build_id, stored in self._builds.items() if self._is_expired(stored)]
        for build_id in expired:
            del self._builds[build_id]

        self.logger.info("builds_swept", removed=len(expired), remaining=len(self._builds))
        return len(expired)

    def _is_expired(self, stored: _StoredBuild) -> bool:
        return self.clock() - stored.saved_at > self.expiry_seconds


_build_store: Optional[BuildStore] = None


def get_build_store() -> BuildStore:
    global _build_store
    if _build_store is None:
        _build_store = BuildStore()
    return _build_store
