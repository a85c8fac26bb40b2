"""Background persistence of scraped listings.

Requests return scraped listings immediately; writing them to the
database happens in tracked asyncio tasks whose failures are logged and
never reach the caller.
"""

import asyncio
from typing import Callable, List, Optional, Set

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from partpicker.scrapers.base import Listing
from partpicker.scrapers.utils.retry import db_retry
from partpicker.services.listing_repository import ListingRepository

logger = structlog.get_logger(__name__)


class BackgroundPersister:
    """Schedules listing writes off the request path."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository_class: Callable[[AsyncSession], ListingRepository] = ListingRepository,
    ):
        self.session_factory = session_factory
        self.repository_class = repository_class
        self._tasks: Set[asyncio.Task] = set()
        self.logger = logger.bind(service="background_persister")

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, category: str, listings: List[Listing]) -> Optional[asyncio.Task]:
        """Schedule ``listings`` for storage and return the task handle.

        Returns None when there is nothing to store.
        """
        if not listings:
            return None

        task = asyncio.create_task(self._persist(category, list(listings)))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self.logger.debug("persist_scheduled", category=category, count=len(listings))
        return task

    async def drain(self) -> None:
        """Wait for every outstanding write (shutdown, tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _persist(self, category: str, listings: List[Listing]) -> int:
        try:
            saved = await self._write(category, listings)
        except Exception as e:
            self.logger.error(
                "persist_failed",
                category=category,
                count=len(listings),
                error=str(e),
                exc_info=True,
            )
            return 0

        self.logger.info("persist_completed", category=category, saved=saved)
        return saved

    @db_retry
    async def _write(self, category: str, listings: List[Listing]) -> int:
        async with self.session_factory() as db:
            try:
                return await self.repository_class(db).save_listings(category, listings)
            except Exception:
                await db.rollback()
                raise
