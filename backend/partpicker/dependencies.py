"""FastAPI dependency injection providers."""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from partpicker.config import settings
from partpicker.core.exceptions import UnauthorizedError
from partpicker.db.session import async_session_factory
from partpicker.scrapers.factory import AdapterFactory, get_adapter_factory
from partpicker.services.aggregator import ComponentAggregator
from partpicker.services.build_store import BuildStore, get_build_store
from partpicker.services.cross_site import CrossSiteMatcher
from partpicker.services.persistence_worker import BackgroundPersister
from partpicker.services.price_refresh import PriceRefreshService

_persister: Optional[BackgroundPersister] = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for request-scoped usage.

    The session is automatically committed on success or rolled back on error.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_background_persister() -> BackgroundPersister:
    global _persister
    if _persister is None:
        _persister = BackgroundPersister(async_session_factory)
    return _persister


def get_factory() -> AdapterFactory:
    return get_adapter_factory()


def get_aggregator(
    factory: AdapterFactory = Depends(get_factory),
    persister: BackgroundPersister = Depends(get_background_persister),
) -> ComponentAggregator:
    return ComponentAggregator(
        adapters=factory.create_all(),
        session_factory=async_session_factory,
        persister=persister,
    )


def get_cross_site_matcher(factory: AdapterFactory = Depends(get_factory)) -> CrossSiteMatcher:
    return CrossSiteMatcher(factory.create_all())


def get_builds() -> BuildStore:
    return get_build_store()


def get_price_refresh_service(factory: AdapterFactory = Depends(get_factory)) -> PriceRefreshService:
    return PriceRefreshService(async_session_factory, factory)


def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """Require ``Authorization: Bearer <CRON_SECRET_KEY>``.

    An unset secret rejects every request.
    """
    secret = settings.CRON_SECRET_KEY
    if not secret or authorization != f"Bearer {secret}":
        raise UnauthorizedError()
