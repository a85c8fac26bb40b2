"""Pytest configuration and shared fixtures."""

import os

# Must be set before partpicker.config is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CRON_SECRET_KEY", "test-cron-secret")

from typing import Callable, Dict, Iterable, Optional, Union

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from partpicker.models import Base

TAKA = "৳"

# url -> (status, html), or an exception instance to raise
Route = Union[tuple, Exception]


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


# ============================================================================
# DATABASE
# ============================================================================

@pytest_asyncio.fixture
async def session_factory():
    """In-memory SQLite database shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


# ============================================================================
# UPSTREAM HTML
# ============================================================================

def startech_card(
    name: str,
    href: str,
    price: str = f"{TAKA} 12,500",
    special: Optional[str] = None,
    regular: Optional[str] = None,
    stock: str = "",
    image: str = "/image/cache/catalog/cpu.webp",
) -> str:
    price_inner = price
    if special and regular:
        price_inner = (
            f'<span class="special-price">{special}</span>'
            f'<span class="regular-price">{regular}</span>'
        )
    return f"""
    <div class="p-item">
      <div class="p-item-img"><a href="{href}"><img src="{image}" alt="{name}"></a></div>
      <div class="p-item-details">
        <h4 class="p-item-name"><a href="{href}">{name}</a></h4>
        <div class="p-item-price">{price_inner}</div>
        <div class="p-item-stock">{stock}</div>
      </div>
    </div>
    """


def opencart_card(
    name: str,
    href: str,
    price: str = f"{TAKA} 9,800",
    new: Optional[str] = None,
    old: Optional[str] = None,
    stock: str = "In Stock",
    image: str = "https://cdn.example.com/item.jpg",
) -> str:
    price_inner = price
    if new and old:
        price_inner = f'<span class="price-new">{new}</span> <span class="price-old">{old}</span>'
    return f"""
    <div class="product-layout">
      <div class="image"><a href="{href}"><img data-src="{image}"></a></div>
      <div class="caption">
        <div class="name"><a href="{href}">{name}</a></div>
        <p class="price">{price_inner}</p>
        <div class="stock">{stock}</div>
      </div>
    </div>
    """


def page(cards: Iterable[str]) -> str:
    return "<html><body><div class='main-content'>" + "".join(cards) + "</div></body></html>"


def make_client(routes: Dict[str, Route], default_status: int = 404) -> httpx.AsyncClient:
    """AsyncClient whose responses come from ``routes`` keyed by full URL."""
    calls = []
    routes = {str(httpx.URL(url)): route for url, route in routes.items()}

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        calls.append(url)
        route = routes.get(url)
        if route is None:
            return httpx.Response(default_status, text="not found")
        if isinstance(route, Exception):
            raise route
        status, html = route
        return httpx.Response(status, text=html)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client.calls = calls
    return client


@pytest.fixture
def client_factory() -> Callable[..., httpx.AsyncClient]:
    return make_client
