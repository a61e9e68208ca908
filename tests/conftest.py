from collections.abc import Awaitable, Callable
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from variantvault.db.database import get_session
from variantvault.main import app
from variantvault.models.db import Base, CardPriceDB, CollectionItemDB, ExchangeRateDB

USER_ID = "user-123"
AUTH_HEADERS = {"X-User-Id": USER_ID}

SeedItems = Callable[..., Awaitable[None]]
SeedPrices = Callable[..., Awaitable[None]]
SeedRates = Callable[..., Awaitable[None]]


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed_items(session_factory) -> SeedItems:
    """
    Insert collection rows in a committed, short-lived session.

    Rows are (card_id, variant, quantity) tuples.
    """

    async def _seed(rows: list[tuple[str, str, int]], user_id: str = USER_ID) -> None:
        async with session_factory() as seed_session:
            for card_id, variant, quantity in rows:
                seed_session.add(
                    CollectionItemDB(
                        user_id=user_id,
                        card_id=card_id,
                        variant=variant,
                        quantity=quantity,
                    )
                )
            await seed_session.commit()

    return _seed


@pytest.fixture
def seed_prices(session_factory) -> SeedPrices:
    """
    Insert price rows in a committed, short-lived session.

    Rows are (card_id, source, market, mid) tuples; prices are strings or None.
    """

    async def _seed(
        rows: list[tuple[str, str, str | None, str | None]], currency: str = "EUR"
    ) -> None:
        async with session_factory() as seed_session:
            for card_id, source, market, mid in rows:
                seed_session.add(
                    CardPriceDB(
                        card_id=card_id,
                        source=source,
                        market=Decimal(market) if market is not None else None,
                        mid=Decimal(mid) if mid is not None else None,
                        currency=currency,
                    )
                )
            await seed_session.commit()

    return _seed


@pytest.fixture
def seed_rates(session_factory) -> SeedRates:
    """Insert exchange rates as (from_currency, to_currency, rate) tuples."""

    async def _seed(rows: list[tuple[str, str, str]]) -> None:
        async with session_factory() as seed_session:
            for from_currency, to_currency, rate in rows:
                seed_session.add(
                    ExchangeRateDB(
                        from_currency=from_currency,
                        to_currency=to_currency,
                        rate=Decimal(rate),
                    )
                )
            await seed_session.commit()

    return _seed


@pytest.fixture
async def client(session_factory):
    """Provide an async test client with overridden database session."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    # Unhandled errors are turned into 500 responses by the app; don't re-raise them here
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
