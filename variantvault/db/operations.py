"""
Database read and write operations.

The read functions each issue exactly one query; callers rely on that to
keep a request at a bounded number of storage round trips.
"""

import logging
from collections.abc import Collection
from decimal import Decimal

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from variantvault.models.collection import CollectionRow
from variantvault.models.db import CardPriceDB, CollectionItemDB, ExchangeRateDB
from variantvault.models.pricing import PriceQuote, PriceSource

logger = logging.getLogger(__name__)

# --- Collection reads ---


async def fetch_variant_rows(
    session: AsyncSession, user_id: str, card_ids: Collection[str]
) -> list[CollectionRow]:
    """
    Get a user's rows for a set of cards in one batched query.

    Rows come back in insertion order so "last seen" is stable across calls.
    """
    result = await session.execute(
        select(CollectionItemDB.card_id, CollectionItemDB.variant, CollectionItemDB.quantity)
        .where(
            CollectionItemDB.user_id == user_id,
            CollectionItemDB.card_id.in_(list(card_ids)),
        )
        .order_by(CollectionItemDB.id)
    )
    return [CollectionRow(card_id=c, variant=v, quantity=q) for c, v, q in result.all()]


async def fetch_holdings(session: AsyncSession, user_id: str) -> list[CollectionRow]:
    """Get every row the user owns at least one copy of."""
    result = await session.execute(
        select(CollectionItemDB.card_id, CollectionItemDB.variant, CollectionItemDB.quantity)
        .where(
            CollectionItemDB.user_id == user_id,
            CollectionItemDB.quantity > 0,
        )
        .order_by(CollectionItemDB.card_id, CollectionItemDB.id)
    )
    return [CollectionRow(card_id=c, variant=v, quantity=q) for c, v, q in result.all()]


# --- Price reads ---


async def fetch_unit_prices(
    session: AsyncSession, card_ids: Collection[str], source: PriceSource
) -> dict[str, PriceQuote]:
    """
    Get unit prices for a set of cards under one source in one query.

    Market price is preferred, mid price is the fallback. Cards with
    neither are left out of the result.
    """
    if not card_ids:
        return {}

    result = await session.execute(
        select(CardPriceDB).where(
            CardPriceDB.card_id.in_(list(card_ids)),
            CardPriceDB.source == source.value,
        )
    )

    quotes: dict[str, PriceQuote] = {}
    for price in result.scalars().all():
        unit_price = price.market if price.market is not None else price.mid
        if unit_price is None:
            continue
        quotes[price.card_id] = PriceQuote(
            card_id=price.card_id,
            unit_price=unit_price,
            currency=price.currency,
        )
    return quotes


async def fetch_exchange_rate(
    session: AsyncSession, from_currency: str, to_currency: str
) -> Decimal | None:
    """
    Get the latest rate converting from_currency into to_currency.

    Reads both directions of the pair in one query. The direct rate is
    preferred; otherwise the inverse of the reverse rate is used. Returns
    None when neither exists.
    """
    if from_currency == to_currency:
        return Decimal(1)

    result = await session.execute(
        select(ExchangeRateDB.from_currency, ExchangeRateDB.rate)
        .where(
            or_(
                and_(
                    ExchangeRateDB.from_currency == from_currency,
                    ExchangeRateDB.to_currency == to_currency,
                ),
                and_(
                    ExchangeRateDB.from_currency == to_currency,
                    ExchangeRateDB.to_currency == from_currency,
                ),
            )
        )
        .order_by(ExchangeRateDB.updated_at.desc(), ExchangeRateDB.id.desc())
    )
    rows = [(source, rate) for source, rate in result.all() if rate is not None and rate > 0]

    for source, rate in rows:
        if source == from_currency:
            return rate
    for _, rate in rows:
        return Decimal(1) / rate
    return None


# --- Collection writes ---


async def get_collection_item(
    session: AsyncSession, user_id: str, card_id: str, variant: str
) -> CollectionItemDB | None:
    """Get one collection row by its unique key."""
    result = await session.execute(
        select(CollectionItemDB).where(
            CollectionItemDB.user_id == user_id,
            CollectionItemDB.card_id == card_id,
            CollectionItemDB.variant == variant,
        )
    )
    return result.scalar_one_or_none()


async def set_variant_quantity(
    session: AsyncSession,
    user_id: str,
    card_id: str,
    variant: str,
    quantity: int,
    condition: str | None = None,
    notes: str | None = None,
) -> CollectionItemDB | None:
    """
    Set how many copies of a card variant a user owns.

    A quantity of zero deletes the row, since zero and absence mean the
    same thing. Otherwise inserts or updates the row and returns it; an
    insert that loses a race on the unique key becomes an update.
    """
    if quantity <= 0:
        await session.execute(
            delete(CollectionItemDB).where(
                CollectionItemDB.user_id == user_id,
                CollectionItemDB.card_id == card_id,
                CollectionItemDB.variant == variant,
            )
        )
        return None

    existing = await get_collection_item(session, user_id, card_id, variant)
    if existing:
        return await _update_item(session, existing, quantity, condition, notes)

    item = CollectionItemDB(
        user_id=user_id,
        card_id=card_id,
        variant=variant,
        quantity=quantity,
        condition=condition,
        notes=notes,
    )
    try:
        async with session.begin_nested():
            session.add(item)
    except IntegrityError:
        # A concurrent request inserted the same key after our lookup
        logger.info(
            "variant_quantity_insert_conflict",
            extra={"user_id": user_id, "card_id": card_id, "variant": variant},
        )
        existing = await get_collection_item(session, user_id, card_id, variant)
        if existing is None:
            raise
        return await _update_item(session, existing, quantity, condition, notes)
    return item


async def _update_item(
    session: AsyncSession,
    item: CollectionItemDB,
    quantity: int,
    condition: str | None,
    notes: str | None,
) -> CollectionItemDB:
    item.quantity = quantity
    if condition is not None:
        item.condition = condition
    if notes is not None:
        item.notes = notes
    await session.flush()
    return item
