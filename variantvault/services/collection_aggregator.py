"""
Collection aggregation and valuation.

Walks a user's full holdings and produces collection-wide totals under a
chosen pricing source, using one holdings read and one bulk price read,
plus one exchange-rate read when a display currency is requested.

INVARIANTS:
- total_value == sum(card quantity * card unit price), missing price = 0
- A card without a price still counts toward distinct cards and quantity
- Pricing source affects total_value only, never the counts
- Money is Decimal and is not rounded or converted in place here; a
  display-currency conversion is attached alongside the original total
- FAIL-CLOSED: a storage failure raises StorageUnavailableError
"""

import logging
import time
from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from variantvault.db.operations import fetch_exchange_rate, fetch_holdings, fetch_unit_prices
from variantvault.models.collection import (
    CollectionRow,
    CollectionSummary,
    HoldingsBreakdown,
    OwnedCard,
    SummaryMetadata,
)
from variantvault.models.failure import StorageUnavailableError
from variantvault.models.pricing import (
    SOURCE_CURRENCIES,
    ZERO,
    CurrencyCode,
    CurrencyConversion,
    PriceSource,
)
from variantvault.models.variants import UIVariant
from variantvault.services.variant_mapper import to_ui_variant

logger = logging.getLogger(__name__)


def group_holdings(rows: Iterable[CollectionRow]) -> HoldingsBreakdown:
    """
    Group holding rows by card and UI variant.

    Synonym stored codes that land on the same UI variant are summed, since
    each is real on-hand stock. A repeated row for the identical stored code
    replaces the earlier one instead. Rows with an unmapped variant are left
    out, as are variant groups that come to zero.
    """
    breakdown = HoldingsBreakdown()

    # (card_id, UI variant) -> stored code -> quantity
    cells: dict[tuple[str, UIVariant], dict[str, int]] = {}
    for row in rows:
        breakdown.rows_scanned += 1

        ui_variant = to_ui_variant(row.variant)
        if ui_variant is None:
            breakdown.unmapped_rows += 1
            continue

        by_code = cells.setdefault((row.card_id, ui_variant), {})
        if by_code and row.variant not in by_code:
            breakdown.merged_rows += 1
        by_code[row.variant] = max(row.quantity or 0, 0)

    for (card_id, ui_variant), by_code in cells.items():
        quantity = sum(by_code.values())
        if quantity <= 0:
            continue
        card = breakdown.cards.setdefault(card_id, OwnedCard(card_id=card_id))
        card.quantities[ui_variant] = quantity

    return breakdown


def _ordered_quantities(quantities: dict[UIVariant, int]) -> dict[UIVariant, int]:
    return {variant: quantities[variant] for variant in UIVariant if variant in quantities}


async def _load_holdings(session: AsyncSession, user_id: str) -> list[CollectionRow]:
    try:
        return await fetch_holdings(session, user_id)
    except (SQLAlchemyError, OSError) as e:
        logger.exception("holdings_lookup_failed", extra={"user_id": user_id})
        raise StorageUnavailableError("holdings") from e


async def _convert_total(
    session: AsyncSession,
    total_value: Decimal,
    currency: str,
    display_currency: CurrencyCode,
) -> CurrencyConversion | None:
    try:
        rate = await fetch_exchange_rate(session, currency, display_currency.value)
    except (SQLAlchemyError, OSError) as e:
        logger.exception(
            "exchange_rate_lookup_failed",
            extra={"from_currency": currency, "to_currency": display_currency.value},
        )
        raise StorageUnavailableError("exchange_rates") from e

    if rate is None:
        logger.info(
            "exchange_rate_missing",
            extra={"from_currency": currency, "to_currency": display_currency.value},
        )
        return None

    return CurrencyConversion(
        original_value=total_value,
        original_currency=currency,
        currency=display_currency.value,
        rate=rate,
    )


async def list_owned_cards(session: AsyncSession, user_id: str) -> list[OwnedCard]:
    """
    List every card the user owns with its per-variant quantities.

    Cards are ordered by card ID. Raises StorageUnavailableError if the
    holdings cannot be read.
    """
    breakdown = group_holdings(await _load_holdings(session, user_id))
    return [
        OwnedCard(card_id=card.card_id, quantities=_ordered_quantities(card.quantities))
        for card in breakdown.cards.values()
    ]


async def summarize_collection(
    session: AsyncSession,
    user_id: str,
    source: PriceSource,
    display_currency: CurrencyCode | None = None,
) -> CollectionSummary:
    """
    Compute distinct cards, total quantity and total value for a user.

    Args:
        session: Database session
        user_id: Owner of the collection
        source: Pricing source to value the collection against
        display_currency: Currency to also express the total in. Without a
            known rate the total is left in the price currency.

    Returns:
        CollectionSummary with an unrounded Decimal total_value.

    Raises:
        StorageUnavailableError: If holdings, prices or rates cannot be read.
    """
    started = time.perf_counter()

    breakdown = group_holdings(await _load_holdings(session, user_id))

    try:
        quotes = await fetch_unit_prices(session, list(breakdown.cards), source)
    except (SQLAlchemyError, OSError) as e:
        logger.exception(
            "price_lookup_failed",
            extra={"user_id": user_id, "source": source.value},
        )
        raise StorageUnavailableError("prices") from e

    total_value = ZERO
    currencies: set[str] = set()
    for card_id, card in breakdown.cards.items():
        quote = quotes.get(card_id)
        if quote is None:
            continue
        total_value += quote.unit_price * card.total_owned
        currencies.add(quote.currency)

    currency = SOURCE_CURRENCIES[source]
    if len(currencies) == 1:
        currency = currencies.pop()
    elif len(currencies) > 1:
        logger.warning(
            "mixed_price_currencies",
            extra={"source": source.value, "currencies": sorted(currencies)},
        )

    conversion = None
    if display_currency is not None and display_currency.value != currency:
        conversion = await _convert_total(session, total_value, currency, display_currency)

    elapsed_ms = (time.perf_counter() - started) * 1000

    summary = CollectionSummary(
        pricing_source=source,
        currency=currency,
        total_distinct_cards=len(breakdown.cards),
        total_quantity=breakdown.total_quantity,
        total_value=total_value,
        metadata=SummaryMetadata(
            rows_scanned=breakdown.rows_scanned,
            variant_groups=breakdown.variant_groups,
            merged_rows=breakdown.merged_rows,
            unmapped_rows=breakdown.unmapped_rows,
            priced_cards=len(quotes),
            processing_time_ms=round(elapsed_ms, 2),
            fetched_at=datetime.now(UTC),
        ),
        conversion=conversion,
    )

    logger.info(
        "collection_summarized",
        extra={
            "user_id": user_id,
            "source": source.value,
            "distinct_cards": summary.total_distinct_cards,
            "total_quantity": summary.total_quantity,
            "processing_time_ms": summary.metadata.processing_time_ms,
        },
    )

    return summary
