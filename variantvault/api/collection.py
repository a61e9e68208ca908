"""
Collection API endpoints.

Collection-wide statistics and valuation for the authenticated user.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from variantvault.api.auth import CurrentUserId
from variantvault.api.schemas import ApiModel
from variantvault.config import settings
from variantvault.db.database import get_session
from variantvault.models.collection import CollectionSummary
from variantvault.models.failure import InvalidInputError
from variantvault.models.pricing import CurrencyCode, PriceSource, round_money
from variantvault.models.variants import UIVariant
from variantvault.services.collection_aggregator import list_owned_cards, summarize_collection

router = APIRouter(prefix="/collection", tags=["collection"])


class SummaryMetadataModel(ApiModel):
    """Processing details, for debugging only."""

    rows_scanned: int = 0
    variant_groups: int = 0
    merged_rows: int = 0
    unmapped_rows: int = 0
    priced_cards: int = 0
    processing_time_ms: float = 0.0
    fetched_at: datetime | None = None


class CollectionValueData(ApiModel):
    """Collection totals under one pricing source."""

    total_distinct_cards: int = 0
    total_quantity: int = 0
    total_value: Decimal = Field(
        default=Decimal("0.00"),
        description="Total market value, rounded to 2 decimal places",
    )
    currency: str
    pricing_source: PriceSource
    metadata: SummaryMetadataModel = Field(default_factory=SummaryMetadataModel)
    # Present only when the total was converted into a requested currency
    original_value: Decimal | None = None
    original_currency: str | None = None
    conversion_rate: Decimal | None = None


class CollectionValueResponse(ApiModel):
    """Response model for the collection value endpoint."""

    success: bool = True
    data: CollectionValueData


class OwnedCardModel(ApiModel):
    """One owned card with quantities per variant."""

    card_id: str
    quantities: dict[UIVariant, int] = Field(default_factory=dict)
    total_owned: int = 0


class OwnedCardsData(ApiModel):
    cards: list[OwnedCardModel] = Field(default_factory=list)
    total_cards: int = 0
    total_quantity: int = 0


class OwnedCardsResponse(ApiModel):
    """Response model for the owned cards endpoint."""

    success: bool = True
    data: OwnedCardsData


def parse_price_source(value: str | None) -> PriceSource:
    """
    Resolve the requested pricing source, falling back to the configured default.

    Raises:
        InvalidInputError: If the value is not a known pricing source.
    """
    raw = value if value is not None and value.strip() else settings.default_price_source
    try:
        return PriceSource(raw.strip().lower())
    except ValueError as e:
        options = ", ".join(source.value for source in PriceSource)
        raise InvalidInputError(
            f"Unknown pricing source '{raw}'. Use one of: {options}"
        ) from e


def parse_display_currency(value: str | None) -> CurrencyCode | None:
    """
    Resolve the requested display currency, if any.

    Raises:
        InvalidInputError: If the value is not a supported currency.
    """
    if value is None or not value.strip():
        return None
    try:
        return CurrencyCode(value.strip().upper())
    except ValueError as e:
        options = ", ".join(code.value for code in CurrencyCode)
        raise InvalidInputError(f"Unsupported currency '{value}'. Use one of: {options}") from e


def _summary_to_data(summary: CollectionSummary) -> CollectionValueData:
    meta = summary.metadata
    conversion = summary.conversion

    data = CollectionValueData(
        total_distinct_cards=summary.total_distinct_cards,
        total_quantity=summary.total_quantity,
        total_value=round_money(summary.total_value),
        currency=summary.currency,
        pricing_source=summary.pricing_source,
        metadata=SummaryMetadataModel(
            rows_scanned=meta.rows_scanned,
            variant_groups=meta.variant_groups,
            merged_rows=meta.merged_rows,
            unmapped_rows=meta.unmapped_rows,
            priced_cards=meta.priced_cards,
            processing_time_ms=meta.processing_time_ms,
            fetched_at=meta.fetched_at,
        ),
    )

    if conversion is not None:
        data.total_value = round_money(conversion.converted_value)
        data.currency = conversion.currency
        data.original_value = round_money(conversion.original_value)
        data.original_currency = conversion.original_currency
        data.conversion_rate = conversion.rate

    return data


@router.get(
    "/value",
    response_model=CollectionValueResponse,
    response_model_exclude_none=True,
)
async def get_collection_value(
    user_id: CurrentUserId,
    session: Annotated[AsyncSession, Depends(get_session)],
    source: Annotated[str | None, Query(description="cardmarket or tcgplayer")] = None,
    currency: Annotated[str | None, Query(description="EUR, USD, GBP or NOK")] = None,
) -> CollectionValueResponse:
    """
    Get distinct card count, total copies and total value of the collection.

    Cards without a price under the chosen source count toward the card
    and copy totals but add nothing to the value. If the collection or
    prices cannot be read the request fails rather than returning a
    partial value.

    With `currency`, the total is converted using the latest exchange rate
    and the unconverted total is reported alongside it. When no rate is
    known the total stays in the price currency.
    """
    price_source = parse_price_source(source)
    display_currency = parse_display_currency(currency)
    summary = await summarize_collection(session, user_id, price_source, display_currency)
    return CollectionValueResponse(data=_summary_to_data(summary))


@router.get("/cards", response_model=OwnedCardsResponse)
async def get_owned_cards(
    user_id: CurrentUserId,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> OwnedCardsResponse:
    """List every owned card with its quantities per variant."""
    owned = await list_owned_cards(session, user_id)

    cards = [
        OwnedCardModel(
            card_id=card.card_id,
            quantities=card.quantities,
            total_owned=card.total_owned,
        )
        for card in owned
    ]

    return OwnedCardsResponse(
        data=OwnedCardsData(
            cards=cards,
            total_cards=len(cards),
            total_quantity=sum(card.total_owned for card in cards),
        )
    )
