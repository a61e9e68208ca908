from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from variantvault.models.pricing import ZERO, CurrencyConversion, PriceSource
from variantvault.models.variants import UIVariant

# card_id -> UI variant -> quantity
QuantityMap = dict[str, dict[UIVariant, int]]


@dataclass(frozen=True)
class CollectionRow:
    """One collection_items row as read from storage."""

    card_id: str
    variant: str
    quantity: int


@dataclass
class OwnedCard:
    """A card the user owns, with quantities per UI variant."""

    card_id: str
    quantities: dict[UIVariant, int] = field(default_factory=dict)

    @property
    def total_owned(self) -> int:
        """Total copies across all variants."""
        return sum(self.quantities.values())


@dataclass
class HoldingsBreakdown:
    """Holdings grouped by card, plus bookkeeping about the grouping."""

    cards: dict[str, OwnedCard] = field(default_factory=dict)
    rows_scanned: int = 0
    unmapped_rows: int = 0
    merged_rows: int = 0
    """Rows folded into a variant group that already had a row (synonym codes)."""

    @property
    def variant_groups(self) -> int:
        """Number of distinct (card, UI variant) groups."""
        return sum(len(card.quantities) for card in self.cards.values())

    @property
    def total_quantity(self) -> int:
        return sum(card.total_owned for card in self.cards.values())


@dataclass
class SummaryMetadata:
    """Processing details for observability. Not used for correctness."""

    rows_scanned: int = 0
    variant_groups: int = 0
    merged_rows: int = 0
    unmapped_rows: int = 0
    priced_cards: int = 0
    processing_time_ms: float = 0.0
    fetched_at: datetime | None = None


@dataclass
class CollectionSummary:
    """
    Collection-wide totals under one pricing source.

    Computed on demand, never stored. total_value is unrounded and in
    `currency`; round only when presenting it. conversion is set when a
    different display currency was requested and a rate was found.
    """

    pricing_source: PriceSource
    currency: str
    total_distinct_cards: int = 0
    total_quantity: int = 0
    total_value: Decimal = ZERO
    metadata: SummaryMetadata = field(default_factory=SummaryMetadata)
    conversion: CurrencyConversion | None = None
