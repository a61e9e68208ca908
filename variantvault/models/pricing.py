from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

ZERO = Decimal("0")
CENT = Decimal("0.01")


class PriceSource(str, Enum):
    """Market data origins a collection can be valued against."""

    CARDMARKET = "cardmarket"
    TCGPLAYER = "tcgplayer"


# Currency a source quotes in when no price row says otherwise
SOURCE_CURRENCIES: dict[PriceSource, str] = {
    PriceSource.CARDMARKET: "EUR",
    PriceSource.TCGPLAYER: "USD",
}


@dataclass(frozen=True)
class PriceQuote:
    """Resolved unit price for one card under one source."""

    card_id: str
    unit_price: Decimal
    currency: str


def round_money(amount: Decimal) -> Decimal:
    """Round a monetary amount for presentation (2 places, half up)."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


class CurrencyCode(str, Enum):
    """Currencies a collection value can be presented in."""

    EUR = "EUR"
    USD = "USD"
    GBP = "GBP"
    NOK = "NOK"


@dataclass(frozen=True)
class CurrencyConversion:
    """
    A collection total converted for presentation.

    rate is units of `currency` per one unit of `original_currency`.
    """

    original_value: Decimal
    original_currency: str
    currency: str
    rate: Decimal

    @property
    def converted_value(self) -> Decimal:
        return self.original_value * self.rate
