from variantvault.models.collection import (
    CollectionRow,
    CollectionSummary,
    HoldingsBreakdown,
    OwnedCard,
    QuantityMap,
    SummaryMetadata,
)
from variantvault.models.failure import (
    GENERIC_ERROR_MESSAGE,
    AuthenticationRequiredError,
    BatchTooLargeError,
    FailureKind,
    InvalidInputError,
    KnownError,
    StorageUnavailableError,
)
from variantvault.models.pricing import (
    SOURCE_CURRENCIES,
    CurrencyCode,
    CurrencyConversion,
    PriceQuote,
    PriceSource,
    round_money,
)
from variantvault.models.variants import VARIANT_DISPLAY_NAMES, StoredVariant, UIVariant

__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "SOURCE_CURRENCIES",
    "VARIANT_DISPLAY_NAMES",
    "AuthenticationRequiredError",
    "BatchTooLargeError",
    "CollectionRow",
    "CollectionSummary",
    "CurrencyCode",
    "CurrencyConversion",
    "FailureKind",
    "HoldingsBreakdown",
    "InvalidInputError",
    "KnownError",
    "OwnedCard",
    "PriceQuote",
    "PriceSource",
    "QuantityMap",
    "StorageUnavailableError",
    "StoredVariant",
    "SummaryMetadata",
    "UIVariant",
    "round_money",
]
