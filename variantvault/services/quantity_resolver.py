"""
Bulk variant quantity resolution.

Answers "how many of each variant does this user own" for up to
max_bulk_card_ids cards with a single storage round trip, replacing one
request per card per variant.

INVARIANTS:
- Completeness: every requested card ID is a key of the result, with
  every UI variant present (zero when not owned)
- Batch ceiling is enforced before storage is touched
- Unmapped stored variants never appear in the result and never fail it
- FAIL-OPEN: a storage failure is logged and returns an empty map
"""

import logging
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from variantvault.config import settings
from variantvault.db.operations import fetch_variant_rows
from variantvault.models.collection import CollectionRow, QuantityMap
from variantvault.models.failure import BatchTooLargeError, FailureKind, InvalidInputError
from variantvault.services.collection_aggregator import group_holdings
from variantvault.services.variant_mapper import empty_variant_quantities

logger = logging.getLogger(__name__)


def validate_card_batch(card_ids: Iterable[str], max_batch: int | None = None) -> list[str]:
    """
    Validate a requested card ID batch and collapse duplicates.

    Card IDs are opaque: whitespace only matters for spotting blank IDs,
    and each ID is kept exactly as the caller sent it.

    Args:
        card_ids: Card IDs as supplied by the caller
        max_batch: Ceiling on the number of IDs; defaults to settings

    Returns:
        Unique card IDs in first-seen order.

    Raises:
        InvalidInputError: If the batch is empty or contains blank IDs
        BatchTooLargeError: If the batch exceeds the ceiling
    """
    limit = settings.max_bulk_card_ids if max_batch is None else max_batch
    requested = list(card_ids)

    if not requested:
        raise InvalidInputError(
            "cardIds must be a non-empty array", kind=FailureKind.MISSING_REQUIRED
        )

    if len(requested) > limit:
        raise BatchTooLargeError(requested=len(requested), limit=limit)

    unique: dict[str, None] = {}
    for card_id in requested:
        if not isinstance(card_id, str) or not card_id.strip():
            raise InvalidInputError("Card IDs cannot be empty")
        unique[card_id] = None

    return list(unique)


def build_quantity_map(card_ids: Iterable[str], rows: Iterable[CollectionRow]) -> QuantityMap:
    """
    Merge storage rows into a complete quantity map.

    Every card starts with all variants at zero before any row is applied,
    so "not owned" and "not requested" cannot be confused. A row whose
    card was not requested or whose variant has no UI mapping is skipped.
    Cells are filled by group_holdings, the same grouping the collection
    views use, so both read paths agree on every cell.
    """
    result: QuantityMap = {card_id: empty_variant_quantities() for card_id in card_ids}

    scanned = list(rows)
    relevant = [row for row in scanned if row.card_id in result]
    breakdown = group_holdings(relevant)

    for card_id, card in breakdown.cards.items():
        result[card_id].update(card.quantities)

    skipped = len(scanned) - len(relevant) + breakdown.unmapped_rows
    if skipped:
        logger.debug("quantity_rows_skipped", extra={"skipped_rows": skipped})

    return result


async def resolve_quantities(
    session: AsyncSession,
    user_id: str,
    card_ids: Iterable[str],
) -> QuantityMap:
    """
    Resolve per-card, per-variant quantities for a user.

    Validation errors propagate. Storage errors do not: they are logged
    and an empty map is returned, which callers treat as all-zero.
    """
    requested = validate_card_batch(card_ids)

    try:
        rows = await fetch_variant_rows(session, user_id, requested)
    except (SQLAlchemyError, OSError):
        logger.exception(
            "bulk_quantity_lookup_failed",
            extra={"user_id": user_id, "card_count": len(requested)},
        )
        try:
            await session.rollback()
        except (SQLAlchemyError, OSError):
            logger.warning("bulk_quantity_rollback_failed", extra={"user_id": user_id})
        return {}

    return build_quantity_map(requested, rows)
