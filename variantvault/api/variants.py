"""
Variant quantity API endpoints.

Bulk and single-card reads of a user's per-variant quantities, plus
writes that record how many of a variant the user owns.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from variantvault.api.auth import CurrentUserId
from variantvault.api.schemas import ApiModel, MessageResponse
from variantvault.config import settings
from variantvault.db.database import get_session
from variantvault.db.operations import set_variant_quantity
from variantvault.models.failure import BatchTooLargeError, FailureKind, InvalidInputError
from variantvault.models.variants import StoredVariant, UIVariant
from variantvault.services.quantity_resolver import resolve_quantities
from variantvault.services.variant_mapper import parse_ui_variant, to_stored_code

router = APIRouter(prefix="/variants", tags=["variants"])

SINGLE_CARD_ENDPOINT = "/variants/quantities?cardId={cardId}"
BULK_ENDPOINT = "/variants/bulk (POST with cardIds array)"


class BulkQuantitiesRequest(ApiModel):
    """Request model for a bulk quantity lookup."""

    card_ids: list[str] | None = Field(
        default=None,
        description="Card IDs to look up (1 to 100)",
        examples=[["sv1-25", "sv1-26"]],
    )


class BulkQuantitiesResponse(ApiModel):
    """Per-card, per-variant quantities."""

    success: bool = True
    data: dict[str, dict[UIVariant, int]] = Field(default_factory=dict)


class QuantitiesResponse(ApiModel):
    """Response for the query-string lookup: quantities for one card, data for many."""

    success: bool = True
    quantities: dict[UIVariant, int] | None = None
    data: dict[str, dict[UIVariant, int]] | None = None


class VariantQuantityUpdate(ApiModel):
    """Request model for setting one variant quantity."""

    card_id: str = Field(..., description="Card to update")
    variant: str = Field(..., description="UI variant name", examples=["holo"])
    quantity: int = Field(..., description="Copies owned; 0 removes the variant")
    condition: str | None = None
    notes: str | None = None


class BulkVariantQuantityUpdate(ApiModel):
    """Request model for setting several variant quantities at once."""

    updates: list[VariantQuantityUpdate] = Field(default_factory=list)


def _validate_update(update: VariantQuantityUpdate, prefix: str = "") -> StoredVariant:
    """Check one update and return the stored code it writes."""
    if not update.card_id or not update.card_id.strip():
        raise InvalidInputError(
            f"{prefix}cardId is required and must be a string",
            kind=FailureKind.MISSING_REQUIRED,
        )

    ui_variant = parse_ui_variant(update.variant)
    if ui_variant is None:
        raise InvalidInputError(f"{prefix}Invalid variant type")

    if update.quantity < 0:
        raise InvalidInputError(f"{prefix}quantity must be a non-negative number")
    if update.quantity > settings.max_variant_quantity:
        raise InvalidInputError(
            f"{prefix}quantity cannot exceed {settings.max_variant_quantity}"
        )

    stored = to_stored_code(ui_variant)
    if stored is None:
        raise InvalidInputError(
            f"{prefix}Variant '{ui_variant.value}' cannot be recorded as a quantity"
        )
    return stored


@router.post("/bulk", response_model=BulkQuantitiesResponse)
async def get_bulk_quantities(
    user_id: CurrentUserId,
    request: BulkQuantitiesRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BulkQuantitiesResponse:
    """
    Get the user's variant quantities for up to 100 cards.

    Every requested card appears in the result, with zero for variants
    the user does not own. If the collection cannot be read the response
    is still successful, with empty data.
    """
    if request.card_ids is None:
        raise InvalidInputError(
            "cardIds must be a non-empty array", kind=FailureKind.MISSING_REQUIRED
        )

    quantities = await resolve_quantities(session, user_id, request.card_ids)
    return BulkQuantitiesResponse(data=quantities)


@router.api_route(
    "/bulk",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def bulk_method_not_allowed() -> JSONResponse:
    """Point callers at the endpoints that do exist."""
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content={
            "error": (
                "Use POST method for bulk requests or individual GET endpoints for single cards"
            ),
            "endpoints": {
                "single_card": SINGLE_CARD_ENDPOINT,
                "bulk_post": BULK_ENDPOINT,
            },
        },
        headers={"Allow": "POST"},
    )


@router.get(
    "/quantities",
    response_model=QuantitiesResponse,
    response_model_exclude_none=True,
)
async def get_quantities(
    user_id: CurrentUserId,
    session: Annotated[AsyncSession, Depends(get_session)],
    card_id: Annotated[str | None, Query(alias="cardId")] = None,
    card_ids: Annotated[str | None, Query(alias="cardIds")] = None,
) -> QuantitiesResponse:
    """
    Get variant quantities by query string.

    - cardId=X returns `quantities` for that card
    - cardIds=a,b,c returns `data` keyed by card, like the bulk endpoint
    """
    if card_id is None and card_ids is None:
        raise InvalidInputError(
            "cardIds or cardId parameter is required", kind=FailureKind.MISSING_REQUIRED
        )

    if card_id is not None:
        result = await resolve_quantities(session, user_id, [card_id])
        return QuantitiesResponse(quantities=result.get(card_id, {}))

    requested = [c for c in (card_ids or "").split(",") if c.strip()]
    if not requested:
        raise InvalidInputError("No valid card IDs provided")

    result = await resolve_quantities(session, user_id, requested)
    return QuantitiesResponse(data=result)


@router.post("/quantities", response_model=MessageResponse)
async def update_quantity(
    user_id: CurrentUserId,
    request: VariantQuantityUpdate,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MessageResponse:
    """
    Set how many copies of one card variant the user owns.

    A quantity of 0 removes the variant from the collection.
    """
    stored = _validate_update(request)

    await set_variant_quantity(
        session,
        user_id,
        request.card_id,
        stored.value,
        request.quantity,
        condition=request.condition,
        notes=request.notes,
    )

    return MessageResponse(message="Variant quantity updated successfully")


@router.put("/quantities", response_model=MessageResponse)
async def bulk_update_quantities(
    user_id: CurrentUserId,
    request: BulkVariantQuantityUpdate,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MessageResponse:
    """
    Set several variant quantities in one request.

    All updates are validated before any is applied, and they are
    committed together.
    """
    if not request.updates:
        raise InvalidInputError(
            "At least one update is required", kind=FailureKind.MISSING_REQUIRED
        )

    if len(request.updates) > settings.max_bulk_card_ids:
        raise BatchTooLargeError(
            requested=len(request.updates),
            limit=settings.max_bulk_card_ids,
            item_name="updates",
        )

    stored_codes = [
        _validate_update(update, prefix=f"Update {index}: ")
        for index, update in enumerate(request.updates)
    ]

    for update, stored in zip(request.updates, stored_codes, strict=True):
        await set_variant_quantity(
            session,
            user_id,
            update.card_id,
            stored.value,
            update.quantity,
            condition=update.condition,
            notes=update.notes,
        )

    return MessageResponse(
        message=f"Successfully updated {len(request.updates)} variant quantities"
    )
