"""
Authenticated user resolution.

Sign-in happens upstream. The gateway in front of this service forwards
the authenticated user's ID in a header; a request without it is
unauthenticated.
"""

from typing import Annotated

from fastapi import Depends, Request

from variantvault.config import settings
from variantvault.models.failure import AuthenticationRequiredError


async def get_current_user_id(request: Request) -> str:
    """
    Dependency that returns the authenticated user's ID.

    Raises:
        AuthenticationRequiredError: If the identity header is missing or blank.
    """
    user_id = request.headers.get(settings.user_id_header, "").strip()
    if not user_id:
        raise AuthenticationRequiredError()
    return user_id


CurrentUserId = Annotated[str, Depends(get_current_user_id)]
