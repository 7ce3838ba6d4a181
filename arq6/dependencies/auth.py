"""
Bearer-token authentication backed by the identity provider.

Every protected request forwards its token to ``GET /auth/v1/user``; nothing
is verified or cached locally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Annotated, Optional

from fastapi import Depends, Header

from arq6.api.errors import ApiError
from arq6.clients import SupabaseAuthClient, SupabaseAuthError

from .clients import get_supabase_auth_client

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthenticatedUser:
    id: str
    email: Optional[str]
    access_token: str


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from ``Bearer <token>`` or ``None`` when absent.

    Raises ``ApiError`` when a header is present but malformed.
    """
    if authorization is None or not authorization.strip():
        return None
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise ApiError(HTTPStatus.UNAUTHORIZED, "Token inválido")
    return token


async def get_current_user(
    auth_client: Annotated[SupabaseAuthClient, Depends(get_supabase_auth_client)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> AuthenticatedUser:
    token = extract_bearer_token(authorization)
    if token is None:
        raise ApiError(
            HTTPStatus.UNAUTHORIZED,
            "Token de autorização necessário",
            "Inclua o header Authorization: Bearer <token>",
        )
    try:
        identity = await auth_client.get_user(token)
    except SupabaseAuthError as exc:
        if not exc.is_client_error:
            raise
        logger.info("Rejected bearer token: %s", exc.message)
        raise ApiError(HTTPStatus.UNAUTHORIZED, "Token inválido ou expirado") from exc

    user_id = identity.get("id")
    if not user_id:
        raise ApiError(HTTPStatus.UNAUTHORIZED, "Token inválido ou expirado")
    return AuthenticatedUser(
        id=str(user_id), email=identity.get("email"), access_token=token
    )


async def get_optional_token(
    authorization: Annotated[Optional[str], Header()] = None,
) -> Optional[str]:
    return extract_bearer_token(authorization)


CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]

__all__ = [
    "AuthenticatedUser",
    "CurrentUser",
    "extract_bearer_token",
    "get_current_user",
    "get_optional_token",
]
