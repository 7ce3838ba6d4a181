"""Service coordinating the identity provider with the profile table."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from arq6.clients.supabase import SupabaseAuthClient, SupabaseAuthError, SupabaseError
from arq6.models import UserProfile
from arq6.schemas import (
    ProfileUpdateRequest,
    SessionTokens,
    UserLoginRequest,
    UserRegistrationRequest,
)
from arq6.services.user_store import UserStore

logger = logging.getLogger(__name__)


class AccountError(RuntimeError):
    """Base class for account workflow failures surfaced to clients."""


class UserAlreadyExistsError(AccountError):
    """Raised when registering an email that already has a profile."""


class RegistrationRejectedError(AccountError):
    """Raised when the identity provider refuses to create the account."""


class InvalidCredentialsError(AccountError):
    """Raised when login or token refresh is rejected."""


class ProfileNotFoundError(AccountError):
    """Raised when an authenticated identity has no profile row."""


@dataclass(slots=True)
class LoginResult:
    user: UserProfile
    session: SessionTokens


def session_from_payload(payload: Dict[str, Any]) -> SessionTokens:
    """Normalize a GoTrue token response into ``SessionTokens``."""
    access_token = payload.get("access_token")
    if not access_token:
        raise InvalidCredentialsError("Token response did not include an access token")
    expires_at = payload.get("expires_at")
    if expires_at is None and payload.get("expires_in") is not None:
        expires_at = int(time.time()) + int(payload["expires_in"])
    return SessionTokens(
        access_token=access_token,
        refresh_token=payload.get("refresh_token"),
        expires_at=expires_at,
    )


class UserAccountService:
    """Register, authenticate and maintain user profiles."""

    def __init__(self, *, auth_client: SupabaseAuthClient, user_store: UserStore) -> None:
        self._auth = auth_client
        self._users = user_store

    async def register(self, request: UserRegistrationRequest) -> UserProfile:
        existing = await self._users.find_by_email(request.email)
        if existing is not None:
            raise UserAlreadyExistsError("Este email já está cadastrado")

        try:
            identity = await self._auth.sign_up(
                email=request.email,
                password=request.password,
                metadata={"nome": request.nome, "empresa": request.empresa},
            )
        except SupabaseAuthError as exc:
            logger.warning("Identity provider rejected registration: %s", exc.message)
            raise RegistrationRejectedError(exc.message) from exc

        user_id = str(identity["id"])
        try:
            return await self._users.create(
                user_id=user_id,
                email=request.email,
                nome=request.nome,
                empresa=request.empresa,
            )
        except SupabaseError:
            logger.exception("Failed to store profile for new user %s", user_id)
            await self._rollback_identity(user_id)
            raise

    async def login(self, request: UserLoginRequest) -> LoginResult:
        try:
            payload = await self._auth.sign_in_with_password(
                email=request.email, password=request.password
            )
        except SupabaseAuthError as exc:
            if not exc.is_client_error:
                raise
            raise InvalidCredentialsError("Email ou senha incorretos") from exc

        session = session_from_payload(payload)
        identity = payload.get("user") or {}
        user_id = identity.get("id")
        if not user_id:
            identity = await self._auth.get_user(session.access_token)
            user_id = identity["id"]

        profile = await self._users.find_by_id(str(user_id))
        if profile is None:
            raise ProfileNotFoundError(f"Profile for user {user_id} not found")
        return LoginResult(user=profile, session=session)

    async def logout(self, access_token: str) -> None:
        await self._auth.sign_out(access_token)

    async def refresh(self, refresh_token: str) -> SessionTokens:
        try:
            payload = await self._auth.refresh_session(refresh_token)
        except SupabaseAuthError as exc:
            if not exc.is_client_error:
                raise
            raise InvalidCredentialsError(exc.message) from exc
        return session_from_payload(payload)

    async def get_profile(self, user_id: str) -> UserProfile:
        profile = await self._users.find_by_id(user_id)
        if profile is None:
            raise ProfileNotFoundError(f"Profile for user {user_id} not found")
        return profile

    async def update_profile(
        self, user_id: str, request: ProfileUpdateRequest
    ) -> UserProfile:
        changes = request.model_dump(exclude_unset=True)
        if not changes:
            return await self.get_profile(user_id)
        profile = await self._users.update(user_id, changes)
        if profile is None:
            raise ProfileNotFoundError(f"Profile for user {user_id} not found")
        return profile

    async def _rollback_identity(self, user_id: str) -> None:
        try:
            await self._auth.admin_delete_user(user_id)
        except SupabaseError as exc:
            logger.error("Could not roll back identity %s: %s", user_id, exc.message)


__all__ = [
    "AccountError",
    "InvalidCredentialsError",
    "LoginResult",
    "ProfileNotFoundError",
    "RegistrationRejectedError",
    "UserAccountService",
    "UserAlreadyExistsError",
    "session_from_payload",
]
