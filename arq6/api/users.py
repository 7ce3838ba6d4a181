"""
Account routes: registration, login, session refresh and profile upkeep.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from arq6.api.errors import ApiError
from arq6.clients import SupabaseAuthError
from arq6.dependencies import CurrentUser, get_account_service, get_optional_token
from arq6.schemas import (
    ProfileUpdateRequest,
    RefreshTokenRequest,
    UserLoginRequest,
    UserRegistrationRequest,
)
from arq6.services import (
    InvalidCredentialsError,
    ProfileNotFoundError,
    RegistrationRejectedError,
    UserAccountService,
    UserAlreadyExistsError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

AccountService = Annotated[UserAccountService, Depends(get_account_service)]


def _profile_not_found(exc: ProfileNotFoundError) -> ApiError:
    return ApiError(HTTPStatus.NOT_FOUND, "Perfil não encontrado", str(exc))


@router.post("/register", status_code=HTTPStatus.CREATED)
async def register_user(
    payload: UserRegistrationRequest, service: AccountService
) -> dict:
    """Create the identity and its profile row."""
    try:
        user = await service.register(payload)
    except UserAlreadyExistsError as exc:
        raise ApiError(HTTPStatus.BAD_REQUEST, "Usuário já existe", str(exc)) from exc
    except RegistrationRejectedError as exc:
        raise ApiError(HTTPStatus.BAD_REQUEST, "Erro ao criar usuário", str(exc)) from exc

    return {
        "success": True,
        "data": {"user": user.to_public()},
        "message": "Usuário criado com sucesso. Verifique seu email para confirmar a conta.",
    }


@router.post("/login")
async def login_user(payload: UserLoginRequest, service: AccountService) -> dict:
    try:
        result = await service.login(payload)
    except InvalidCredentialsError as exc:
        raise ApiError(
            HTTPStatus.UNAUTHORIZED, "Credenciais inválidas", "Email ou senha incorretos"
        ) from exc
    except ProfileNotFoundError as exc:
        logger.error("Login succeeded but profile lookup failed: %s", exc)
        raise ApiError(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "Erro ao buscar dados do usuário",
            "Tente novamente",
        ) from exc

    return {
        "success": True,
        "data": {
            "user": result.user.to_public(),
            "session": result.session.model_dump(),
        },
        "message": "Login realizado com sucesso",
    }


@router.post("/logout")
async def logout_user(
    service: AccountService,
    token: Annotated[Optional[str], Depends(get_optional_token)],
) -> dict:
    """Revoke the session when a token is supplied; always succeeds otherwise."""
    if token:
        try:
            await service.logout(token)
        except SupabaseAuthError as exc:
            if not exc.is_client_error:
                raise
            logger.info("Logout with an already invalid token: %s", exc.message)
    return {"success": True, "message": "Logout realizado com sucesso"}


@router.get("/profile")
async def get_profile(current_user: CurrentUser, service: AccountService) -> dict:
    try:
        user = await service.get_profile(current_user.id)
    except ProfileNotFoundError as exc:
        raise _profile_not_found(exc) from exc
    return {"success": True, "data": {"user": user.to_public()}}


@router.put("/profile")
async def update_profile(
    payload: ProfileUpdateRequest,
    current_user: CurrentUser,
    service: AccountService,
) -> dict:
    try:
        user = await service.update_profile(current_user.id, payload)
    except ProfileNotFoundError as exc:
        raise _profile_not_found(exc) from exc
    return {
        "success": True,
        "data": {"user": user.to_public()},
        "message": "Perfil atualizado com sucesso",
    }


@router.post("/refresh-token")
async def refresh_token(payload: RefreshTokenRequest, service: AccountService) -> dict:
    try:
        session = await service.refresh(payload.refresh_token)
    except InvalidCredentialsError as exc:
        raise ApiError(
            HTTPStatus.UNAUTHORIZED, "Refresh token inválido", str(exc)
        ) from exc
    return {
        "success": True,
        "data": {"session": session.model_dump()},
        "message": "Token renovado com sucesso",
    }


__all__ = ["router"]
