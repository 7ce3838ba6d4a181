"""
Error envelope and exception handlers shared by every route.

All failures leave the API as ``{"success": false, "error": ..., "message"?,
"details"?}`` so clients only need to handle one shape.
"""

from __future__ import annotations

import logging
import traceback
from http import HTTPStatus
from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from arq6.core.config import AppSettings

logger = logging.getLogger(__name__)

DEFAULT_VALIDATION_TITLE = "Dados inválidos"
VALIDATION_TITLES = {
    "/api/users/register": "Dados de registro inválidos",
    "/api/users/login": "Dados de login inválidos",
    "/api/analysis/market": "Dados de entrada inválidos",
}

# (field, pydantic error type) -> message; ``None`` as type matches any error.
_FIELD_MESSAGES: Dict[tuple[str, Optional[str]], str] = {
    ("email", "missing"): "Email é obrigatório",
    ("email", None): "Email deve ter um formato válido",
    ("password", "missing"): "Senha é obrigatória",
    ("password", "string_too_short"): "Senha deve ter pelo menos 8 caracteres",
    ("password", "string_too_long"): "Senha deve ter no máximo 128 caracteres",
    ("password", None): (
        "Senha deve conter pelo menos: 1 letra minúscula, 1 maiúscula, "
        "1 número e 1 caractere especial"
    ),
    ("nome", "missing"): "Nome é obrigatório",
    ("nome", "string_too_short"): "Nome deve ter pelo menos 2 caracteres",
    ("nome", "value_error"): "Nome não pode ser vazio",
    ("nome", None): "Nome deve ter no máximo 100 caracteres",
    ("empresa", None): "Empresa deve ter no máximo 100 caracteres",
    ("segmento", "missing"): "Segmento é obrigatório",
    ("segmento", "string_too_short"): "Segmento deve ter pelo menos 2 caracteres",
    ("segmento", "string_too_long"): "Segmento deve ter no máximo 100 caracteres",
    ("segmento", None): "Segmento deve ser um texto",
    ("contexto_adicional", None): "Contexto adicional deve ter no máximo 2000 caracteres",
    ("usuario_id", "missing"): "ID do usuário é obrigatório",
    ("usuario_id", None): "ID do usuário deve ser um UUID válido",
    ("refresh_token", None): "Refresh token é obrigatório",
    ("page", None): "Página deve ser um número maior que 0",
    ("limit", None): "Limite deve ser um número entre 1 e 100",
}


class ApiError(Exception):
    """An error that maps directly onto an HTTP status and envelope."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: Optional[str] = None,
        details: Any = None,
    ) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details


def error_body(
    error: str, message: Optional[str] = None, details: Any = None
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    if details is not None:
        body["details"] = details
    return body


def _field_name(loc: Sequence[Any]) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts)


def _field_message(field: str, error: Dict[str, Any]) -> str:
    error_type = error.get("type")
    if field == "segmento" and error_type == "string_too_short" and not error.get("input"):
        return "Segmento é obrigatório"
    message = _FIELD_MESSAGES.get((field, error_type)) or _FIELD_MESSAGES.get((field, None))
    if message:
        return message
    return str(error.get("msg", "Valor inválido"))


def validation_details(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """One ``{field, message}`` entry per failing field, first error wins."""
    details: List[Dict[str, str]] = []
    seen: set[str] = set()
    for error in errors:
        field = _field_name(error.get("loc", ()))
        if field in seen:
            continue
        seen.add(field)
        details.append({"field": field, "message": _field_message(field, error)})
    return details


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        return JSONResponse(
            status_code=HTTPStatus.BAD_REQUEST,
            content=error_body(
                "JSON inválido", "Verifique a sintaxe do JSON enviado"
            ),
        )
    title = VALIDATION_TITLES.get(request.url.path, DEFAULT_VALIDATION_TITLE)
    return JSONResponse(
        status_code=HTTPStatus.BAD_REQUEST,
        content=error_body(title, details=validation_details(errors)),
    )


async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error, exc.message, exc.details),
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    path = request.url.path
    if exc.status_code == HTTPStatus.NOT_FOUND and path.startswith("/api"):
        content = error_body("Rota não encontrada", f"A rota {path} não existe")
    else:
        content = error_body(str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded on %s (%s)", request.url.path, exc.detail)
    return JSONResponse(
        status_code=HTTPStatus.TOO_MANY_REQUESTS,
        content=error_body(
            "Muitas tentativas. Tente novamente mais tarde.",
            f"Limite de requisições atingido: {exc.detail}",
        ),
    )


def _unexpected_error_handler(settings: AppSettings):
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
        )
        body = error_body("Erro interno do servidor")
        if settings.is_development:
            body["message"] = str(exc)
            body["stack"] = "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )
        else:
            body["message"] = "Algo deu errado"
        return JSONResponse(status_code=HTTPStatus.INTERNAL_SERVER_ERROR, content=body)

    return handle_unexpected_error


def register_exception_handlers(app: FastAPI, settings: AppSettings) -> None:
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RateLimitExceeded, handle_rate_limit)
    app.add_exception_handler(Exception, _unexpected_error_handler(settings))


__all__ = [
    "ApiError",
    "error_body",
    "register_exception_handlers",
    "validation_details",
]
