"""Thin async clients for the Supabase auth (GoTrue) and PostgREST endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import httpx

from arq6.core.config import SupabaseSettings

logger = logging.getLogger(__name__)

# (column, operator, value), rendered as ``column=operator.value``.
Filter = Tuple[str, str, Any]

_SUPPORTED_OPERATORS = frozenset({"eq", "neq", "gt", "gte", "lt", "lte", "ilike"})


class SupabaseError(RuntimeError):
    """Raised when Supabase rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class SupabaseAuthError(SupabaseError):
    """Raised when the identity provider rejects credentials or tokens."""

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500


@dataclass(slots=True)
class QueryResult:
    """Rows returned by a PostgREST select plus the optional exact count."""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    count: Optional[int] = None


def _error_from_response(
    response: httpx.Response, error_cls: type[SupabaseError] = SupabaseError
) -> SupabaseError:
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}
    message = (
        payload.get("message")
        or payload.get("msg")
        or payload.get("error_description")
        or payload.get("error")
        or response.text
        or f"HTTP {response.status_code}"
    )
    code = payload.get("code") or payload.get("error_code")
    return error_cls(
        str(message),
        status_code=response.status_code,
        code=str(code) if code is not None else None,
    )


def _parse_content_range(header: str | None) -> Optional[int]:
    """Extract the total from a ``Content-Range: 0-9/57`` header."""
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1].strip()
    if not total or total == "*":
        return None
    try:
        return int(total)
    except ValueError:
        return None


def _filter_params(filters: Iterable[Filter]) -> List[Tuple[str, str]]:
    params: List[Tuple[str, str]] = []
    for column, operator, value in filters:
        if operator not in _SUPPORTED_OPERATORS:
            raise ValueError(f"Unsupported filter operator '{operator}'")
        params.append((column, f"{operator}.{value}"))
    return params


class _SupabaseHTTP:
    """Shared request plumbing for the auth and table clients."""

    def __init__(
        self,
        settings: SupabaseSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        *,
        headers: Dict[str, str],
        params: Sequence[Tuple[str, str]] | Dict[str, str] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        url = f"{self._settings.url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                return await client.request(
                    method, url, headers=headers, params=params, json=json
                )
        except httpx.HTTPError as exc:
            logger.error("Supabase %s %s failed: %s", method, path, exc)
            raise SupabaseError(f"Supabase request failed: {exc}") from exc


class SupabaseAuthClient(_SupabaseHTTP):
    """Forward registration, login and token checks to Supabase GoTrue."""

    def _headers(self, bearer: str | None = None) -> Dict[str, str]:
        return {
            "apikey": self._settings.anon_key,
            "Authorization": f"Bearer {bearer or self._settings.anon_key}",
            "Content-Type": "application/json",
        }

    async def _auth_call(
        self,
        method: str,
        path: str,
        *,
        bearer: str | None = None,
        headers: Dict[str, str] | None = None,
        params: Dict[str, str] | None = None,
        json: Any = None,
    ) -> Dict[str, Any]:
        response = await self._request(
            method,
            f"/auth/v1{path}",
            headers=headers or self._headers(bearer),
            params=params,
            json=json,
        )
        if response.is_error:
            raise _error_from_response(response, SupabaseAuthError)
        if not response.content:
            return {}
        return response.json()

    async def sign_up(
        self,
        *,
        email: str,
        password: str,
        metadata: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """Create an identity and return the user record."""
        payload = await self._auth_call(
            "POST",
            "/signup",
            json={"email": email, "password": password, "data": metadata or {}},
        )
        # Auto-confirmed projects answer with a session wrapping the user.
        user = payload.get("user") if isinstance(payload.get("user"), dict) else payload
        if not user.get("id"):
            raise SupabaseAuthError("Sign up response did not include a user id")
        return user

    async def sign_in_with_password(self, *, email: str, password: str) -> Dict[str, Any]:
        """Exchange credentials for a session payload."""
        return await self._auth_call(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )

    async def refresh_session(self, refresh_token: str) -> Dict[str, Any]:
        return await self._auth_call(
            "POST",
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )

    async def get_user(self, access_token: str) -> Dict[str, Any]:
        """Resolve the user behind an access token; raises on rejection."""
        user = await self._auth_call("GET", "/user", bearer=access_token)
        if not user.get("id"):
            raise SupabaseAuthError("Token did not resolve to a user", status_code=401)
        return user

    async def sign_out(self, access_token: str) -> None:
        await self._auth_call("POST", "/logout", bearer=access_token)

    async def admin_delete_user(self, user_id: str) -> None:
        """Remove an identity using the service role key."""
        service_key = self._settings.service_role_key
        if not service_key:
            raise SupabaseAuthError(
                "SUPABASE_SERVICE_ROLE_KEY is required for admin operations."
            )
        await self._auth_call(
            "DELETE",
            f"/admin/users/{user_id}",
            headers={
                "apikey": service_key,
                "Authorization": f"Bearer {service_key}",
            },
        )


class SupabaseTableClient(_SupabaseHTTP):
    """Issue PostgREST queries against Supabase tables."""

    def _headers(self, *, prefer: Iterable[str] = ()) -> Dict[str, str]:
        key = self._settings.service_role_key or self._settings.anon_key
        headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }
        prefer_values = [value for value in prefer if value]
        if prefer_values:
            headers["Prefer"] = ",".join(prefer_values)
        return headers

    async def _table_call(
        self,
        method: str,
        table: str,
        *,
        params: Sequence[Tuple[str, str]] = (),
        prefer: Iterable[str] = (),
        json: Any = None,
        allowed_statuses: Iterable[int] = (),
    ) -> httpx.Response:
        response = await self._request(
            method,
            f"/rest/v1/{table}",
            headers=self._headers(prefer=prefer),
            params=list(params),
            json=json,
        )
        if response.is_error and response.status_code not in allowed_statuses:
            raise _error_from_response(response)
        return response

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Iterable[Filter] = (),
        order_by: str | None = None,
        ascending: bool = False,
        offset: int | None = None,
        limit: int | None = None,
        count: bool = False,
        head: bool = False,
    ) -> QueryResult:
        """Run a filtered select; ``head`` skips the rows and returns the count."""
        params: List[Tuple[str, str]] = [("select", columns)]
        params.extend(_filter_params(filters))
        if order_by:
            params.append(("order", f"{order_by}.{'asc' if ascending else 'desc'}"))
        if offset is not None:
            params.append(("offset", str(offset)))
        if limit is not None:
            params.append(("limit", str(limit)))

        response = await self._table_call(
            "HEAD" if head else "GET",
            table,
            params=params,
            prefer=("count=exact",) if count or head else (),
            allowed_statuses=(HTTPStatus.REQUESTED_RANGE_NOT_SATISFIABLE,) if offset else (),
        )
        total = _parse_content_range(response.headers.get("content-range"))
        if response.status_code == HTTPStatus.REQUESTED_RANGE_NOT_SATISFIABLE:
            # Offset past the last row: PostgREST answers 416 with "*/total".
            return QueryResult(rows=[], count=total)
        rows = [] if head or not response.content else response.json()
        return QueryResult(rows=rows, count=total)

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return its stored representation."""
        response = await self._table_call(
            "POST", table, prefer=("return=representation",), json=row
        )
        rows = response.json()
        if not rows:
            raise SupabaseError(f"Insert into '{table}' returned no rows")
        return rows[0]

    async def update(
        self,
        table: str,
        values: Dict[str, Any],
        *,
        filters: Iterable[Filter],
    ) -> List[Dict[str, Any]]:
        response = await self._table_call(
            "PATCH",
            table,
            params=_filter_params(filters),
            prefer=("return=representation",),
            json=values,
        )
        return response.json() if response.content else []

    async def delete(
        self, table: str, *, filters: Iterable[Filter]
    ) -> List[Dict[str, Any]]:
        """Delete matching rows and return the removed representations."""
        response = await self._table_call(
            "DELETE",
            table,
            params=_filter_params(filters),
            prefer=("return=representation",),
        )
        return response.json() if response.content else []


__all__ = [
    "Filter",
    "QueryResult",
    "SupabaseAuthClient",
    "SupabaseAuthError",
    "SupabaseError",
    "SupabaseTableClient",
]
