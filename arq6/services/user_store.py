"""Persistence helpers for the ``users`` profile table."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from arq6.clients.supabase import SupabaseTableClient
from arq6.models import UserProfile

USERS_TABLE = "users"
PROFILE_COLUMNS = "id,email,nome,empresa,created_at,updated_at"


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class UserStore:
    """Read and write profile rows through PostgREST."""

    def __init__(self, table_client: SupabaseTableClient) -> None:
        self._tables = table_client

    async def find_by_id(self, user_id: str) -> Optional[UserProfile]:
        result = await self._tables.select(
            USERS_TABLE,
            columns=PROFILE_COLUMNS,
            filters=[("id", "eq", user_id)],
            limit=1,
        )
        return UserProfile(**result.rows[0]) if result.rows else None

    async def find_by_email(self, email: str) -> Optional[UserProfile]:
        result = await self._tables.select(
            USERS_TABLE,
            columns=PROFILE_COLUMNS,
            filters=[("email", "eq", email)],
            limit=1,
        )
        return UserProfile(**result.rows[0]) if result.rows else None

    async def create(
        self,
        *,
        user_id: str,
        email: str,
        nome: str,
        empresa: Optional[str] = None,
    ) -> UserProfile:
        row = await self._tables.insert(
            USERS_TABLE,
            {
                "id": user_id,
                "email": email,
                "nome": nome,
                "empresa": empresa or None,
                "created_at": _utcnow_iso(),
            },
        )
        return UserProfile(**row)

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[UserProfile]:
        """Apply ``changes`` and stamp ``updated_at``; ``None`` when no row matched."""
        rows = await self._tables.update(
            USERS_TABLE,
            {**changes, "updated_at": _utcnow_iso()},
            filters=[("id", "eq", user_id)],
        )
        return UserProfile(**rows[0]) if rows else None


__all__ = ["PROFILE_COLUMNS", "USERS_TABLE", "UserStore"]
