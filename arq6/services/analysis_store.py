"""Persistence helpers for the ``analyses`` table."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from arq6.clients.supabase import Filter, QueryResult, SupabaseTableClient
from arq6.models import AnalysisRecord
from arq6.schemas import Pagination

ANALYSES_TABLE = "analyses"
LIST_COLUMNS = "id,segmento,contexto_adicional,created_at,metadata"
TOP_SEGMENTS_LIMIT = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def start_of_month(moment: datetime) -> datetime:
    """Midnight UTC on the first day of ``moment``'s month."""
    moment = moment.astimezone(timezone.utc)
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class AnalysisStore:
    """Owner-scoped reads and writes of stored analyses.

    Every lookup filters on ``user_id`` so a caller never sees or removes
    another user's rows.
    """

    def __init__(self, table_client: SupabaseTableClient) -> None:
        self._tables = table_client

    async def create(
        self,
        *,
        user_id: str,
        segmento: str,
        resultado: str,
        contexto_adicional: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AnalysisRecord:
        row = await self._tables.insert(
            ANALYSES_TABLE,
            {
                "user_id": user_id,
                "segmento": segmento,
                "contexto_adicional": contexto_adicional or None,
                "resultado": resultado,
                "metadata": metadata or {},
                "created_at": _utcnow().isoformat(),
            },
        )
        return AnalysisRecord(**row)

    async def find_for_user(
        self, analysis_id: str, user_id: str
    ) -> Optional[AnalysisRecord]:
        result = await self._tables.select(
            ANALYSES_TABLE,
            filters=[("id", "eq", analysis_id), ("user_id", "eq", user_id)],
            limit=1,
        )
        return AnalysisRecord(**result.rows[0]) if result.rows else None

    async def list_for_user(
        self, user_id: str, *, page: int = 1, limit: int = 10
    ) -> Tuple[List[AnalysisRecord], Pagination]:
        """Newest-first page of the user's analyses without the result text."""
        return await self._paginate([("user_id", "eq", user_id)], page=page, limit=limit)

    async def search_by_segment(
        self, user_id: str, term: str, *, page: int = 1, limit: int = 10
    ) -> Tuple[List[AnalysisRecord], Pagination]:
        """Case-insensitive substring match on ``segmento``."""
        return await self._paginate(
            [("user_id", "eq", user_id), ("segmento", "ilike", f"*{term}*")],
            page=page,
            limit=limit,
        )

    async def delete_for_user(self, analysis_id: str, user_id: str) -> bool:
        """Delete one owned analysis; ``False`` when nothing matched."""
        removed = await self._tables.delete(
            ANALYSES_TABLE,
            filters=[("id", "eq", analysis_id), ("user_id", "eq", user_id)],
        )
        return bool(removed)

    async def stats_for_user(
        self, user_id: str, *, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        owner: List[Filter] = [("user_id", "eq", user_id)]
        total = await self._tables.select(ANALYSES_TABLE, filters=owner, head=True)
        month_start = start_of_month(now or _utcnow())
        this_month = await self._tables.select(
            ANALYSES_TABLE,
            filters=[*owner, ("created_at", "gte", month_start.isoformat())],
            head=True,
        )
        segments = await self._tables.select(
            ANALYSES_TABLE, columns="segmento", filters=owner
        )
        counts = Counter(row.get("segmento") for row in segments.rows)
        return {
            "totalAnalyses": total.count or 0,
            "thisMonth": this_month.count or 0,
            "topSegments": [
                {"segmento": segmento, "count": count}
                for segmento, count in counts.most_common(TOP_SEGMENTS_LIMIT)
            ],
        }

    async def _paginate(
        self, filters: List[Filter], *, page: int, limit: int
    ) -> Tuple[List[AnalysisRecord], Pagination]:
        window = Pagination(page=page, limit=limit, total=0)
        result: QueryResult = await self._tables.select(
            ANALYSES_TABLE,
            columns=LIST_COLUMNS,
            filters=filters,
            order_by="created_at",
            ascending=False,
            offset=window.offset,
            limit=limit,
            count=True,
        )
        rows = result.rows[:limit]
        total = result.count if result.count is not None else window.offset + len(rows)
        records = [AnalysisRecord(**row) for row in rows]
        return records, Pagination(page=page, limit=limit, total=total)


__all__ = ["ANALYSES_TABLE", "AnalysisStore", "LIST_COLUMNS", "start_of_month"]
