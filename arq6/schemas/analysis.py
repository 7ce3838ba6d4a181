"""
Pydantic models for market analysis requests and listings.
"""

from __future__ import annotations

import math
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field


class MarketAnalysisRequest(BaseModel):
    """Subject of a new market analysis."""

    model_config = ConfigDict(str_strip_whitespace=True)

    segmento: str = Field(
        ..., min_length=2, max_length=100, description="Market niche to analyse."
    )
    contexto_adicional: Optional[str] = Field(
        None,
        max_length=2000,
        description="Free-text context appended to the prompt.",
    )
    usuario_id: UUID = Field(..., description="Identifier of the requesting user.")


class Pagination(BaseModel):
    """Page window returned alongside list endpoints."""

    page: int
    limit: int
    total: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def totalPages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


__all__ = ["MarketAnalysisRequest", "Pagination"]
