"""
Domain models mirroring the rows of the ``users`` table.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class UserProfile(BaseModel):
    """Profile row keyed by the identity provider's user id."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    email: str
    nome: Optional[str] = None
    empresa: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_public(self) -> Dict[str, Any]:
        """Fields returned to clients; unset columns are left out."""
        return self.model_dump(mode="json", exclude_unset=True)


__all__ = ["UserProfile"]
