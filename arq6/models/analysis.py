"""
Domain models mirroring the rows of the ``analyses`` table.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class AnalysisRecord(BaseModel):
    """A stored analysis pairing the user's input with the generated text."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    user_id: Optional[str] = None
    segmento: str
    contexto_adicional: Optional[str] = None
    resultado: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_response(self) -> Dict[str, Any]:
        """Serialize only the columns that were selected."""
        return self.model_dump(mode="json", exclude_unset=True)


__all__ = ["AnalysisRecord"]
