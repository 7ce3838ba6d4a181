"""Domain model exports."""

from .analysis import AnalysisRecord
from .user import UserProfile

__all__ = ["AnalysisRecord", "UserProfile"]
