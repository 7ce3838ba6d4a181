"""Public schema exports."""

from .analysis import MarketAnalysisRequest, Pagination
from .user import (
    PASSWORD_PATTERN,
    ProfileUpdateRequest,
    RefreshTokenRequest,
    SessionTokens,
    UserLoginRequest,
    UserRegistrationRequest,
)

__all__ = [
    "MarketAnalysisRequest",
    "PASSWORD_PATTERN",
    "Pagination",
    "ProfileUpdateRequest",
    "RefreshTokenRequest",
    "SessionTokens",
    "UserLoginRequest",
    "UserRegistrationRequest",
]
