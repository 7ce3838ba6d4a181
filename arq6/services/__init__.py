"""Service layer for the market analysis API."""

from .accounts import (
    AccountError,
    InvalidCredentialsError,
    LoginResult,
    ProfileNotFoundError,
    RegistrationRejectedError,
    UserAccountService,
    UserAlreadyExistsError,
)
from .ai_providers import (
    AIProviderError,
    AnalysisResult,
    DeepSeekAnalysisProvider,
    GeminiAnalysisProvider,
    ProviderUnavailableError,
)
from .ai_service import AIService
from .analysis_store import AnalysisStore
from .market_analysis import MarketAnalysisOutcome, MarketAnalysisService
from .market_research import MarketResearchService, ResearchContext
from .user_store import UserStore

__all__ = [
    "AIProviderError",
    "AIService",
    "AccountError",
    "AnalysisResult",
    "AnalysisStore",
    "DeepSeekAnalysisProvider",
    "GeminiAnalysisProvider",
    "InvalidCredentialsError",
    "LoginResult",
    "MarketAnalysisOutcome",
    "MarketAnalysisService",
    "MarketResearchService",
    "ProfileNotFoundError",
    "ProviderUnavailableError",
    "RegistrationRejectedError",
    "ResearchContext",
    "UserAccountService",
    "UserAlreadyExistsError",
    "UserStore",
]
