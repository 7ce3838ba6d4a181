"""Test helper that normalizes sys.path and environment defaults."""

from __future__ import annotations

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


_DEFAULT_ENV_VARS: dict[str, str] = {
    "APP_ENV": "test",
    "SUPABASE_URL": "https://test-project.supabase.co",
    "SUPABASE_ANON_KEY": "test-anon-key",
    "SUPABASE_SERVICE_ROLE_KEY": "test-service-key",
    "GEMINI_API_KEY": "test-gemini-key",
    "DEEPSEEK_API_KEY": "test-deepseek-key",
    "AI_PROVIDER": "gemini",
    "WEB_SEARCH_DELAY_SECONDS": "0",
    "RATE_LIMIT_MAX_REQUESTS": "1000",
    "ANALYSIS_RATE_LIMIT": "1000/hour",
}

for key, value in _DEFAULT_ENV_VARS.items():
    os.environ.setdefault(key, value)
