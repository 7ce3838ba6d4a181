"""Check that an ``.env`` file is enough to run the market analysis API.

The settings are loaded exactly as the API loads them, so a missing Supabase
project URL or key is reported before the server starts answering with 500s.
On success a summary of the configuration is printed together with warnings
about setups that start fine but degrade at request time:

* an unknown ``AI_PROVIDER`` (Gemini is used instead);
* the selected provider has no API key (every analysis goes to the fallback);
* no provider key at all (every analysis fails);
* no service-role key (a failed profile insert cannot roll back the account).

Example usages::

    python -m scripts.check_env --env-file /srv/arq6/.env

    # Fail the deploy when any warning is printed.
    python -m scripts.check_env --env-file /srv/arq6/.env --strict
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from arq6.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_WARNINGS = 3
EXIT_RUNTIME_ERROR = 5

KNOWN_PROVIDERS = ("gemini", "deepseek", "both")


def _load_settings(env_file: Path) -> AppSettings:
    """Load settings with ``env_file`` filling any unset variables."""
    _load_env_file(str(env_file))
    return AppSettings(_env_file=str(env_file))  # type: ignore[call-arg]


def _describe_settings(settings: AppSettings) -> list[str]:
    return [
        f"Environment: {settings.environment}",
        f"Supabase project: {settings.supabase.url}",
        f"AI provider: {settings.ai.provider}",
        f"  Gemini key: {'set' if settings.gemini.api_key else 'missing'}",
        f"  DeepSeek key: {'set' if settings.deepseek.api_key else 'missing'}",
        f"Web search: {'enabled' if settings.web_search.enabled else 'disabled'}",
        f"Rate limits: {settings.rate_limit.default_limit}; "
        f"analysis {settings.rate_limit.analysis_limit}",
    ]


def _find_warnings(settings: AppSettings) -> list[str]:
    keys = {
        "gemini": bool(settings.gemini.api_key),
        "deepseek": bool(settings.deepseek.api_key),
    }
    provider = settings.ai.provider
    warnings: list[str] = []

    if provider not in KNOWN_PROVIDERS:
        warnings.append(f"unknown AI_PROVIDER '{provider}', Gemini will be used.")
        provider = "gemini"

    if not any(keys.values()):
        warnings.append("no AI provider key configured; analyses will fail.")
    elif provider == "both":
        missing = [name for name, present in keys.items() if not present]
        if missing:
            warnings.append(
                f"AI_PROVIDER=both but {missing[0]} has no key; only one provider will answer."
            )
    elif not keys[provider]:
        warnings.append(
            f"AI_PROVIDER={provider} has no key; every analysis will use the fallback."
        )

    if not settings.supabase.service_role_key:
        warnings.append(
            "SUPABASE_SERVICE_ROLE_KEY is not set; failed registrations cannot be rolled back."
        )
    return warnings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate the API settings and report provider readiness."
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Path to the environment file (default: .env in the repo root).",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with a non-zero status when any warning is reported.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    env_file: Path = args.env_file
    if not env_file.exists():
        print(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    try:
        settings = _load_settings(env_file)
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Unexpected error during validation: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    for line in _describe_settings(settings):
        print(line)
    warnings = _find_warnings(settings)
    for warning in warnings:
        print(f"WARNING: {warning}")

    if warnings and args.strict:
        return EXIT_WARNINGS
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
