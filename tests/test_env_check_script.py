"""Tests for the environment validation script."""

from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from pathlib import Path

import pytest

from scripts import check_env

# Every key the tests write is seeded by _bootstrap, so monkeypatch restores it.
MANAGED_ENV_KEYS = [
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
    "GEMINI_API_KEY",
    "DEEPSEEK_API_KEY",
    "AI_PROVIDER",
]


def _write_env(env_path: Path, **values: str) -> None:
    contents = "\n".join(f"{key}={value}" for key, value in values.items())
    env_path.write_text(contents + "\n", encoding="utf-8")


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in MANAGED_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_main_requires_existing_env_file(tmp_path: Path) -> None:
    env_file = tmp_path / ".missing-env"

    assert check_env.main(["--env-file", str(env_file)]) == check_env.EXIT_RUNTIME_ERROR


def test_validation_failure_for_missing_supabase_key(tmp_path: Path, clean_env) -> None:
    env_file = tmp_path / ".env"
    _write_env(env_file, SUPABASE_URL="https://project.supabase.co")

    exit_code = check_env.main(["--env-file", str(env_file)])

    assert exit_code == check_env.EXIT_VALIDATION_ERROR


def test_complete_configuration_has_no_warnings(
    tmp_path: Path, clean_env, capsys: pytest.CaptureFixture[str]
) -> None:
    env_file = tmp_path / ".env"
    _write_env(
        env_file,
        SUPABASE_URL="https://p.supabase.co",
        SUPABASE_ANON_KEY="anon",
        SUPABASE_SERVICE_ROLE_KEY="service",
        GEMINI_API_KEY="g-key",
        DEEPSEEK_API_KEY="d-key",
        AI_PROVIDER="both",
    )

    assert check_env.main(["--env-file", str(env_file), "--strict"]) == check_env.EXIT_OK

    output = capsys.readouterr().out
    assert "Supabase project: https://p.supabase.co" in output
    assert "AI provider: both" in output
    assert "WARNING" not in output


def test_reports_unknown_provider_and_missing_keys(
    tmp_path: Path, clean_env, capsys: pytest.CaptureFixture[str]
) -> None:
    env_file = tmp_path / ".env"
    _write_env(
        env_file,
        SUPABASE_URL="https://p.supabase.co",
        SUPABASE_ANON_KEY="anon",
        AI_PROVIDER="openai",
    )

    assert check_env.main(["--env-file", str(env_file)]) == check_env.EXIT_OK

    output = capsys.readouterr().out
    assert "unknown AI_PROVIDER 'openai'" in output
    assert "no AI provider key configured" in output
    assert "cannot be rolled back" in output


def test_selected_provider_without_key_falls_back(
    tmp_path: Path, clean_env, capsys: pytest.CaptureFixture[str]
) -> None:
    env_file = tmp_path / ".env"
    _write_env(
        env_file,
        SUPABASE_URL="https://p.supabase.co",
        SUPABASE_ANON_KEY="anon",
        SUPABASE_SERVICE_ROLE_KEY="service",
        GEMINI_API_KEY="g-key",
        AI_PROVIDER="deepseek",
    )

    exit_code = check_env.main(["--env-file", str(env_file), "--strict"])

    assert exit_code == check_env.EXIT_WARNINGS
    assert "AI_PROVIDER=deepseek has no key" in capsys.readouterr().out
