#!/usr/bin/env python
"""Run a market analysis from the terminal without touching the database."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from arq6.core.config import get_settings  # noqa: E402
from arq6.core.logging import configure_logging  # noqa: E402
from arq6.dependencies import (  # noqa: E402
    get_ai_service,
    get_market_research_service,
)
from arq6.services import AIService  # noqa: E402
from arq6.services.ai_service import AVAILABLE_PROVIDERS  # noqa: E402


async def probe(ai_service: AIService) -> int:
    print(json.dumps(ai_service.provider_info(), indent=2))
    results = await ai_service.test_connections()
    for name, ok in results.items():
        print(f"{name}: {'OK' if ok else 'FAILED'}")
    return 0 if any(results.values()) else 1


async def run_once(
    ai_service: AIService,
    segmento: str,
    contexto: str | None,
    show_metadata: bool,
) -> int:
    research = get_market_research_service()
    context = await research.gather(segmento, contexto)
    result = await ai_service.analyze_market(context)
    print(result.analysis)
    if show_metadata:
        print()
        print(json.dumps(result.metadata, indent=2, ensure_ascii=False, default=str))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Generate a market analysis for a segment or probe the AI providers."
    )
    parser.add_argument(
        "segmento",
        nargs="?",
        help="Market segment to analyse. Omit together with --probe.",
    )
    parser.add_argument(
        "--contexto",
        default=None,
        help="Optional additional context appended to the prompt.",
    )
    parser.add_argument(
        "--provider",
        choices=AVAILABLE_PROVIDERS,
        default=None,
        help="Override AI_PROVIDER for this run.",
    )
    parser.add_argument(
        "--metadata",
        action="store_true",
        help="Print the generation metadata after the analysis.",
    )
    parser.add_argument(
        "--probe",
        action="store_true",
        help="Only report which providers are configured and reachable.",
    )
    args = parser.parse_args(argv)

    if not args.probe and not args.segmento:
        parser.error("a segment is required unless --probe is given")

    configure_logging(get_settings().log_level)
    ai_service = get_ai_service()
    if args.provider:
        ai_service.set_provider(args.provider)

    if args.probe:
        return asyncio.run(probe(ai_service))
    return asyncio.run(run_once(ai_service, args.segmento, args.contexto, args.metadata))


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
