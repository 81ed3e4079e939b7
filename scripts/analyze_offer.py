#!/usr/bin/env python
"""Run one AI analysis for a stored offer and print the report as JSON."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.clients import GeminiModelError  # noqa: E402
from app.core.config import get_settings  # noqa: E402
from app.core.logging import configure_logging  # noqa: E402
from app.dependencies import get_offer_analysis_service  # noqa: E402
from app.services import OfferAnalysisError  # noqa: E402


async def _run(user_id: str, offer_id: str) -> int:
    service = get_offer_analysis_service()
    try:
        response = await service.analyze_offer(user_id=user_id, offer_id=offer_id)
    except (OfferAnalysisError, GeminiModelError) as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1
    print(response.model_dump_json(indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Analyze a stored offer with the configured Gemini model."
    )
    parser.add_argument("offer_id", help="Identifier of the offer to analyze.")
    parser.add_argument("--user-id", required=True, help="Owner of the offer.")
    args = parser.parse_args(argv)

    configure_logging(get_settings().log_level)
    return asyncio.run(_run(args.user_id, args.offer_id))


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
