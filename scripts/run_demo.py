#!/usr/bin/env python3
"""
Demo Runner Script

Shows which catalog model the selector picks for a set of preferences
and, optionally, runs a full generation through the orchestrator.

Usage:
    python scripts/run_demo.py --capability chat
    python scripts/run_demo.py --capability code --strategy context
    python scripts/run_demo.py --capability chat --provider xai --max-cost 0.001
    python scripts/run_demo.py --capability chat --prompt "Say hello" --cache-key hello
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from aihub.config import configure_logging, get_settings
from aihub.errors import AIHubError
from aihub.orchestrator import generate_text
from aihub.registry import ModelProvider, get_model_catalog
from aihub.router import FallbackStrategy, SelectionPreferences, select_for


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="AI Hub selection demo")
    parser.add_argument("--capability", default="chat", help="Required capability tag")
    parser.add_argument("--max-cost", type=float, help="Max cost per 1K tokens")
    parser.add_argument("--min-context", type=int, help="Min context window")
    parser.add_argument(
        "--provider",
        action="append",
        default=[],
        choices=[p.value for p in ModelProvider],
        help="Preferred provider (repeatable)",
    )
    parser.add_argument(
        "--strategy",
        default=FallbackStrategy.COST.value,
        choices=[s.value for s in FallbackStrategy],
    )
    parser.add_argument(
        "--unavailable",
        action="append",
        default=[],
        help="Mark a model id unavailable before selecting (repeatable)",
    )
    parser.add_argument("--prompt", help="Run a generation with this prompt")
    parser.add_argument("--system", help="System instruction for --prompt")
    parser.add_argument("--cache-key", help="Cache key for --prompt")
    parser.add_argument("--no-cache", action="store_true", help="Bypass the cache")
    return parser.parse_args()


def print_catalog(capability: str) -> None:
    print(f"\nCatalog entries supporting '{capability}':")
    print("-" * 72)
    for model in get_model_catalog().list_by_capability(capability):
        status = "available" if model.is_available else "unavailable"
        print(
            f"  {model.id:<26} ${model.cost_per_1k_tokens:<8} "
            f"{model.context_window:>7} tokens  {status}"
        )


async def main() -> int:
    args = parse_args()
    configure_logging(get_settings())

    catalog = get_model_catalog()
    for model_id in args.unavailable:
        if not catalog.set_availability(model_id, False):
            print(f"Unknown model id: {model_id}", file=sys.stderr)
            return 1

    preferences = SelectionPreferences(
        capability=args.capability,
        max_cost_per_1k_tokens=args.max_cost,
        min_context_window=args.min_context,
        preferred_providers=tuple(args.provider),
        fallback_strategy=FallbackStrategy(args.strategy),
    )

    print_catalog(args.capability)
    chosen = select_for(preferences)
    print(f"\nSelected: {chosen.id} ({chosen.name})")

    if args.prompt is None:
        return 0

    try:
        result = await generate_text(
            args.prompt,
            preferences,
            system=args.system,
            cache_key=args.cache_key,
            use_cache=not args.no_cache,
        )
    except AIHubError as e:
        print(f"\nGeneration failed: {e}", file=sys.stderr)
        return 1

    print(f"\nModel used: {result.model_used}")
    print(f"From cache: {result.from_cache}  Used fallback: {result.used_fallback}")
    print("-" * 72)
    print(result.text)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
