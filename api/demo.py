"""
CLI demo.

Fetches a handful of jokes from random providers, writes them to a JSON file
and prints them. Nothing is stored in the database.

Examples:
    jokes-demo
    jokes-demo --count 25 --out-dir ./result
    jokes-demo --category programming
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from core import config
from core.errors import JokesError
from core.log import configure_logging
from providers.manager import JokeManager
from providers.types import Joke

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 10


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch random jokes from random providers and save them to JSON.")
    p.add_argument(
        "--count",
        type=int,
        default=DEFAULT_COUNT,
        help=f"Number of jokes to fetch (at most {config.MAX_FETCH_COUNT}).",
    )
    p.add_argument("--out-dir", type=str, default="result", help="Directory for the output JSON file.")
    p.add_argument("--category", type=str, default=None, help="Prefer providers that support this category.")
    p.add_argument(
        "--allow-partial",
        action="store_true",
        help="Keep the jokes that were fetched even if some providers fail.",
    )
    return p.parse_args(argv)


async def fetch_jokes(manager: JokeManager, *, count: int, category: str | None, allow_partial: bool) -> list[Joke]:
    if category:
        results = await asyncio.gather(
            *(manager.get_joke_by_category(category) for _ in range(count)),
            return_exceptions=allow_partial,
        )
        jokes: list[Joke] = []
        for result in results:
            if isinstance(result, BaseException):
                logger.warning("demo_fetch_dropped category=%s error=%s", category, result)
                continue
            jokes.append(result)
        return jokes
    return await manager.get_multiple_jokes(count, allow_partial=allow_partial)


def write_jokes(jokes: list[Joke], out_dir: Path) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-")
    out_path = out_dir / f"jokes-{stamp}.json"
    data = [j.model_dump(mode="json", exclude_none=True) for j in jokes]
    out_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return out_path


def format_joke(index: int, joke: Joke) -> str:
    lines = [f"{index}. [{joke.provider}]"]
    if joke.type == "single" or joke.joke.content:
        lines.append(f"   {joke.joke.content}")
    else:
        lines.append(f"   Setup: {joke.joke.setup}")
        lines.append(f"   Punchline: {joke.joke.punchline}")
    if joke.category:
        lines.append(f"   Category: {joke.category}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = parse_args(argv)
    count = min(max(1, args.count), config.MAX_FETCH_COUNT)

    print(f"Fetching {count} random jokes from random providers...\n")
    manager = JokeManager()
    try:
        jokes = asyncio.run(
            fetch_jokes(manager, count=count, category=args.category, allow_partial=args.allow_partial)
        )
    except JokesError:
        logger.exception("demo_fetch_failed count=%s", count)
        return 1

    out_path = write_jokes(jokes, Path(args.out_dir).expanduser().resolve())
    print(f"Saved {len(jokes)} jokes to: {out_path}\n")
    for i, joke in enumerate(jokes, start=1):
        print(format_joke(i, joke))
        print()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
