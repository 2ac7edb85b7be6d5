#!/usr/bin/env python
"""CLI for the perspective matching and balanced feed engine."""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from perspective_engine.config import create_from_config, get_default_config_path, load_config
from perspective_engine.data import CountryCode
from perspective_engine.errors import NotFoundError, PerspectiveEngineError

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    command: Literal["perspectives", "feed", "init-db"]
    config: Path
    country: CountryCode = CountryCode.TR
    article_id: str | None = None
    limit: int = Field(default=10, ge=1)
    page: int = Field(default=1, ge=1)

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v

    @field_validator("country", mode="before")
    @classmethod
    def parse_country(cls, v: object) -> CountryCode:
        return CountryCode.parse(str(v))


def _print_json(value: object) -> None:
    print(json.dumps(dataclasses.asdict(value), indent=2, ensure_ascii=False, default=str))  # type: ignore[call-overload]


async def run(args: CLIArgs) -> None:
    """Execute a command with the given configuration.

    Args:
        args: Validated CLI arguments.
    """
    config = load_config(args.config)
    logging.getLogger().setLevel(config.logging.level)
    matcher, feed_builder, db = create_from_config(config)

    logger.info(f"Config: {args.config}")
    try:
        if args.command == "init-db":
            await db.init_schema()
            logger.info("Schema created")
        elif args.command == "perspectives":
            assert args.article_id is not None
            result = await matcher.find_perspectives(args.article_id, args.country)
            _print_json(result)
        else:
            feed = await feed_builder.get_balanced_feed(args.country, args.limit, args.page)
            _print_json(feed)
    finally:
        await db.dispose()


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Find coverage of a story from across the political spectrum."
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    perspectives = subparsers.add_parser(
        "perspectives", help="Related coverage of one article from differently aligned outlets"
    )
    perspectives.add_argument("article_id", help="ID of the main article")
    perspectives.add_argument("--country", default="tr", help="Country code (default: tr)")

    feed = subparsers.add_parser("feed", help="Recent articles grouped by outlet alignment")
    feed.add_argument("--country", default="tr", help="Country code (default: tr)")
    feed.add_argument("--limit", type=int, default=10, help="Total feed size (default: 10)")
    feed.add_argument("--page", type=int, default=1, help="1-based page (default: 1)")

    subparsers.add_parser("init-db", help="Create the database tables")

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            command=ns.command,
            config=config_path,
            country=getattr(ns, "country", "tr"),
            article_id=getattr(ns, "article_id", None),
            limit=getattr(ns, "limit", 10),
            page=getattr(ns, "page", 1),
        )
    except ValidationError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        asyncio.run(run(args))
    except NotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except (PerspectiveEngineError, ValueError, ValidationError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
