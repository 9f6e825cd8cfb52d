"""
Tail a live StreamHub collection from the command line.

Usage:
    python -m streamhub --network livefyre.com --site-id 303613 --article-id custom-1
    python -m streamhub --config feed.json --log-level DEBUG
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Optional
import argparse
import asyncio
import json
import logging
import sys

from .api.mapper import map_entity_to_dict
from .config import StreamHubConfig
from .content.types import Content, Entity
from .contracts.base import StreamHubError
from .service import create_service

LOG = logging.getLogger("streamhub.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streamhub",
        description="Print a StreamHub collection's live updates as JSON lines"
    )
    parser.add_argument("--config", type=Path, help="JSON config file")
    parser.add_argument("--network")
    parser.add_argument("--site-id")
    parser.add_argument("--article-id")
    parser.add_argument("--environment")
    parser.add_argument("--high-water-mark", type=int)
    parser.add_argument("--log-level")
    return parser


def resolve_config(args: argparse.Namespace) -> StreamHubConfig:
    """Defaults, then config file, then environment, then flags."""
    config = StreamHubConfig.load(args.config) if args.config else StreamHubConfig()
    return config.from_env().with_overrides(
        network=args.network,
        site_id=args.site_id,
        article_id=args.article_id,
        environment=args.environment,
        high_water_mark=args.high_water_mark,
        log_level=args.log_level,
    )


async def tail(config: StreamHubConfig, out=sys.stdout) -> None:
    service = create_service(config)

    def on_content(entity: Entity, visible: Optional[Content]) -> None:
        record = map_entity_to_dict(entity)
        record["visible"] = visible is not None
        out.write(json.dumps(record) + "\n")
        out.flush()

    try:
        await service.run(on_content)
    finally:
        await service.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = resolve_config(args)
        identity = config.identity
    except ValueError as e:
        print(f"[!] Invalid configuration: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(level=config.log_level_value)
    LOG.info("Tailing %s", identity)

    try:
        asyncio.run(tail(config))
    except StreamHubError as e:
        LOG.error("Live feed stopped: %s", e)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
