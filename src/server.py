"""Protean Engine runner for the storefront domain.

Starts Engine workers that process events asynchronously when
``event_processing = "async"`` (the production overlay):
- OutboxProcessor: polls the outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes projectors and event handlers

Usage:
    python src/server.py
    python src/server.py --json-logs
"""

import argparse
import asyncio

from protean.server.engine import Engine

from storefront.domain import storefront
from storefront.utils.logging import configure_logging, logger


async def run():
    storefront.init()
    logger.info("Starting engine", domain=storefront.name)
    await Engine(storefront).run()


def main():
    parser = argparse.ArgumentParser(description="Storefront Engine runner")
    parser.add_argument("--json-logs", action="store_true", help="Render logs as JSON lines")
    args = parser.parse_args()

    configure_logging(json_output=args.json_logs)
    asyncio.run(run())


if __name__ == "__main__":
    main()
