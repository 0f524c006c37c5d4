#!/usr/bin/env python3
"""
Production entry point for WebSift.

Serves the HTTP API until SIGTERM/SIGINT; the app lifespan then shuts the
container down (closing HTTP clients and the shared browser). ``python main.py health``
prints a health report for container orchestration.
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from pathlib import Path

import structlog
import uvicorn

from websift.config import Config, find_config_file
from websift.container import DependencyContainer
from websift.observability.logging import configure_logging
from websift.web.main import create_app

logger = structlog.get_logger(__name__)


def load_config() -> tuple[Config, Path | None]:
    """Load configuration from WEBSIFT_CONFIG, a discovered file, or defaults."""
    config_path_env = os.getenv("WEBSIFT_CONFIG")
    config_path = Path(config_path_env) if config_path_env else find_config_file()
    config = Config.from_yaml(config_path) if config_path else Config()
    return config, config_path


async def health_check() -> dict:
    """Initialize and tear down a container once to prove the configuration works."""
    try:
        config, config_path = load_config()
        container = DependencyContainer(config=config, config_path=config_path)
        async with container.lifecycle():
            status = container.get_health_status()
        return {"status": "healthy", **status}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}


async def serve() -> None:
    """Run the API server until a shutdown signal arrives."""
    config, config_path = load_config()
    configure_logging(config.monitoring)

    container = DependencyContainer(config=config, config_path=config_path)
    server = uvicorn.Server(
        uvicorn.Config(
            create_app(container),
            host=config.web.host,
            port=int(os.getenv("PORT", config.web.port)),
            log_level=config.monitoring.log_level.lower(),
        )
    )

    # uvicorn traps SIGTERM/SIGINT and runs the lifespan shutdown, which closes the container
    logger.info("WebSift API starting", host=config.web.host, port=server.config.port)
    try:
        await server.serve()
    finally:
        logger.info("WebSift API stopped")


async def main() -> None:
    """Main entry point."""
    if len(sys.argv) > 1 and sys.argv[1] == "health":
        health = await health_check()
        print(json.dumps(health, indent=2))
        sys.exit(0 if health["status"] == "healthy" else 1)

    try:
        await serve()
    except Exception as e:
        logger.error("Unhandled exception in main", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
