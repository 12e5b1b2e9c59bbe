"""
Container Gateway entry point
"""

import asyncio

import uvicorn
from loguru import logger

from container_gateway.api import create_app
from container_gateway.log_setup import setup_logging
from container_gateway.settings import load_settings


async def main() -> None:
    settings = load_settings()
    setup_logging(settings)

    logger.info("Starting Container Gateway...")

    config = uvicorn.Config(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
    server = uvicorn.Server(config)

    try:
        await server.serve()
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down...")
    finally:
        logger.info("Container Gateway stopped")


if __name__ == "__main__":
    asyncio.run(main())
