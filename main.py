import asyncio
import logging

from aiohttp import web

from api import create_app
from app_config import get_settings


settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def serve() -> None:
    app = create_app(settings)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, settings.host, settings.port)
    await site.start()
    logger.info("Listening on %s:%s", settings.host, settings.port)

    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()


def run() -> None:
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    run()
