from __future__ import annotations

import logging
import os

import uvicorn

from studydash.config import load_settings
from studydash.ui.http.app import create_app


def run() -> None:
    """Start the HTTP API. The background sync scheduler runs inside the same process."""
    settings = load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - [PID:%(process)d] - %(message)s'
    )
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info(f"StudyDash starting - PID: {os.getpid()}")
    logger.info(f"Canvas API: {settings.canvas_api_url}")
    if settings.scheduler_enabled:
        logger.info(
            f"Background sync every {settings.sync_interval_hours}h, cache {settings.sync_cache_hours}h"
        )
    else:
        logger.info("Background sync disabled")
    logger.info("=" * 60)

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
