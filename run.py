"""Entry point for the Kids Events API.

Starts the FastAPI application under Uvicorn.  It is intended to be
executed from the project root, for example under Docker, where you
only specify a single Python file to run.

Configuration such as DATABASE_URL, HOST and PORT should be placed in
a `.env` file in the same directory or exported in the environment.

Usage:
    python run.py
"""
import asyncio
import logging
import sys

from uvicorn import Config, Server

from kids_events_api.app.core.config import settings
from kids_events_api.app.core.logging_config import setup_logging


async def run_api() -> None:
    """Serve the API until SIGINT/SIGTERM.

    Uvicorn handles the signals and runs the application lifespan, so
    the document store is opened on startup and closed on shutdown.
    """
    config = Config(
        app="kids_events_api.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        lifespan="on",
        log_level=settings.log_level.lower(),
        # Logging is configured by setup_logging; uvicorn loggers propagate to root.
        log_config=None,
    )
    server = Server(config)
    await server.serve()
    # Uvicorn reports a failed lifespan startup via ``started`` rather than raising.
    if not server.started:
        raise SystemExit(1)


def main() -> None:
    setup_logging(settings.log_level, settings.log_file or None)
    logging.getLogger(__name__).info("Starting API on %s:%s", settings.host, settings.port)
    try:
        asyncio.run(run_api())
    except KeyboardInterrupt:
        pass
    except SystemExit as exc:
        logging.getLogger(__name__).critical("API failed to start")
        sys.exit(exc.code)


if __name__ == "__main__":
    main()
