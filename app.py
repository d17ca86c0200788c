#!/usr/bin/env python3
"""
Main entry point for URL shortener service.

Concurrency: requests are served concurrently on one event loop (FastAPI +
asyncpg connection pool). Access counting is an atomic UPDATE in PostgreSQL,
so simultaneous redirects of the same code never lose increments.

Usage:
    python app.py

Environment variables:
    DATABASE_URL - PostgreSQL connection URL
    DATABASE_CREATE_TABLES - Set to '1' to create the schema on startup
    BASE_URL - Base URL for short links
    PORT - Port to listen on
    DEFAULT_TTL_SECONDS - Lifetime for URLs created without a TTL (0 = never expire)
    CLEANUP_INTERVAL_SECONDS - Interval between expired URL sweeps
    LOG_LEVEL - Logging level
"""

import asyncio
import sys
from contextlib import asynccontextmanager
from urllib.parse import urlparse

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from shortener import __version__
from shortener.database.postgres import URLShortenerPostgres
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from shortener.sweeper import ExpiredURLSweeper
from shortener.common.logging_config import setup_logging
from web_app import create_app


def _redacted_config(config: Config) -> dict:
    """Configuration for logging, without the database password."""
    values = config.model_dump()
    parsed = urlparse(config.database_url)
    if parsed.password:
        values["database_url"] = config.database_url.replace(f":{parsed.password}@", ":***@", 1)
    return values


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting URL shortener service...")

    db_instance = URLShortenerPostgres(
        db_config=config.database_url,
        pool_min_size=config.database_pool_min_size,
        pool_max_size=config.database_pool_max_size,
        connection_timeout_seconds=config.database_connect_timeout_seconds,
        command_timeout_seconds=config.database_command_timeout_seconds,
        bulk_command_timeout_seconds=config.cleanup_timeout_seconds,
        max_inactive_connection_lifetime=config.database_max_inactive_connection_lifetime,
        create_tables=config.database_create_tables,
        logger=logger,
    )

    try:
        await asyncio.wait_for(db_instance.connect(), config.database_connect_timeout_seconds)
    except Exception as e:
        logger.error(f"Failed to connect to database: {e!r}")
        await db_instance.close()
        raise

    generator = ShortCodeGenerator(default_length=config.short_code_length)
    service_instance = URLShortenerService(
        db=db_instance,
        short_code_generator=generator,
        logger=logger,
        max_collision_attempts=config.max_collision_attempts,
        default_ttl_seconds=config.default_ttl_seconds,
        health_check_timeout_seconds=config.health_check_timeout_seconds,
    )

    sweeper = ExpiredURLSweeper(
        service=service_instance,
        interval_seconds=config.cleanup_interval_seconds,
        timeout_seconds=config.cleanup_timeout_seconds,
        logger=logger,
    )
    sweeper.start()

    app.state.service = service_instance
    app.state.sweeper = sweeper

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down URL shortener service...")

    await sweeper.stop()
    await service_instance.close()

    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info(f"URL Shortener Service v{__version__}")
    logger.info(f"Configuration: {_redacted_config(config)}")

    # The service is created by the lifespan once the database is reachable
    app = create_app(service_instance=None, config=config, lifespan=lifespan)
    app.state.logger = logger

    # uvicorn handles SIGINT/SIGTERM: stop accepting, drain in-flight
    # requests, then run the lifespan shutdown.
    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
        timeout_graceful_shutdown=int(config.shutdown_timeout_seconds),
    )

    server = uvicorn.Server(uvicorn_config)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)

    if not server.started:
        logger.error("Server failed to start")
        sys.exit(1)


if __name__ == "__main__":
    main()
