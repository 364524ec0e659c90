#!/usr/bin/env python3
"""
Main entry point for the shortlinks URL shortener service.

The store lives in process memory (optionally mirrored to a JSON snapshot),
so the service runs as a single uvicorn worker; async I/O handles many
concurrent connections.

Usage:
    python app.py

Environment variables:
    BASE_URL - Base URL for short links
    PORT - Port to listen on
    ENVIRONMENT - development or production
    SNAPSHOT_ENABLED - Persist the store to SNAPSHOT_PATH
    SNAPSHOT_PATH - Snapshot file path
    CLEANUP_INTERVAL_SECONDS - Interval between expired URL sweeps
    LOG_LEVEL - Logging level
"""

import logging
import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from shortlinks.common.logging_config import setup_logging
from shortlinks.scheduler import CleanupScheduler
from shortlinks.service import URLShortenerService
from shortlinks.shortcode import ShortCodeGenerator
from shortlinks.store.memory import InMemoryURLStore
from shortlinks.store.snapshot import SnapshotFile
from web_app import create_app


def build_service(config: Config, logger: logging.Logger) -> URLShortenerService:
    """Wire the store, generator and service from configuration."""
    snapshot = None
    if config.snapshot_enabled:
        snapshot = SnapshotFile(
            path=config.snapshot_path,
            timeout_seconds=config.snapshot_timeout_seconds,
            logger=logger.getChild("snapshot"),
        )

    store = InMemoryURLStore(snapshot=snapshot, logger=logger.getChild("store"))
    generator = ShortCodeGenerator(
        default_length=config.short_code_length,
        logger=logger.getChild("shortcode"),
    )

    return URLShortenerService(
        store=store,
        short_code_generator=generator,
        base_url=config.base_url,
        path_prefix=config.path_prefix,
        logger=logger.getChild("service"),
        production=config.is_production,
        max_generation_attempts=config.max_generation_attempts,
        default_validity_minutes=config.default_validity_minutes,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Hydrate the store and run the cleanup scheduler for the app's lifetime."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting URL shortener service...")
    logger.info(f"Environment: {config.environment}, base URL: {config.base_url}")

    service = build_service(config, logger)
    await service.store.load()

    scheduler = CleanupScheduler(
        cleanup=service.run_cleanup,
        interval_seconds=config.cleanup_interval_seconds,
        logger=logger.getChild("scheduler"),
    )
    scheduler.start()

    app.state.service = service
    app.state.scheduler = scheduler

    logger.info("Service started successfully")

    try:
        yield
    finally:
        logger.info("Shutting down URL shortener service...")
        await scheduler.stop()
        await service.close()
        logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("URL Shortener Service")
    logger.info(f"Configuration: {config.model_dump()}")

    app = create_app(
        service_instance=None,  # Set in lifespan
        config=config,
        logger=logger,
        lifespan=lifespan,
    )
    app.state.logger = logger

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
