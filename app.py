#!/usr/bin/env python3
"""
Main entry point for the shortlinks service.

The registry lives in process memory: every uvicorn worker owns a separate
store, and all shortlinks are lost on restart.

Usage:
    python app.py

Environment variables:
    BASE_URL - Base URL for shortlinks
    PORT - Port to listen on
    LOG_LEVEL - Logging level
    TELEMETRY_URL - Remote log API (log shipping disabled when unset)
"""

import signal
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from shortlinks.common.logging_config import get_logger, setup_logging
from shortlinks.service import ShortlinkService
from shortlinks.shortcode import ShortCodeGenerator
from shortlinks.store.memory import InMemoryRegistryStore
from shortlinks.telemetry import TelemetryClient, TelemetryHandler
from shortlinks_web import create_app

SECRET_FIELDS = {"telemetry_access_code", "telemetry_client_secret"}


def build_service(config: Config, telemetry: Optional[TelemetryClient] = None) -> ShortlinkService:
    """Wire the store and service from configuration."""
    generator = ShortCodeGenerator(default_length=config.short_code_length)
    store = InMemoryRegistryStore(
        short_code_generator=generator,
        max_collision_retries=config.max_collision_retries,
    )
    return ShortlinkService(
        store=store,
        telemetry=telemetry,
        default_validity_minutes=config.default_validity_minutes,
        max_validity_minutes=config.max_validity_minutes,
        enable_custom_codes=config.enable_custom_codes,
    )


def build_app(config: Config) -> FastAPI:
    """Configure logging and telemetry, then build the FastAPI app."""
    telemetry = None
    telemetry_handler = None
    if config.telemetry_enabled:
        telemetry = TelemetryClient(
            api_base_url=config.telemetry_url,
            credentials=config.telemetry_credentials(),
            stack=config.telemetry_stack,
            timeout=config.telemetry_timeout_seconds,
        )
        telemetry_handler = TelemetryHandler(telemetry)

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
        extra_handler=telemetry_handler,
    )

    service = build_service(config, telemetry)
    app = create_app(service=service, config=config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting shortlinks service...")
        yield
        logger.info("Shutting down shortlinks service...")
        if telemetry_handler:
            await telemetry_handler.flush_pending()
        await service.close()
        logger.info("Service stopped")

    app.router.lifespan_context = lifespan
    return app


def main():
    """Main entry point."""
    config = load_config()
    app = build_app(config)

    logger = get_logger("config")
    logger.info(f"Configuration: {config.model_dump(exclude=SECRET_FIELDS)}")

    if config.workers > 1:
        logger.warning("WORKERS > 1 splits the in-memory registry across processes")

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
