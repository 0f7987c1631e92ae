#!/usr/bin/env python3
"""
Feed Poller - Entry Point

This module serves as the main entry point for the feed poller daemon.
It handles initialization of all components, starts the polling loop and the
read-side API, and manages the lifecycle of the application including
graceful shutdown.
"""
import argparse
import asyncio
import logging
import signal
import sys
from contextlib import asynccontextmanager

import structlog
import uvicorn
from prometheus_client import start_http_server

from feedpoller.config import LogLevel, Settings, load_settings
from feedpoller.context import AppContext
from feedpoller.web.app import create_app

# Set up structured logger
logger = structlog.get_logger()


@asynccontextmanager
async def app_lifecycle(settings: Settings):
    """
    Context manager for the application lifecycle.

    This handles initialization and graceful shutdown of all components.
    """
    app_context = AppContext(settings)

    try:
        await app_context.initialize()

        # Start metrics server if enabled
        if settings.metrics.prometheus_enabled:
            start_http_server(settings.metrics.prometheus_port)
            logger.info("Prometheus metrics server started",
                        port=settings.metrics.prometheus_port)

        yield app_context

    finally:
        await app_context.shutdown()


def setup_logging(settings: Settings) -> None:
    """Set up structured logging based on configuration."""
    log_level = settings.metrics.log_level.value

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.metrics.structured_logging
            else structlog.dev.ConsoleRenderer()
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Route stdlib logging (uvicorn, asyncpg, httpx) to stderr at the same level
    numeric_level = getattr(logging, log_level, logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)
    logging.getLogger().setLevel(numeric_level)

    logger.info("Logging initialized", level=log_level)


def setup_signal_handlers(loop: asyncio.AbstractEventLoop, app_context: AppContext) -> None:
    """Set up signal handlers for graceful shutdown."""
    def signal_handler():
        logger.info("Received shutdown signal")
        app_context.shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    logger.info("Signal handlers registered")


async def run_daemon(settings: Settings, serve_api: bool = True) -> None:
    """Run the polling loop (and the API) until stopped."""
    logger.info("Starting feed poller daemon")

    async with app_lifecycle(settings) as app_context:
        loop = asyncio.get_running_loop()
        setup_signal_handlers(loop, app_context)

        app_context.start_polling()

        server = None
        if serve_api and settings.api.enabled:
            config = uvicorn.Config(
                create_app(app_context.store, settings),
                host=settings.api.host,
                port=settings.api.port,
                log_level=settings.metrics.log_level.value.lower(),
                access_log=True,
            )
            server = uvicorn.Server(config)
            # uvicorn takes over SIGINT/SIGTERM while serving; stop with it
            server_task = app_context.create_task(server.serve())
            server_task.add_done_callback(lambda _: app_context.shutdown_event.set())
            logger.info("API server starting", host=settings.api.host, port=settings.api.port)

        try:
            await app_context.shutdown_event.wait()

        except asyncio.CancelledError:
            logger.info("Main task cancelled")

        finally:
            if server is not None:
                server.should_exit = True
            logger.info("Daemon shutting down")


async def run_once(settings: Settings) -> None:
    """Run a single polling pass and exit."""
    logger.info("Running feed poller once")

    async with app_lifecycle(settings) as app_context:
        outcomes = await app_context.scheduler.run_pass()
        logger.info(
            "One-time run completed",
            feeds=len(outcomes),
            outcomes=[outcome.value for outcome in outcomes],
        )


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Feed Poller - Poll Atom and RSS feeds and store new posts"
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single polling pass and exit (don't run as daemon)"
    )

    parser.add_argument(
        "--no-api",
        action="store_true",
        help="Do not start the HTTP API"
    )

    parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        default=None,
        help="Set the log level"
    )

    return parser.parse_args(argv)


def main() -> int:
    """Main entry point for the application."""
    try:
        args = parse_args()

        settings = load_settings()

        if args.log_level:
            settings.metrics.log_level = LogLevel(args.log_level)

        setup_logging(settings)

        logger.info(
            "Feed Poller starting up",
            version=settings.version,
            environment=settings.environment.value,
            storage=settings.storage.backend.value,
        )

        if args.once:
            asyncio.run(run_once(settings))
        else:
            asyncio.run(run_daemon(settings, serve_api=not args.no_api))

        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    except Exception as e:
        logger.exception("Unhandled exception", error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
