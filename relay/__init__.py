# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from relay.logging import logger
from relay.managers.broadcast_backends import create_backend
from relay.managers.connection_registry import ConnectionRegistry
from relay.managers.dispatcher import Dispatcher
from relay.middlewares.correlation_id import CorrelationIDMiddleware
from relay.middlewares.prometheus import PrometheusMiddleware
from relay.routing import collect_subrouters
from relay.settings import app_settings
from relay.storage.db import engine, wait_and_init_db
from relay.utils.error_handler import register_exception_handlers


async def startup(app: FastAPI) -> None:
    """
    Application startup handler.

    - Waits for the database and creates missing tables
    - Starts the broadcast backend (subscribes to Redis when configured)
    """
    logger.info("Application startup initiated")

    await wait_and_init_db()
    logger.info("Initialized database and tables")

    await app.state.dispatcher.start()


async def shutdown(app: FastAPI) -> None:
    """
    Application shutdown handler.

    Cleanup order:
    1. Close and unregister every live WebSocket connection
    2. Stop the broadcast backend
    3. Dispose the database engine and close Redis pools
    """
    logger.info("Application shutdown initiated")

    await app.state.registry.close_all()
    await app.state.dispatcher.stop()
    await engine.dispose()

    if app_settings.websocket.BROADCAST_BACKEND == "redis":
        from relay.storage.redis import RedisPool

        await RedisPool.close_all()

    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await startup(app)
    try:
        yield
    finally:
        await shutdown(app)


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    The connection registry and the dispatcher are constructed here, before
    any route is registered, and stored on `app.state`; handlers reach them
    through `relay.dependencies`.

    Middlewares (execute in REVERSE order of registration):
    CorrelationIDMiddleware → CORSMiddleware → PrometheusMiddleware
    """
    ws_settings = app_settings.websocket
    registry = ConnectionRegistry()
    dispatcher = Dispatcher(
        registry,
        backend=create_backend(
            ws_settings.BROADCAST_BACKEND, ws_settings.BROADCAST_REDIS_CHANNEL
        ),
        overflow_policy=ws_settings.OVERFLOW_POLICY,
    )

    app = FastAPI(
        title="Notification relay",
        description="Stores notifications and broadcasts them to WebSocket clients",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.dispatcher = dispatcher

    register_exception_handlers(app)

    app.include_router(collect_subrouters())

    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIDMiddleware)

    return app


app = application()  # Need for fastapi cli
