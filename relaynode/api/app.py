"""Control-plane server: FastAPI app factory.

Creates the ASGI application around an already started node and serves it
with uvicorn. Every request runs as its own task; there is no request queue
and no admission control.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response

from relaynode import __version__
from relaynode.application.state import AppState
from relaynode.utils.logging import clear_correlation_id, get_logger, set_correlation_id

from .errors import register_exception_handlers
from .routes import router

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(state: AppState) -> FastAPI:
    """Create and configure the control-plane application.

    Args:
        state: Shared state wrapping the started node

    Returns:
        Configured FastAPI application. The worker pool is shut down when the
        application's lifespan ends.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("control_plane_starting")
        try:
            yield
        finally:
            state.close()
            logger.info("control_plane_stopped")

    app = FastAPI(
        title="relaynode control plane",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.node_state = state

    @app.middleware("http")
    async def bind_request_id(request: Request, call_next) -> Response:
        request_id = set_correlation_id(request.headers.get(REQUEST_ID_HEADER))
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    register_exception_handlers(app)
    app.include_router(router)

    logger.info("control_plane_app_created")
    return app


def run_server(app: FastAPI, host: str = "0.0.0.0", port: int = 3000) -> None:
    """Serve the application until interrupted."""
    config = uvicorn.Config(app, host=host, port=port, log_config=None)
    server = uvicorn.Server(config)
    logger.info("control_plane_listening", host=host, port=port)
    server.run()
