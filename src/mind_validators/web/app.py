"""FastAPI application factory."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..core.errors import DuplicateNameFailure, MonitorError
from ..data.blocks import BlockWatcher, make_block_queue
from ..services.validator_service import ValidatorService
from .routes import router

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"][1:])
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return "; ".join(messages) or "Invalid request"


def create_app(
    service: ValidatorService | None = None, watch_blocks: bool = True
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    When watch_blocks is set, the lifespan starts the block watcher and the
    refresh loop (which does the startup refresh) and stops them on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        monitor: ValidatorService = app.state.service
        tasks: list[asyncio.Task] = []
        if watch_blocks:
            events = make_block_queue()
            watcher = BlockWatcher(monitor.reader.onchain, events)
            tasks = [
                asyncio.create_task(watcher.run(), name="block-watcher"),
                asyncio.create_task(monitor.pipeline.run(events), name="refresh-loop"),
            ]
        try:
            yield
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await monitor.close()

    app = FastAPI(
        title="MIND Validator Monitor",
        description="Stake, rewards and block activity of MIND validators",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.service = service or ValidatorService()

    # Allow any origin to access the API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
    )

    @app.exception_handler(DuplicateNameFailure)
    async def duplicate_name_handler(request: Request, exc: DuplicateNameFailure):
        return JSONResponse(
            status_code=400, content={"error": "Name already exists for this address"}
        )

    @app.exception_handler(MonitorError)
    async def monitor_error_handler(request: Request, exc: MonitorError):
        logger.error(f"Error handling {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    app.include_router(router)

    return app
