"""FastAPI application factory for the SST screener.

Run with: uvicorn sst.main:app --reload
"""

from __future__ import annotations

import traceback
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sst import __version__
from sst.api.backtest import router as backtest_router
from sst.api.scanner import router as scanner_router
from sst.backtesting.exceptions import InsufficientDataError
from sst.common.database import init_models
from sst.common.exceptions import (
    DataNotFoundError,
    InvalidParameterError,
    SstBaseException,
)
from sst.common.logging import get_logger
from sst.common.middleware import (
    RequestIdMiddleware,
    RequestLoggingMiddleware,
    request_id_var,
)

logger = get_logger("SYSTEM")


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
    """Create missing tables on startup."""
    await init_models()
    logger.info("Database tables ready")
    yield


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "message": str(exc),
        },
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="SST Screener",
        version=__version__,
        description="Breakout-after-pullback screener and backtester for daily equity bars",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Last added = outermost = runs first on request
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # ─── Exception Handlers ───

    @app.exception_handler(InsufficientDataError)
    async def insufficient_data_handler(
        request: Request, exc: InsufficientDataError
    ) -> JSONResponse:
        """Nothing could be simulated — 422."""
        logger.warning(
            f"InsufficientDataError: {exc}",
            extra={"data": {"path": str(request.url)}},
        )
        return _error_response(422, exc)

    @app.exception_handler(DataNotFoundError)
    async def data_not_found_handler(request: Request, exc: DataNotFoundError) -> JSONResponse:
        """Nothing stored for the request — 404."""
        logger.warning(
            f"DataNotFoundError: {exc}",
            extra={"data": {"path": str(request.url)}},
        )
        return _error_response(404, exc)

    @app.exception_handler(InvalidParameterError)
    async def invalid_parameter_handler(
        request: Request, exc: InvalidParameterError
    ) -> JSONResponse:
        """Rejected strategy parameters — 400."""
        logger.warning(
            f"InvalidParameterError: {exc}",
            extra={"data": {"path": str(request.url)}},
        )
        return _error_response(400, exc)

    @app.exception_handler(SstBaseException)
    async def sst_exception_handler(request: Request, exc: SstBaseException) -> JSONResponse:
        """Handle all remaining project exceptions with structured JSON responses."""
        logger.error(
            f"{type(exc).__name__}: {exc}",
            extra={"data": {"path": str(request.url), "context": exc.context}},
        )
        return _error_response(400, exc)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions — log traceback, return 500."""
        rid = request_id_var.get("")
        logger.error(
            f"Unhandled {type(exc).__name__}: {exc}",
            extra={
                "data": {
                    "path": str(request.url),
                    "request_id": rid,
                    "traceback": traceback.format_exc(),
                }
            },
        )
        body: dict = {
            "error": "InternalServerError",
            "message": "An unexpected error occurred",
        }
        if rid:
            body["request_id"] = rid
        return JSONResponse(status_code=500, content=body)

    # ─── Health ───

    @app.get("/health")
    async def health_check() -> dict:
        """Liveness probe — confirms the process is running."""
        return {"status": "ok", "version": __version__}

    # ─── Router Mounting ───

    app.include_router(backtest_router, prefix="/api/backtest", tags=["backtest"])
    app.include_router(scanner_router, prefix="/api/scanner", tags=["scanner"])

    return app


app = create_app()
