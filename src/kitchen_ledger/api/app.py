"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from kitchen_ledger.api.kitchen import router as kitchen_router
from kitchen_ledger.app_logging import configure_logging
from kitchen_ledger.config import parse_log_level
from kitchen_ledger.containers import AppContainer
from kitchen_ledger.domain.errors import (
    BatchNotFound,
    CommitFailed,
    DeductionError,
    InvalidBatchTransition,
    PoolNotFound,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(parse_log_level(container.settings.log_level))
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container

    app.include_router(kitchen_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.exception_handler(DeductionError)
    async def deduction_error(_: Request, exc: DeductionError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"errors": [exc.to_dict()]},
        )

    @app.exception_handler(ValueError)
    async def invalid_value(_: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    @app.exception_handler(BatchNotFound)
    @app.exception_handler(PoolNotFound)
    async def not_found(_: Request, exc: LookupError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(InvalidBatchTransition)
    async def invalid_transition(
        _: Request, exc: InvalidBatchTransition
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": str(exc),
                "current": exc.current,
                "target": exc.target,
            },
        )

    @app.exception_handler(CommitFailed)
    async def commit_failed(_: Request, exc: CommitFailed) -> JSONResponse:
        logger.error("Batch start commit failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={
                "detail": str(exc),
                "applied": exc.applied,
                "compensated": exc.compensated,
            },
        )

    return app
