from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.router import api_router
from app.core.config import get_settings
from app.services import errors
from app.services.errors import BookingInputError, BookingRejected, NotFoundError

logger = logging.getLogger(__name__)


def _rejection_status(exc: BookingRejected) -> int:
    if exc.reason == errors.INSUFFICIENT_INVENTORY:
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BookingInputError)
    async def booking_input_error_handler(request: Request, exc: BookingInputError):
        return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": exc.message, "code": exc.code})

    @app.exception_handler(BookingRejected)
    async def booking_rejected_handler(request: Request, exc: BookingRejected):
        return JSONResponse(status_code=_rejection_status(exc), content={"detail": exc.message, "code": exc.reason})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc), "code": "NOT_FOUND"})

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(api_router, prefix=settings.api_prefix)
    logger.info("%s started (%s)", settings.app_name, settings.environment)
    return app


app = create_app()
