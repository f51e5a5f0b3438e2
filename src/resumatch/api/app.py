from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resumatch.api.routes import router as api_router
from resumatch.config import get_settings
from resumatch.db.init import init_database
from resumatch.errors import ResumatchError
from resumatch.logging_config import configure_logging
from resumatch.web.routes import router as web_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def _startup() -> None:
        init_database()

    @app.exception_handler(ResumatchError)
    async def _handle_app_error(request: Request, exc: ResumatchError) -> JSONResponse:
        if exc.status_code >= 500:
            # Details stay in the log; clients get the generic message.
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
            return JSONResponse({"error": exc.default_message}, status_code=exc.status_code)
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            {"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
            status_code=400,
        )

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(api_router)
    if settings.web_ui_enabled:
        app.include_router(web_router)

    return app
