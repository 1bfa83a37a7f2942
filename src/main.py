"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import Settings, settings as default_settings
from src.container import Services, build_services
from src.ff_auth.api.router import router as auth_router
from src.ff_auth.middleware.request_log import REQUEST_ID_HEADER, RequestLogMiddleware
from src.ff_common.errors import AppError
from src.ff_common.logging_setup import configure_logging
from src.ff_common.response import error_response
from src.ff_finance.api.router import router as finance_router
from src.ff_insights.api.router import router as insights_router

logger = logging.getLogger("ff.error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + cache. Shutdown: drain insights, release pools."""
    services: Services = app.state.services
    # Startup
    if services.engine is not None:
        async with services.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    if not await services.cache.ping():
        logger.warning("Cache backend %s unreachable; running uncached", services.cache.backend)
    yield
    # Shutdown
    await services.aclose()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=error_response(exc.message, exc.code, exc.details),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(error_response("Validation Error", details=details)),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on [%s] %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    app_settings: Settings = request.app.state.services.settings
    message = "Internal Server Error" if app_settings.is_production else str(exc) or repr(exc)
    return JSONResponse(status_code=500, content=error_response(message))


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    settings = settings or (services.settings if services else default_settings)
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services or build_services(settings)

    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-MFA-Token", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )

    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router, prefix="/api")
    app.include_router(finance_router, prefix="/api")
    app.include_router(insights_router, prefix="/api")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    return app


app = create_app()
