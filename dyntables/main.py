from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from dyntables.core.config import get_settings
from dyntables.core.database import init_db
from dyntables.core.enums import StoreBackend
from dyntables.core.exceptions import AppException
from dyntables.core.logging import get_logger, setup_logging
from dyntables.interfaces.http.middleware import LoggingMiddleware
from dyntables.interfaces.http.routes import api_router
from dyntables.schemas.base import ErrorDetail, ErrorResponse, HealthCheckSchema

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info(f"Starting {settings.project_name} {settings.version} ({settings.environment})")

    if settings.store_backend == StoreBackend.SQL.value:
        init_db()

    yield

    logger.info("Shutting down")


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.project_name,
        description="Tenant-scoped tables with user-defined fields, validated records, imports and exports",
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Handle application-specific exceptions."""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(ErrorResponse(error=ErrorDetail(**exc.to_dict()))),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=jsonable_encoder({
                "success": False,
                "error": {
                    "code": "REQUEST_VALIDATION_ERROR",
                    "message": "Request body or parameters are invalid",
                    "details": {"errors": exc.errors()},
                },
            }),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle general exceptions."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": {
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": str(exc) if settings.debug else "Internal server error occurred",
                    "details": {},
                },
            },
        )

    @app.get("/health", response_model=HealthCheckSchema)
    async def health_check() -> HealthCheckSchema:
        return HealthCheckSchema(
            status="healthy",
            version=settings.version,
            environment=settings.environment,
        )

    app.include_router(api_router)
    return app


app = create_application()
