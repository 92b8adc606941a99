import logging
import time
import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from api.shared.dtos import ErrorResponse, HealthCheckResponse
from api.shared.exceptions import SupportChatException
from core.logging import configure_logging
from di.container import ApplicationContainer as DependencyContainer

logger = logging.getLogger("support")

_HTTP_ERROR_CODES = {404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED"}


class CustomFastAPI(FastAPI):
    container: DependencyContainer


@asynccontextmanager
async def lifespan(_app: CustomFastAPI):
    logger.info("Starting application initialization...")
    start_time = time.time()
    settings = _app.container.infrastructure.settings()

    try:
        logger.info("Initializing database connection...")
        db_start = time.time()
        db_resource = _app.container.infrastructure.database()
        await db_resource.init()
        if settings.DATABASE.AUTO_CREATE_SCHEMA:
            from api.shared.entities.registry import BaseEntity

            await db_resource.create_schema(BaseEntity.metadata)
        async with db_resource.engine.begin() as _conn:
            await _conn.execute(text("SELECT 1"))
        logger.info(
            f"✅ Database connection established in {time.time() - db_start:.2f}s"
        )

        # Built once at startup; a missing key is reported here, not per request
        if _app.container.infrastructure.completion_client() is None:
            logger.warning("GROQ_API_KEY not set. Replies will use the fallback text.")

        logger.info(
            f"✅ Application startup completed in {time.time() - start_time:.2f}s"
        )
    except Exception as e:
        logger.exception(f"❌ Failed to initialize application: {str(e)}")
        raise

    yield

    try:
        db_resource = _app.container.infrastructure.database()
        if db_resource:
            await db_resource.shutdown()
        logger.info("Application shutdown complete")
    except Exception:
        logger.exception("Error during shutdown")


def _error_response(
    status_code: int, message: str, code: str, exc: Optional[BaseException] = None,
    include_stack: bool = False,
) -> JSONResponse:
    stack = None
    if include_stack and exc is not None:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    body = ErrorResponse(error=message, code=code, stack=stack)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def create_fastapi_app(container: Optional[DependencyContainer] = None) -> CustomFastAPI:
    container = container or DependencyContainer()
    settings = container.infrastructure.settings()
    configure_logging(settings.APP)

    _app = CustomFastAPI(
        title="Support Chat API",
        description="Customer-support chat backend for the ShopEase store",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    _app.container = container
    _app.container.wire(modules=["api.features.chat.router"])
    _app.container.init_resources()

    _app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.APP.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    max_body_bytes = settings.APP.MAX_BODY_BYTES

    @_app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                too_large = int(content_length) > max_body_bytes
            except ValueError:
                return _error_response(400, "Invalid Content-Length header", "INVALID_REQUEST")
            if too_large:
                logger.info(
                    f"Rejected {content_length}-byte body on {request.method} {request.url.path}"
                )
                return _error_response(413, "Request body too large", "PAYLOAD_TOO_LARGE")
        return await call_next(request)

    from api.features.chat.router import router as chat_router

    _app.include_router(chat_router, prefix="/chat", tags=["Chat"])

    @_app.get("/health", response_model=HealthCheckResponse)
    async def health():
        return HealthCheckResponse(status="ok")

    development = settings.APP.is_development

    @_app.exception_handler(SupportChatException)
    async def support_chat_exception_handler(request: Request, exc: SupportChatException):
        if exc.status_code >= 500:
            logger.error(
                f"{exc.error_code} on {request.method} {request.url.path}: "
                f"{exc.message} {exc.details}"
            )
        else:
            logger.info(f"{exc.error_code} on {request.method} {request.url.path}")
        return _error_response(
            exc.status_code,
            exc.message,
            exc.error_code,
            exc,
            include_stack=development and exc.status_code >= 500,
        )

    @_app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error_response(400, "Invalid request body", "INVALID_REQUEST")

    @_app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
        return _error_response(exc.status_code, str(exc.detail), code)

    @_app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return _error_response(
            500,
            "An unexpected error occurred",
            "INTERNAL_ERROR",
            exc,
            include_stack=development,
        )

    return _app
