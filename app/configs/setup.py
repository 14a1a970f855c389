from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette import status
from scalar_fastapi import get_scalar_api_reference

from app.api import activity_router, file_router, folder_router, tag_router, user_router
from app.configs.settings import settings
from app.core.exceptions import AppError
from app.databases import mongodb
from app.middlewares.sentry import init_sentry
from app.models import DOCUMENT_MODELS
from app.schemas.response import HealthCheck
from app.services.blob_store import get_blob_store
from app.utils import setup_logging, get_logger
from app.utils.api_response import error

logger = get_logger(__name__)

API_VERSION = "1.0.0"

ROUTERS = (
    (folder_router, "folders"),
    (file_router, "files"),
    (tag_router, "tags"),
    (activity_router, "activities"),
    (user_router, "users"),
)


def _start_monitoring() -> None:
    """Sentry runs only in production with a DSN configured"""
    if settings.APP_ENV != "prod" or not settings.SENTRY_DSN:
        logger.info(f"Sentry monitoring disabled - env: {settings.APP_ENV}, dsn set: {bool(settings.SENTRY_DSN)}")
        return
    try:
        init_sentry(
            dsn=settings.SENTRY_DSN,
            environment=settings.APP_ENV,
            release=settings.RELEASE,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            send_default_pii=settings.SENTRY_SEND_DEFAULT_PII
        )
        logger.info("Sentry monitoring initialized")
    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {str(e)}")


async def _prepare_blob_store() -> None:
    # Not fatal, uploads fail with UploadError until the bucket is reachable
    try:
        ready = await get_blob_store().async_ensure_bucket()
    except Exception as e:
        logger.error(f"Failed to initialize blob store: {str(e)}")
        ready = False
    if ready:
        logger.info(f"Blob store bucket '{settings.MINIO_BUCKET}' ready")
    else:
        logger.warning(f"Blob store bucket '{settings.MINIO_BUCKET}' unavailable - uploads will fail")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(
        level="DEBUG" if settings.APP_DEBUG else "INFO",
        app_name=settings.APP_NAME,
        enable_json=settings.APP_ENV == "prod",
        log_file="logs/app.log" if settings.APP_ENV == "prod" else None
    )
    logger.info(f"Starting {settings.APP_NAME} ({settings.APP_ENV})")
    _start_monitoring()

    # Fail fast: no MongoDB, no service
    await mongodb.connect(document_models=DOCUMENT_MODELS)
    await _prepare_blob_store()
    logger.info("Application startup completed")

    try:
        yield
    finally:
        await mongodb.disconnect()
        logger.info(f"{settings.APP_NAME} stopped")


async def _on_app_error(request: Request, exc: AppError):
    details = list(exc.errors or [])
    if exc.field:
        details.append({"code": exc.code, "message": exc.message, "field": exc.field})
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed - {exc.code}: {exc.message}")
    return error(exc.message, exc.status_code, code=exc.code, details=details)


async def _on_http_error(request: Request, exc: StarletteHTTPException):
    return error(str(exc.detail), exc.status_code, headers=getattr(exc, "headers", None))


async def _on_validation_error(request: Request, exc: RequestValidationError):
    details = [
        {
            "code": item.get("type", "validation_error"),
            "message": item.get("msg", ""),
            "field": ".".join(str(part) for part in item.get("loc", []) if part not in ("body", "query", "path", "form")) or None,
        }
        for item in exc.errors()
    ]
    return error("Validation error", status.HTTP_422_UNPROCESSABLE_ENTITY, code="validation_error", details=details)


def _install_scalar(app: FastAPI) -> None:
    @app.get("/scalar", include_in_schema=False)
    async def scalar_html():
        return get_scalar_api_reference(openapi_url=app.openapi_url, title=settings.APP_NAME)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Multi-user cloud file storage API: folders, files, tags and activity",
        version=API_VERSION,
        debug=settings.APP_DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if settings.APP_DEBUG else None,
        redoc_url="/redoc" if settings.APP_DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
        expose_headers=settings.CORS_EXPOSE_HEADERS,
    )

    app.add_exception_handler(AppError, _on_app_error)
    app.add_exception_handler(StarletteHTTPException, _on_http_error)
    app.add_exception_handler(RequestValidationError, _on_validation_error)

    for router, name in ROUTERS:
        app.include_router(router, prefix=f"/api/v1/{name}")

    if settings.APP_ENV == "dev":
        _install_scalar(app)

    @app.get("/health", response_model=HealthCheck, tags=["Health"])
    async def health():
        healthy = await mongodb.ping()
        return HealthCheck(status="ok" if healthy else "degraded", version=API_VERSION)

    return app
