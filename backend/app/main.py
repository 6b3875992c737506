from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from slowapi.errors import RateLimitExceeded

from app.core.config import settings
from app.core.database import get_session_local, init_db, close_db
from app.core.exceptions import AcademiaError, error_response
from app.core.logging_config import logger
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from app.api.v1.router import api_router
from app import models  # noqa: F401  registers models on Base.metadata

APP_VERSION = "1.0.0"
PLACEHOLDER_SECRETS = ("", "CHANGE_ME")


def validate_critical_config() -> None:
    """Fail fast when secrets are missing; warn about degraded features"""
    errors = [
        name for name in ("DATABASE_URL", "SECRET_KEY", "JWT_SECRET_KEY")
        if getattr(settings, name) in PLACEHOLDER_SECRETS
    ]
    if errors:
        for name in errors:
            logger.critical(f"[Startup] {name} is not set or still the placeholder")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    if not settings.REDIS_URL:
        logger.warning("[Startup] REDIS_URL not set - rate limits are per process")
    if settings.ENVIRONMENT == "production" and settings.DEBUG:
        logger.warning("[Startup] DEBUG is on in production - error messages are exposed")

    logger.info(
        f"[Startup] Configuration ok (academic year {settings.CURRENT_ACADEMIC_YEAR}, "
        f"currency {settings.DEFAULT_CURRENCY})"
    )


async def ensure_database_ready() -> bool:
    """Create the schema on first start"""
    try:
        async with get_session_local()() as session:
            try:
                await session.execute(text("SELECT 1 FROM schools LIMIT 1"))
                return True
            except SQLAlchemyError:
                logger.warning("[Startup] Schema not found, creating tables")
        await init_db()
        logger.info("[Startup] Tables created")
        return True
    except SQLAlchemyError as e:
        logger.error(f"[Startup] Database not reachable: {e}")
        return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} {APP_VERSION} ({settings.ENVIRONMENT}, API {settings.API_VERSION})")
    validate_critical_config()
    if not await ensure_database_ready():
        logger.warning("[Startup] Database not ready - requests will fail until it is")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Multi-tenant school management: administration, student portal and mobile apps",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False  # 307s on trailing slashes break CORS preflight
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Last added runs first: CORS wraps everything, logging sees the final status
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_UPLOAD_SIZE)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


@app.exception_handler(AcademiaError)
async def academia_exception_handler(request: Request, exc: AcademiaError):
    if exc.http_status >= 500:
        logger.error(f"{exc.__class__.__name__}: {exc.message}", exc_info=True)
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=error_response(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Body/query validation failures use the same envelope as domain errors"""
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": {
                "code": "REQUEST_VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": {"errors": jsonable_encoder(exc.errors())},
            },
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": "INTERNAL_ERROR",
                "message": str(exc) if settings.DEBUG else "An error occurred",
                "details": {},
            },
        }
    )


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": APP_VERSION,
        "docs": "/docs",
        "health": "/health"
    }


app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")


def run():
    """Console entry point"""
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    run()
