# Main application entry point
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api import health_router, notes_router
from .config import get_settings
from .core.exceptions import ServiceError
from .core.logging import LoggingMiddleware, get_logger, setup_logging
from .core.redis_client import get_redis_client
from .core.services.notification_service import get_notification_dispatcher
from .database import create_tables

# Setup logging first
setup_logging()
logger = get_logger("main")

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "Starting CollabNotes application",
        extra={"version": __version__, "environment": settings.environment, "debug": settings.debug},
    )

    redis_client = get_redis_client()
    try:
        await redis_client.connect()
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Notifications will be dropped.")

    dispatcher = get_notification_dispatcher()
    await dispatcher.start()

    # Allow tests to skip touching the real DB (e.g., when using SQLite in-memory)
    if os.getenv("COLLABNOTES_SKIP_LIFESPAN_DB") == "1":
        logger.info("Skipping DB table creation due to COLLABNOTES_SKIP_LIFESPAN_DB=1")
    else:
        try:
            await create_tables()
            logger.info("Database tables created/verified")
        except Exception as e:
            logger.error("Failed to create database tables", exc_info=e)
            raise

    yield

    logger.info("Shutting down CollabNotes application")
    await dispatcher.stop()
    try:
        await redis_client.disconnect()
    except Exception as e:
        logger.warning(f"Redis disconnect failed: {e}")


app = FastAPI(
    title="CollabNotes",
    description="Collaborative notes with sharing and live update notifications",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(include_debug=get_settings().debug),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())[1:])
        # validators raising ValueError carry the readable text in ctx
        ctx_error = (err.get("ctx") or {}).get("error")
        if ctx_error:
            text = str(ctx_error)
            messages.append(text)
        else:
            text = err.get("msg", "Invalid value")
            messages.append(f"{field}: {text}" if field else text)
        errors.append({"field": field, "message": text})
    message = "; ".join(messages)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": message or "Invalid request", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error",
        extra={"method": request.method, "path": request.url.path},
        exc_info=exc,
    )
    content = {"message": "Internal server error"}
    if get_settings().debug:
        content["error"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


# Include routers
app.include_router(notes_router, prefix="/api")
app.include_router(health_router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "CollabNotes API"}


# Basic unprefixed health endpoint for load balancers
@app.get("/health")
async def basic_health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("collabnotes.main:app", host=settings.host, port=settings.port, reload=settings.reload)
