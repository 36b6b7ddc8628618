# app/main.py

import sys
import asyncio
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.config import settings

# --- Configure logging FIRST ---
LOG_LEVEL = settings.LOG_LEVEL

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(name)s:%(levelname)s] %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler("app.log", mode="a")
    ]
)

logger = logging.getLogger("repforge")
logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

# Keep uvicorn in step with the app
for name in ("uvicorn.error", "uvicorn.access", "fastapi"):
    logging.getLogger(name).setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

logger.info(f"Logging configured at {LOG_LEVEL} level")

# --- Routers ---
from app.api.exercises  import router as exercises_router
from app.api.sessions   import router as sessions_router
from app.api.execution  import router as execution_router
from app.api.photos     import router as photos_router
from app.api.analytics  import router as analytics_router

# --- Create FastAPI app ---
app = FastAPI(
    title       = "Repforge API",
    version     = "1.0.0",
    description = "Workout sessions, guided execution, progress photos and training analytics"
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    logger.info(f"📥 Incoming request: {request.method} {request.url.path}")

    if logger.isEnabledFor(logging.DEBUG):
        body = await request.body()
        if body:
            logger.debug(f"Body size: {len(body)} bytes")
            content_type = request.headers.get("content-type", "")
            # Multipart uploads are image bytes
            if len(body) < 500 and not content_type.startswith("multipart/"):
                try:
                    logger.debug(f"Body: {body.decode('utf-8')}")
                except UnicodeDecodeError:
                    logger.debug("Body: <binary data>")

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(f"✅ Request completed in {process_time:.3f}s with status {response.status_code}")

    return response

# --- Validation-error handler (logs raw body + errors) ---
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    raw_body = await request.body()
    try:
        shown = raw_body.decode("utf-8") if raw_body else "No body"
    except UnicodeDecodeError:
        shown = f"<{len(raw_body)} bytes of binary data>"
    logger.error(
        f"\n❗️ Validation error for {request.url.path}\n"
        f"Raw body was:\n{shown}\n"
        f"Errors:\n{exc.errors()!r}"
    )
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())},
    )

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins     = settings.CORS_ORIGINS,
    allow_credentials = True,
    allow_methods     = ["*"],
    allow_headers     = ["*"],
)

# --- Include all routers ---
app.include_router(exercises_router)
app.include_router(sessions_router)
app.include_router(execution_router)
app.include_router(photos_router)
app.include_router(analytics_router)

# --- Startup event: env checks, Redis ---
@app.on_event("startup")
async def startup_event():
    logger.info("🚀 Starting Repforge API")

    env_ok = {
        "DATABASE_URL":       bool(settings.DATABASE_URL),
        "PHOTO_STORAGE_PATH": settings.PHOTO_STORAGE_PATH,
        "EXECUTION_STORE":    settings.EXECUTION_STORE,
    }
    logger.info(f"📋 Env configuration: {env_ok}")

    if settings.EXECUTION_STORE == "redis":
        from app.core.redis import redis_client

        try:
            logger.info("🔄 Testing Redis connection...")
            await asyncio.wait_for(redis_client.ping(), timeout=5.0)
            logger.info("✅ Redis connection OK")
        except asyncio.TimeoutError:
            logger.warning("⚠️  Redis connection timeout - live workouts will fail until it is reachable")
        except Exception as e:
            logger.warning(f"⚠️  Redis connection failed: {e} - live workouts will fail until it is reachable")

    logger.info("🎉 Application startup complete!")

# --- Root & health endpoints ---
@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "Welcome to Repforge API",
        "status":  "online",
        "version": app.version,
        "docs":    "/docs"
    }

@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy"}
