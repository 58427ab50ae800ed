# ============================================================================
# FastAPI Application Entry Point
# ============================================================================
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from app.config import get_settings
from app.core.exceptions import RailQuizException

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown"""
    logger.info("🚆 Starting RailQuiz Revision...")

    from app.models import Category, Question, RevisionSession  # noqa: F401

    # Now import database components
    from app.core.database import engine, Base

    # Initialize database tables
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✅ Database tables created/verified")
    except Exception as e:
        logger.error(f"❌ Database initialization failed: {e}")
        raise

    # Redis holds in-flight revisions; sessions fail with 5xx until it is back
    try:
        from app.core.redis import redis_client
        await redis_client.ping()
        logger.info("✅ Redis connected")
    except Exception as e:
        logger.warning(f"⚠️ Redis connection failed: {e}")

    yield

    # Shutdown
    logger.info("👋 Shutting down...")
    from app.core.database import engine
    await engine.dispose()
    from app.core.redis import redis_client
    await redis_client.aclose()

app = FastAPI(
    title=settings.APP_NAME,
    description="Revision Mode backend for railway-certification exam training",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception Handler
@app.exception_handler(RailQuizException)
async def railquiz_exception_handler(request: Request, exc: RailQuizException):
    if exc.status_code >= 500:
        logger.warning(f"{exc.error_code} on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code}
    )

# Health Check - Root level
@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "status": "running",
        "docs": "/docs",
        "health": "/health"
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy", "app": settings.APP_NAME}

from app.api.v1.router import api_router

app.include_router(api_router, prefix=settings.API_V1_PREFIX)
logger.info(f"✅ API router mounted at {settings.API_V1_PREFIX}")
