"""
Hostel Complaints API - application entry point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hostel_complaints.core.config import settings
from hostel_complaints.core.database import init_db, close_db
from hostel_complaints.core.exceptions import ComplaintServiceError
from hostel_complaints.core.logging_config import configure_logging
from hostel_complaints.api.v1.router import api_router
from hostel_complaints.services.drafts import draft_registry

logger = logging.getLogger("hostel_complaints")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    configure_logging()
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION} ({settings.ENVIRONMENT})")

    await init_db()
    logger.info("Database ready")

    if not settings.ai_available:
        logger.warning("AI classification unavailable, urgency falls back to keyword detection")

    yield

    logger.info("Shutting down")
    await draft_registry.shutdown()
    await close_db()


# FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    ## Hostel Complaints API

    Students report hostel problems; staff triage and resolve them.

    ### Features

    **Students:**
    - Complaint drafts with AI category/urgency suggestions while typing
    - Photo analysis with suggested repair steps
    - Keyword safety net for urgent issues when the AI is unavailable
    - Tracking and cancelling own complaints

    **Staff:**
    - Filterable complaint list with search
    - Status workflow (pending, in progress, resolved)
    - Dashboard counters
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API Router
app.include_router(api_router, prefix="/api/v1")


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """API status"""
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "status": "active"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "ai_available": settings.ai_available
    }


# Error handling
@app.exception_handler(ComplaintServiceError)
async def service_exception_handler(request: Request, exc: ComplaintServiceError):
    """Service errors carry their own status code and a stable error code"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "code": exc.code
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global error handler"""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": str(exc) if settings.DEBUG else "Internal Server Error"
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hostel_complaints.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
