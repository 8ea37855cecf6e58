"""
FastAPI application entry point for the formulation modeling backend.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from formulation.config import get_settings
from formulation.core.errors import DuplicateCodeError, FormulationError
from formulation.db.database import Database
from formulation.db.seed import seed_default_samples
from contextlib import asynccontextmanager
import logging

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(f"Starting {settings.app_name} API")

    database = Database(settings.database_url, echo=settings.database_echo).open()
    app.state.database = database

    if settings.seed_default_samples:
        db = database.session()
        try:
            seeded = seed_default_samples(db, settings.default_sample_group)
            if seeded:
                logger.info(f"Seeded {seeded} reference samples")
        except Exception as e:
            logger.error(f"Failed to seed default samples: {e}")
            db.rollback()
        finally:
            db.close()

    yield

    # Shutdown
    database.close()
    logger.info(f"Shutting down {settings.app_name} API")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Backend API for cigarette auxiliary-material design modeling",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FormulationError)
async def formulation_error_handler(request: Request, exc: FormulationError):
    """Report domain errors with the status code they carry."""
    content = {"detail": exc.message, "error": type(exc).__name__}
    if isinstance(exc, DuplicateCodeError):
        content.update(code=exc.code, group_name=exc.group_name, row=exc.row)
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=content)


# Import and include routers
from formulation.api import samples, coefficients, simulation, recommendation, history

# Include all API routers with /api prefix
app.include_router(samples.router, prefix="/api")
app.include_router(coefficients.router, prefix="/api")
app.include_router(simulation.router, prefix="/api")
app.include_router(recommendation.router, prefix="/api")
app.include_router(history.router, prefix="/api")


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    try:
        db = request.app.state.database.session()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()

        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "database": "connected"
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "error": str(e)
        }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"{settings.app_name} API",
        "version": settings.app_version,
        "docs": "/api/docs",
        "endpoints": {
            "samples": "/api/samples",
            "coefficients": "/api/coefficients",
            "simulation": "/api/simulation",
            "recommendation": "/api/recommendation",
            "history": "/api/history"
        }
    }
