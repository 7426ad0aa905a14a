from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError as PydanticValidationError

from puremetrics.api.routes import bp, fitness, health, metrics, notes, nutrition, sync
from puremetrics.config import Settings, get_settings
from puremetrics.core.error_handlers import (
    generic_exception_handler,
    puremetrics_exception_handler,
    pydantic_validation_handler,
)
from puremetrics.core.exceptions import PureMetricsException
from puremetrics.core.logging import get_logger, setup_logging
from puremetrics.core.middleware import RequestLoggingMiddleware
from puremetrics.database import SessionLocal, init_db
from puremetrics.services.data_manager import DataManager
from puremetrics.services.events import StateObserver
from puremetrics.services.firestore import FirestoreRemote
from puremetrics.services.remote import OfflineRemote, RemoteStore
from puremetrics.services.storage import LocalStore

settings = get_settings()

# Initialize structured logging
setup_logging(debug=settings.debug, level=settings.log_level)
logger = get_logger(__name__)


def build_remote(settings: Settings) -> RemoteStore:
    if settings.remote_configured:
        return FirestoreRemote(settings)
    logger.warning("remote_not_configured", reason="firebase_project_id or firebase_api_key missing")
    return OfflineRemote()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("application_startup", app_name=settings.app_name)
    init_db()
    logger.info("database_initialized")

    app.state.manager = DataManager(
        store=LocalStore(SessionLocal),
        remote=build_remote(settings),
        observer=StateObserver(),
        settings=settings,
    )

    yield

    # Shutdown: let an in-flight push finish before the loop goes away
    await app.state.manager.wait_for_sync()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.app_name,
    description="Blood pressure, fitness and nutrition tracking with cloud sync",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

app.add_middleware(RequestLoggingMiddleware)

# Register exception handlers
app.add_exception_handler(PureMetricsException, puremetrics_exception_handler)
app.add_exception_handler(PydanticValidationError, pydantic_validation_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(bp.router, prefix="/api/bp", tags=["blood-pressure"])
app.include_router(metrics.router, prefix="/api/metrics", tags=["metrics"])
app.include_router(fitness.router, prefix="/api/fitness", tags=["fitness"])
app.include_router(nutrition.router, prefix="/api/nutrition", tags=["nutrition"])
app.include_router(notes.router, prefix="/api/notes", tags=["notes"])
app.include_router(sync.router, prefix="/api/sync", tags=["sync"])


@app.get("/")
async def root():
    return {"message": "PureMetrics API", "version": "0.1.0"}
