from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ORIGINS
from .database import create_tables
from .errors import register_error_handlers
from .logging_config import setup_logging
from .routers import auth, tasks

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables on startup
    create_tables()
    logger.info("taskhub_started")
    yield


def create_app() -> FastAPI:
    setup_logging()

    application = FastAPI(
        title="Taskhub API",
        description="Hierarchical task management API with status workflow and reminders",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Configure CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(application)

    # Include routers
    application.include_router(auth.router, prefix="/api", tags=["auth"])
    application.include_router(tasks.router, prefix="/api", tags=["tasks"])

    @application.get("/")
    def read_root():
        return {"message": "Taskhub API"}

    @application.get("/health")
    def health_check():
        return {"status": "healthy"}

    return application


app = create_app()
