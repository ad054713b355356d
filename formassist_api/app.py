from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from formassist import __version__
from formassist.config import get_settings
from formassist.utils.logger import get_logger, setup_logging
from formassist_api.deps import close_pipeline
from formassist_api.routers import ask_router, health_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(level=settings.log_level, log_file=settings.log_file)
    logger.info("FormAssist API starting up...")
    logger.info(f"  Table API: {settings.table_api.base_url or 'not configured'}")
    logger.info(f"  LLM API base: {settings.llm.api_base}")
    logger.info(f"  Default model: {settings.llm.default_model}")

    yield

    logger.info("FormAssist API shutting down...")
    await close_pipeline()


def create_app() -> FastAPI:
    app = FastAPI(
        title="FormAssist API",
        description="Ask questions about form platform data tables",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(ask_router, prefix="/api/v1", tags=["Ask"])

    return app


app = create_app()
