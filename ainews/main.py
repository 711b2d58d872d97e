from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from ainews import __version__
from ainews.config import settings
from ainews.models import init_db
from ainews.routes.admin_routes import router as admin_router
from ainews.routes.articles_api import router as news_router
from ainews.routes.events_api import router as events_router
from ainews.services.scheduler import content_scheduler
from ainews.services.source_registry import source_registry

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - database, source registry, scheduler"""
    logger.info("🚀 Starting AI news ingestion backend...")
    init_db()
    source_registry.seed_defaults()

    if settings.SCHEDULER_ENABLED:
        content_scheduler.start()
        logger.info("✅ Scheduler started - ingestion enabled!")
    else:
        logger.info("⏸️ Scheduler disabled (SCHEDULER_ENABLED=false)")

    yield

    logger.info("🛑 Shutting down...")
    content_scheduler.stop()


app = FastAPI(
    title="AI News Ingestion API",
    description="Multi-source AI news and events ingestion with translation",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(news_router)
app.include_router(events_router)
app.include_router(admin_router)


@app.get("/")
async def root():
    return {
        "message": "AI News Ingestion API",
        "version": __version__,
        "endpoints": {
            "health": "/health",
            "news": "/api/news",
            "events": "/api/events",
            "scheduler": "/api/scheduler/status",
        }
    }


@app.get("/health")
async def health_check():
    from ainews.errors import PersistenceUnavailable
    from ainews.services.storage import news_storage

    try:
        news_storage.ping()
        database = "connected"
    except PersistenceUnavailable:
        database = "unavailable"

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "services": {
            "claude": "configured" if settings.ANTHROPIC_API_KEY else "not configured",
            "database": database,
            "scheduler": "running" if content_scheduler.scheduler.running else "stopped",
        }
    }


@app.get("/api/scheduler/status")
async def scheduler_status():
    return {
        "running": content_scheduler.scheduler.running,
        "jobs": content_scheduler.get_jobs()
    }
