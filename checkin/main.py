from contextlib import asynccontextmanager
from pathlib import Path

from alembic import command  # type: ignore
from alembic.config import Config
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from checkin.cache_config import init_cache, shutdown_cache
from checkin.config import settings
from checkin.database import engine
from checkin.routers import (
    attendance_router,
    attendees_router,
    facilitators_router,
    health_router,
)
from checkin.utils.logging import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def run_migrations() -> None:
    alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    command.upgrade(alembic_cfg, "head")


# Lifecycle Manager
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Server starting up... DB: %s", settings.DATABASE_URL.split("@")[-1])
    try:
        logger.info("Checking for database migrations...")
        run_migrations()
        logger.info("Database is up to date.")
    except Exception as exc:
        logger.warning("Migration warning: %s", exc)
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection established.")
    except (SQLAlchemyError, OSError) as exc:
        logger.critical("Database connection failed! %s", exc)

    await init_cache()

    yield

    logger.info("Server shutting down...")
    await shutdown_cache()
    await engine.dispose()


app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Register Routers ---
app.include_router(attendees_router)
app.include_router(attendance_router)
app.include_router(facilitators_router)
app.include_router(health_router)


def start():
    import uvicorn

    uvicorn.run(
        "checkin.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "docs": "/docs",
        "version": settings.VERSION,
    }
