"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from workhub.api.v1 import v1_router
from workhub.core.config import get_settings
from workhub.core.database import async_session_factory, dispose_db, init_db
from workhub.core.errors import register_exception_handlers
from workhub.core.middleware import setup_middleware
from workhub.services import roles

_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup: ensure tables exist, then seed roles / permissions
    await init_db()
    async with async_session_factory() as session:
        await roles.seed_security_data(session)
        await roles.seed_bootstrap_admin(session)
    logger.info("workhub started")
    yield
    await dispose_db()
    logger.info("workhub stopped")


app = FastAPI(
    title="WorkHub",
    version="0.1.0",
    description="Multi-tenant work management: tenants, employees, projects, boards, tasks",
    lifespan=lifespan,
)

setup_middleware(app)
register_exception_handlers(app)

# ── API routes ───────────────────────────────────────────────
app.include_router(v1_router)


@app.get("/health", tags=["system"])
async def health_check() -> dict:
    return {"status": "ok"}
