from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from courseflow.api.courses import router as courses_router
from courseflow.api.courses import seed_sample_course
from courseflow.api.health import router as health_router
from courseflow.api.metrics_endpoint import router as metrics_router
from courseflow.api.progress import router as progress_router
from courseflow.core.config import SETTINGS
from courseflow.core.logging import setup_logging
from courseflow.db.engine import async_session_factory, lifespan_db
from courseflow.db.redis import lifespan_redis
from courseflow.middleware.metrics import MetricsMiddleware
from courseflow.middleware.request_context import (
    RequestContextFilter,
    RequestContextMiddleware,
)

# Configure logging before anything else runs.
setup_logging(
    SETTINGS.log_level,
    json_format=SETTINGS.log_json,
    filters=[RequestContextFilter()],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Nested so teardown runs in reverse order
    async with lifespan_db():
        async with lifespan_redis():
            yield


app = FastAPI(
    title="courseflow",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Last added runs first: RequestContext -> Metrics -> route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(courses_router)
app.include_router(progress_router)

if SETTINGS.is_dev and async_session_factory is None:
    seed_sample_course()

logger.info(
    "courseflow started  env=%s log_level=%s port=%d tz=%s docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.display_timezone,
    "on" if SETTINGS.is_dev else "off",
)
