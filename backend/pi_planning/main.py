"""FastAPI application entry point."""
import logging

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pi_planning.config import get_settings
from pi_planning.routers import budget, calendar, capacity, costs, scope, sprint_metrics

settings = get_settings()

logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

app = FastAPI(
    title="PI Planning Capacity & Cost Engine",
    description="Capacity, cost derivation, budget rollups and sprint metrics per Program Increment",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(calendar.router)
app.include_router(capacity.router)
app.include_router(costs.router)
app.include_router(budget.router)
app.include_router(scope.router)
app.include_router(sprint_metrics.router)

logger.info("app_configured", env=settings.app_env)


@app.get("/health")
async def health():
    return {"status": "ok"}
