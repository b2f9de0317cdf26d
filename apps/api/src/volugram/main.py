"""
Volugram API - Application Entry Point

Startup order: Redis (optional, rate limiting), database, token registries,
scheduler (expired token sweep). Outside production a failing dependency is
reported and startup continues.
"""

import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from volugram.api import api_router
from volugram.core.config import settings
from volugram.core.database import close_db, init_db
from volugram.core.redis import close_redis, init_redis
from volugram.core.scheduler import clear_jobs, start_scheduler, stop_scheduler
from volugram.modules.auth.jobs import build_token_registries, register_auth_jobs

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


async def _start(label: str, step: Callable[[], Awaitable[object]]) -> None:
    try:
        await step()
    except Exception as e:
        print(f"[FAIL] {label}: {e}")
        if settings.is_production:
            raise
    else:
        print(f"[OK] {label}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    print(f"Starting Volugram API ({settings.python_env})")

    await _start("Redis", init_redis)
    await _start("Database", init_db)

    # One pair of registries per process; links do not survive a restart
    registries = build_token_registries()
    app.state.token_registries = registries
    register_auth_jobs(registries)

    await _start("Scheduler", start_scheduler)

    yield

    print("Shutting down Volugram API")
    await stop_scheduler()
    clear_jobs()
    await close_redis()
    await close_db()
    print("[OK] Shutdown complete")


app = FastAPI(
    title="Volugram API",
    description="Volunteer hour submissions, review and certificates",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    return {"message": "Volugram API", "environment": settings.python_env}


@app.get("/api/v1/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "healthy"}


@app.get("/api/v1/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    """Readiness probe."""
    return {"status": "ready"}
