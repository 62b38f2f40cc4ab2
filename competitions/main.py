"""
Competition Engine - FastAPI Application

Provides a REST API for scheduling pools, tracking standings, running
elimination brackets and summarizing results.
"""

import logging
import threading
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .api.dependencies import get_client, get_competition_service
from .api.routes import router
from .clients.ratings import RatingsClient
from .jobs.ratings_refresh import start_background_refresh
from .services.competition_service import CompetitionService

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ============================================================================
# RATE LIMITING
# ============================================================================

class RateLimiter:
    """Simple rate limiter for the rating refresh endpoint."""

    def __init__(self, cooldown_seconds: int = 300):
        """
        Initialize rate limiter.

        Args:
            cooldown_seconds: Minimum seconds between allowed requests (default 5 min)
        """
        self.cooldown_seconds = cooldown_seconds
        self._last_request: Optional[datetime] = None
        self._lock = threading.Lock()

    def try_acquire(self) -> tuple[bool, int]:
        """
        Try to acquire rate limit.

        Returns:
            Tuple of (allowed: bool, wait_seconds: int)
            - If allowed, wait_seconds is 0
            - If not allowed, wait_seconds is how long to wait
        """
        with self._lock:
            now = datetime.now()

            if self._last_request is None:
                self._last_request = now
                return True, 0

            elapsed = (now - self._last_request).total_seconds()

            if elapsed >= self.cooldown_seconds:
                self._last_request = now
                return True, 0

            wait_seconds = int(self.cooldown_seconds - elapsed)
            return False, wait_seconds

    def reset(self) -> None:
        """Reset the rate limiter (for testing)."""
        with self._lock:
            self._last_request = None


# Rate limiter for forced rating refresh
refresh_rate_limiter = RateLimiter(cooldown_seconds=config.REFRESH_COOLDOWN_SECONDS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(f"Storage backend: {config.DB_TYPE}")
    stop_refresh = None
    if config.RATINGS_URL and config.RATINGS_BACKGROUND_REFRESH:
        stop_refresh = start_background_refresh()
    elif not config.RATINGS_URL:
        logger.info("RATINGS_URL not set; rating projections will be unavailable")
    logger.info("App is ready.")

    yield

    logger.info("Shutting down...")
    if stop_refresh is not None:
        stop_refresh.set()


app = FastAPI(
    title="Competition Engine",
    description="Pool play, standings, brackets and rating storylines for club competitions",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health(service: CompetitionService = Depends(get_competition_service)):
    """Health check endpoint."""
    healthy = service.repository.health_check()
    return {
        "status": "ok" if healthy else "degraded",
        "storage": config.DB_TYPE,
        "version": "1.0.0",
    }


@app.post("/api/ratings/refresh")
async def refresh_ratings(client: RatingsClient = Depends(get_client)):
    """
    Re-fetch the external rating table, bypassing the cache.

    Rate limited to once per 5 minutes to protect the upstream source.
    """
    allowed, wait_seconds = refresh_rate_limiter.try_acquire()
    if not allowed:
        return {
            "status": "rate_limited",
            "message": f"Please wait {wait_seconds} seconds before refreshing again",
            "retry_after": wait_seconds
        }

    try:
        table = await client.get_rating_table(force_refresh=True)
    except Exception as e:
        logger.error(f"Error refreshing ratings: {e}")
        raise HTTPException(status_code=500, detail="Failed to refresh ratings")

    return {
        "status": "refreshed",
        "message": f"Loaded {len(table)} team ratings",
        "teams": len(table)
    }


# Run with: uvicorn competitions.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
