"""
Health check routes.
Probes for load-balancer liveness/readiness.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from sqlalchemy import text
from datetime import datetime
import time
import logging

from travel_search.db.database import get_db
from travel_search.db.repositories import ProductRepository
from travel_search.core.rate_limiting import limiter, HEALTH_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

_STARTUP_TIME = time.time()


@router.get("/")
@limiter.limit(HEALTH_LIMIT)
def health_check(request: Request, db: Session = Depends(get_db)):
    """Database connectivity, active product count, uptime. Never raises."""
    health = {
        "status": "healthy",
        "database": "unavailable",
        "active_products": 0,
        "uptime_seconds": int(time.time() - _STARTUP_TIME),
        "timestamp": datetime.utcnow().isoformat(),
    }

    if db is None:
        health["status"] = "degraded"
        return health

    try:
        health["active_products"] = ProductRepository(db).count_active()
        health["database"] = "available"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health["status"] = "degraded"

    return health


@router.get("/ready")
@limiter.limit(HEALTH_LIMIT)
def readiness_check(request: Request, db: Session = Depends(get_db)):
    """ready=True only when the database answers."""
    if db is None:
        return {"ready": False, "timestamp": datetime.utcnow().isoformat()}
    try:
        db.execute(text("SELECT 1"))
        return {"ready": True, "timestamp": datetime.utcnow().isoformat()}
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return {"ready": False, "timestamp": datetime.utcnow().isoformat()}


@router.get("/live")
async def liveness_check():
    return {"alive": True, "uptime_seconds": int(time.time() - _STARTUP_TIME)}
