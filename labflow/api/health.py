"""Health check and monitoring endpoints"""

from fastapi import APIRouter
from labflow.db.session import engine, get_pool_stats

router = APIRouter(prefix="/api/health", tags=["health"])


def pool_status(stats: dict) -> str:
    """Map pool stats to not_pooled / healthy / warning / critical"""
    if not stats["pooled"]:
        return "not_pooled"
    if stats["utilization_percent"] >= 90:
        return "critical"
    if stats["utilization_percent"] >= 80:
        return "warning"
    return "healthy"


@router.get("/pool")
async def get_pool_health():
    """
    Connection pool status for the engine in use.

    Sized pools report their counts and utilization; SQLite reports only its
    dialect and pool class with status "not_pooled".
    """
    stats = get_pool_stats()
    return {"status": pool_status(stats), **stats}


@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "labflow-backend",
        "database": engine.dialect.name,
    }
