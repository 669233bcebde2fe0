"""Health check endpoints"""
import time
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tokenledger import __version__
from tokenledger.api.deps import get_store
from tokenledger.store import TokenStore

router = APIRouter(prefix="/health", tags=["health"])

# Track startup time
STARTUP_TIME = time.time()


@router.get("")
def health_check():
    """Basic health check; 200 while the process is serving"""
    return {
        "status": "healthy",
        "service": "tokenledger",
        "version": __version__,
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/ready")
def readiness_check(store: TokenStore = Depends(get_store)):
    """
    Readiness check - verifies the token database answers

    Returns 200 if ready to serve traffic, 503 if not ready
    """
    start = time.time()
    reachable = store.ping()
    latency_ms = round((time.time() - start) * 1000, 2)

    if not reachable:
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "checks": {"database": False, "database_latency_ms": None},
            },
        )

    return {
        "status": "ready",
        "checks": {"database": True, "database_latency_ms": latency_ms},
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/live")
def liveness_check():
    """Liveness check for orchestrator probes"""
    return {
        "status": "alive",
        "uptime_seconds": round(time.time() - STARTUP_TIME, 2),
        "timestamp": datetime.utcnow().isoformat()
    }
