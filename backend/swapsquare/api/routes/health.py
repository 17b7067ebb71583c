"""Health & Readiness Probes: liveness, readiness and lock audit endpoints.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the store is unreachable (readiness)
    - GET /health/locks requires a signed-in user; [] when the lock invariant holds

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from swapsquare.api.dependencies import get_current_user, get_marketplace
from swapsquare.core.entities import UserRef
from swapsquare.schemas.swap import LockViolationResponse
from swapsquare.services.marketplace import Marketplace

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "swapsquare-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(market: Marketplace = Depends(get_marketplace)):
    """Readiness probe: includes store connectivity."""
    store_ok = await market.repo.health_check()
    if not store_ok:
        logger.error("Readiness check failed: store unreachable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "store_unavailable",
            },
        )
    return {"status": "ready", "checks": {"store": "healthy"}}


@router.get("/locks", response_model=list[LockViolationResponse])
async def lock_audit(
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    """Items whose lock state disagrees with their swap."""
    violations = await market.swaps.audit_locks()
    return [LockViolationResponse.from_entity(v) for v in violations]
