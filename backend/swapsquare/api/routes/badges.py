"""Badge Routes: navigation counters for the current user."""

from fastapi import APIRouter, Depends

from swapsquare.api.dependencies import get_current_user, get_marketplace
from swapsquare.core.entities import UserRef
from swapsquare.schemas.badge import BadgeResponse
from swapsquare.services.marketplace import Marketplace

router = APIRouter(prefix="/api/v1/badges", tags=["badges"])


@router.get("", response_model=BadgeResponse)
async def get_badges(
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    return BadgeResponse.from_entity(await market.badges.counts(user.id))
