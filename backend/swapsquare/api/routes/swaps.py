"""Swap Routes: propose and resolve swaps.

Invariants:
    - Actor and state checks happen in the engine; routes only translate
    - Each action route returns the swap in its new state
"""

from fastapi import APIRouter, Depends, status

from swapsquare.api.dependencies import get_current_user, get_marketplace
from swapsquare.core.entities import UserRef
from swapsquare.core.conversation_rules import check_party
from swapsquare.schemas.swap import SwapCreate, SwapResponse
from swapsquare.services.marketplace import Marketplace

router = APIRouter(prefix="/api/v1/swaps", tags=["swaps"])


@router.post(
    "", response_model=SwapResponse, status_code=status.HTTP_201_CREATED,
)
async def propose_swap(
    body: SwapCreate,
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    swap = await market.swaps.propose(
        user.id, body.offered_item_id, body.requested_item_id,
    )
    return SwapResponse.from_entity(swap)


@router.get("/incoming", response_model=list[SwapResponse])
async def incoming_swaps(
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    return [SwapResponse.from_entity(s) for s in await market.swaps.incoming(user.id)]


@router.get("/outgoing", response_model=list[SwapResponse])
async def outgoing_swaps(
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    return [SwapResponse.from_entity(s) for s in await market.swaps.outgoing(user.id)]


@router.get("/{swap_id}", response_model=SwapResponse)
async def get_swap(
    swap_id: str,
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    swap = await market.swaps.get_swap(swap_id)
    check_party(swap, user.id)
    return SwapResponse.from_entity(swap)


@router.post("/{swap_id}/accept", response_model=SwapResponse)
async def accept_swap(
    swap_id: str,
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    return SwapResponse.from_entity(await market.swaps.accept(swap_id, user.id))


@router.post("/{swap_id}/reject", response_model=SwapResponse)
async def reject_swap(
    swap_id: str,
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    return SwapResponse.from_entity(await market.swaps.reject(swap_id, user.id))


@router.post("/{swap_id}/cancel", response_model=SwapResponse)
async def cancel_swap(
    swap_id: str,
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    return SwapResponse.from_entity(await market.swaps.cancel(swap_id, user.id))


@router.post("/{swap_id}/withdraw", response_model=SwapResponse)
async def withdraw_swap(
    swap_id: str,
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    return SwapResponse.from_entity(await market.swaps.withdraw(swap_id, user.id))
