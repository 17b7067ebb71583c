"""Swap Schemas: proposal request and swap responses."""

from pydantic import BaseModel, Field

from swapsquare.core.domain_types import SwapStatus
from swapsquare.core.entities import LockViolation, Swap


class SwapCreate(BaseModel):
    """Proposal: offer one of my items for someone else's item."""
    offered_item_id: str = Field(min_length=1)
    requested_item_id: str = Field(min_length=1)


class SwapResponse(BaseModel):
    id: str
    from_user_id: str
    to_user_id: str
    offered_item_id: str
    requested_item_id: str
    status: SwapStatus
    created_at: int
    updated_at: int

    @classmethod
    def from_entity(cls, swap: Swap) -> "SwapResponse":
        return cls(
            id=swap.id,
            from_user_id=swap.from_user_id,
            to_user_id=swap.to_user_id,
            offered_item_id=swap.offered_item_id,
            requested_item_id=swap.requested_item_id,
            status=swap.status,
            created_at=swap.created_at,
            updated_at=swap.updated_at,
        )


class LockViolationResponse(BaseModel):
    item_id: str
    locked_by_swap_id: str | None
    reason: str
    details: dict = {}

    @classmethod
    def from_entity(cls, v: LockViolation) -> "LockViolationResponse":
        return cls(
            item_id=v.item_id,
            locked_by_swap_id=v.locked_by_swap_id,
            reason=v.reason,
            details=dict(v.details),
        )
