"""Conversation Rules: messaging gate and conversation projections.

Invariants:
    - Messages can be posted only while the swap is exactly Accepted
    - Only the two parties of a swap may read or write its conversation
    - Sequence position is authoritative for message order, not ts

Design Decisions:
    - Conversation list derives from swaps + message logs; no separate storage
"""

from swapsquare.core.domain_types import SwapStatus
from swapsquare.core.entities import Message, Swap
from swapsquare.core.errors import (
    ErrorContext, ForbiddenError, NotAcceptedError, ValidationError,
)


def check_party(swap: Swap, user_id: str) -> None:
    if not swap.is_party(user_id):
        raise ForbiddenError(
            "Only the parties of a swap can access its conversation",
            ErrorContext(user_id=user_id, swap_id=swap.id),
        )


def check_can_post(swap: Swap, sender_id: str) -> None:
    """Raise unless `sender_id` may post to `swap` right now."""
    check_party(swap, sender_id)
    if swap.status is not SwapStatus.ACCEPTED:
        raise NotAcceptedError(
            swap.status.value, ErrorContext(user_id=sender_id, swap_id=swap.id),
        )


def normalize_text(text: str | None) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError("Message cannot be empty", field="text")
    return cleaned


def accepted_swaps_for(swaps: list[Swap], user_id: str) -> list[Swap]:
    """Accepted swaps the user is party to, most recently updated first."""
    return sorted(
        (s for s in swaps if s.status is SwapStatus.ACCEPTED and s.is_party(user_id)),
        key=lambda s: s.updated_at,
        reverse=True,
    )


def last_message(log: list[Message]) -> Message | None:
    return log[-1] if log else None
