"""Badge Projections: navigation counters derived from swaps and message logs.

Invariants:
    - Read-only projection: no state of its own
    - pending_incoming counts Pending swaps addressed to the user
    - unread counts accepted conversations whose LAST message was sent by
      someone else; there are no per-message read receipts

Design Decisions:
    - "Last sender is not me" proxy kept deliberately weak; an empty log is read
"""

from swapsquare.core.domain_types import SwapId, SwapStatus
from swapsquare.core.entities import BadgeCounts, Message, Swap
from swapsquare.core.conversation_rules import accepted_swaps_for, last_message


def pending_incoming_count(swaps: list[Swap], user_id: str) -> int:
    return sum(
        1 for s in swaps
        if s.to_user_id == user_id and s.status is SwapStatus.PENDING
    )


def unread_count(
    swaps: list[Swap], logs: dict[SwapId, list[Message]], user_id: str,
) -> int:
    unread = 0
    for swap in accepted_swaps_for(swaps, user_id):
        last = last_message(logs.get(swap.id, []))
        if last is not None and last.from_user_id != user_id:
            unread += 1
    return unread


def badge_counts(
    swaps: list[Swap], logs: dict[SwapId, list[Message]], user_id: str,
) -> BadgeCounts:
    return BadgeCounts(
        pending_incoming=pending_incoming_count(swaps, user_id),
        unread=unread_count(swaps, logs, user_id),
    )
