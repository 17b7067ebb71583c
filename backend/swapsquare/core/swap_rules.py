"""Swap State Machine: explicit transition table plus the coupled item-lock plan.

Invariants:
    - Pending -> {Accepted, Rejected, Canceled}; Accepted -> Withdrawn; nothing else
    - accept/reject belong to the recipient, cancel/withdraw to the proposer
    - Authorization is checked before state; both checks happen before any change
    - A Pending swap holds a lock on its offered item only; Accepted holds both;
      terminal swaps hold nothing
    - Releasing a lock never touches an item locked by a different swap

Design Decisions:
    - (status, action) -> status dict over if/elif chains: every legal edge visible
    - plan_* functions return a TransitionPlan; the caller persists it, so the
      whole decision is made before the first store write
"""

from dataclasses import dataclass, field, replace

from swapsquare.core.domain_types import (
    ItemId, SwapAction, SwapId, SwapRole, SwapStatus, Timestamp, UserId,
)
from swapsquare.core.entities import Item, Swap
from swapsquare.core.errors import (
    ErrorContext, ForbiddenError, InvalidStateError, InvalidSwapError,
    ItemUnavailableError, ResourceNotFoundError,
)
from swapsquare.core.item_locks import held_item_ids, lock_item, release_item


TRANSITIONS: dict[tuple[SwapStatus, SwapAction], SwapStatus] = {
    (SwapStatus.PENDING, SwapAction.ACCEPT): SwapStatus.ACCEPTED,
    (SwapStatus.PENDING, SwapAction.REJECT): SwapStatus.REJECTED,
    (SwapStatus.PENDING, SwapAction.CANCEL): SwapStatus.CANCELED,
    (SwapStatus.ACCEPTED, SwapAction.WITHDRAW): SwapStatus.WITHDRAWN,
}

ACTION_ROLES: dict[SwapAction, SwapRole] = {
    SwapAction.ACCEPT: SwapRole.RECIPIENT,
    SwapAction.REJECT: SwapRole.RECIPIENT,
    SwapAction.CANCEL: SwapRole.PROPOSER,
    SwapAction.WITHDRAW: SwapRole.PROPOSER,
}

_FORBIDDEN_MESSAGES: dict[SwapAction, str] = {
    SwapAction.ACCEPT: "Only the recipient of a swap can accept it",
    SwapAction.REJECT: "Only the recipient of a swap can reject it",
    SwapAction.CANCEL: "Only the proposer of a swap can cancel it",
    SwapAction.WITHDRAW: "Only the proposer of a swap can withdraw from it",
}


@dataclass(frozen=True)
class TransitionPlan:
    """Result of a legal swap operation, ready to be persisted.

    acquired: items newly locked to the swap (persist before the swap).
    released: items unlocked by the swap (persist after the swap).
    """
    swap: Swap
    acquired: list[Item] = field(default_factory=list)
    released: list[Item] = field(default_factory=list)

    @property
    def changed_items(self) -> list[Item]:
        return self.acquired + self.released


def required_party(swap: Swap, action: SwapAction) -> UserId:
    """User id allowed to perform `action` on `swap`."""
    if ACTION_ROLES[action] is SwapRole.RECIPIENT:
        return swap.to_user_id
    return swap.from_user_id


def next_status(swap: Swap, action: SwapAction) -> SwapStatus:
    """Look up the target status or raise InvalidStateError."""
    target = TRANSITIONS.get((swap.status, action))
    if target is None:
        raise InvalidStateError(
            action.value, swap.status.value,
            ErrorContext(swap_id=swap.id),
        )
    return target


def check_actor(swap: Swap, action: SwapAction, actor_id: str) -> None:
    """Raise ForbiddenError unless actor is the party that owns `action`."""
    if actor_id != required_party(swap, action):
        raise ForbiddenError(
            _FORBIDDEN_MESSAGES[action],
            ErrorContext(user_id=actor_id, swap_id=swap.id),
        )


def plan_proposal(
    swap_id: SwapId,
    proposer_id: UserId,
    offered: Item,
    requested: Item,
    now: Timestamp,
) -> TransitionPlan:
    """Validate a proposal and build the Pending swap plus the offered-item lock.

    The requested item is left untouched: it may collect several pending
    proposals, and only acceptance commits it.
    """
    ctx = ErrorContext(user_id=proposer_id, item_id=offered.id)
    if offered.owner_id != proposer_id:
        raise ForbiddenError("You can only offer your own items", ctx)
    if requested.owner_id == proposer_id:
        raise InvalidSwapError("You can't swap with your own item", ctx)
    if offered.is_locked:
        raise ItemUnavailableError(offered.id, ctx)

    swap = Swap(
        id=swap_id,
        from_user_id=proposer_id,
        to_user_id=requested.owner_id,
        offered_item_id=offered.id,
        requested_item_id=requested.id,
        status=SwapStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    return TransitionPlan(swap=swap, acquired=[lock_item(offered, swap_id)])


def plan_transition(
    swap: Swap,
    action: SwapAction,
    actor_id: str,
    items: dict[ItemId, Item],
    now: Timestamp,
) -> TransitionPlan:
    """Validate `action` on `swap` and compute the swap and item changes.

    `items` must contain every item the swap references that still exists.
    Raises ForbiddenError, InvalidStateError, ItemUnavailableError or
    ResourceNotFoundError (item to lock was deleted); on any failure nothing
    has been changed.
    """
    check_actor(swap, action, actor_id)
    target = next_status(swap, action)
    updated = replace(swap, status=target, updated_at=now)

    before = set(held_item_ids(swap))
    after = set(held_item_ids(updated))

    acquired = []
    for item_id in _ordered(swap, after - before):
        item = items.get(item_id)
        if item is None:
            raise ResourceNotFoundError("Item", item_id, ErrorContext(swap_id=swap.id))
        acquired.append(lock_item(item, swap.id))

    released = []
    for item_id in _ordered(swap, before - after):
        item = items.get(item_id)
        if item is None:
            continue
        freed = release_item(item, swap.id)
        if freed is not item:
            released.append(freed)

    return TransitionPlan(swap=updated, acquired=acquired, released=released)


def _ordered(swap: Swap, item_ids: set[ItemId]) -> list[ItemId]:
    """Offered item first, then requested: deterministic write order."""
    return [
        i for i in (swap.offered_item_id, swap.requested_item_id)
        if i in item_ids
    ]
