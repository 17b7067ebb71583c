"""Item Locks: acquire, release and audit the item <-> swap lock association.

Invariants:
    - An item is locked by at most one swap at a time
    - release_item only clears a lock held by the releasing swap (idempotent guard)
    - find_lock_violations returns [] iff every Locked item references a swap
      that currently holds it, and no Active item carries a swap reference

Design Decisions:
    - Return the same Item object when nothing changes: callers detect no-ops
      with an identity check instead of field comparison
"""

from swapsquare.core.domain_types import ItemId, SwapId, SwapStatus
from swapsquare.core.entities import Item, LockViolation, Swap
from swapsquare.core.errors import ErrorContext, ItemUnavailableError


def lock_item(item: Item, swap_id: SwapId) -> Item:
    """Lock `item` to `swap_id`. Raises ItemUnavailableError if another swap holds it."""
    if item.is_locked and item.locked_by_swap_id != swap_id:
        raise ItemUnavailableError(
            item.id, ErrorContext(item_id=item.id, swap_id=swap_id),
        )
    if item.is_locked:
        return item
    return item.locked_to(swap_id)


def release_item(item: Item, swap_id: SwapId) -> Item:
    """Unlock `item` if and only if `swap_id` is the swap holding it."""
    if not item.is_locked or item.locked_by_swap_id != swap_id:
        return item
    return item.unlocked()


def find_lock_violations(items: list[Item], swaps: list[Swap]) -> list[LockViolation]:
    """Scan all items against all swaps for lock-state inconsistencies."""
    by_id: dict[SwapId, Swap] = {s.id: s for s in swaps}
    violations = []
    for item in items:
        violation = _check_item(item, by_id)
        if violation is not None:
            violations.append(violation)
    return violations


def _check_item(item: Item, swaps: dict[SwapId, Swap]) -> LockViolation | None:
    if not item.is_locked:
        if item.locked_by_swap_id is not None:
            return LockViolation(
                item.id, item.locked_by_swap_id, "active_item_with_lock_reference",
            )
        return None

    if item.locked_by_swap_id is None:
        return LockViolation(item.id, None, "locked_without_swap")

    swap = swaps.get(item.locked_by_swap_id)
    if swap is None:
        return LockViolation(item.id, item.locked_by_swap_id, "swap_missing")
    if swap.status.is_terminal:
        return LockViolation(
            item.id, swap.id, "swap_terminal", {"status": swap.status.value},
        )
    if item.id not in held_item_ids(swap):
        return LockViolation(
            item.id, swap.id, "swap_does_not_hold_item",
            {"status": swap.status.value},
        )
    return None


def held_item_ids(swap: Swap) -> tuple[ItemId, ...]:
    """Items a swap in its current status holds locked."""
    if swap.status is SwapStatus.PENDING:
        return (swap.offered_item_id,)
    if swap.status is SwapStatus.ACCEPTED:
        return (swap.offered_item_id, swap.requested_item_id)
    return ()
