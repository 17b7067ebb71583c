"""Swap Engine: proposals, acceptance, rejection, cancellation and withdrawal.

Invariants:
    - Every operation decides completely (core/swap_rules.py) before its first write
    - Write order: acquired locks -> swap record -> message log -> released locks,
      so an item is never left unlocked while its swap still needs it
    - All five operations run under the repository mutation lock
    - A failed operation leaves items, swaps and messages unchanged

Design Decisions:
    - Store is not transactional across collections: consistency rests on the
      write order above; audit_locks() reports any item left behind by a crash
    - Pending proposals against an item that another swap commits are NOT
      auto-rejected; accepting one later fails with ItemUnavailableError
"""

import logging
from collections.abc import Callable

from swapsquare.core.domain_types import SwapAction, SwapId, Timestamp, UserId
from swapsquare.core.entities import LockViolation, Swap
from swapsquare.core.errors import ErrorContext, ResourceNotFoundError
from swapsquare.core.item_locks import find_lock_violations
from swapsquare.core.swap_rules import (
    TransitionPlan, plan_proposal, plan_transition,
)
from swapsquare.services.repository import Repository, new_id, now_ms

logger = logging.getLogger(__name__)


class SwapEngine:
    """The swap lifecycle state machine bound to a repository."""

    def __init__(
        self, repo: Repository, clock: Callable[[], Timestamp] = now_ms,
    ):
        self._repo = repo
        self._clock = clock

    async def propose(
        self, from_user_id: UserId, offered_item_id: str, requested_item_id: str,
    ) -> Swap:
        """Create a Pending swap and lock the offered item to it."""
        async with self._repo.mutation():
            items = await self._repo.items_by_id((offered_item_id, requested_item_id))
            for item_id in (offered_item_id, requested_item_id):
                if item_id not in items:
                    raise ResourceNotFoundError(
                        "Item", item_id,
                        ErrorContext(user_id=from_user_id, item_id=item_id),
                    )
            plan = plan_proposal(
                SwapId(new_id("s_")), from_user_id,
                items[offered_item_id], items[requested_item_id],
                self._clock(),
            )
            await self._repo.put_items(plan.acquired)
            await self._repo.add_swap(plan.swap)

        logger.info(
            "Swap proposed",
            extra={
                "user_id": from_user_id, "swap_id": plan.swap.id,
                "item_id": offered_item_id, "status": plan.swap.status.value,
            },
        )
        return plan.swap

    async def accept(self, swap_id: str, acting_user_id: str) -> Swap:
        """Recipient commits the requested item; opens the conversation."""
        return await self._apply(swap_id, SwapAction.ACCEPT, acting_user_id)

    async def reject(self, swap_id: str, acting_user_id: str) -> Swap:
        """Recipient declines; the offered item is released."""
        return await self._apply(swap_id, SwapAction.REJECT, acting_user_id)

    async def cancel(self, swap_id: str, acting_user_id: str) -> Swap:
        """Proposer retracts a pending offer; the offered item is released."""
        return await self._apply(swap_id, SwapAction.CANCEL, acting_user_id)

    async def withdraw(self, swap_id: str, acting_user_id: str) -> Swap:
        """Proposer backs out of an accepted swap; both items are released."""
        return await self._apply(swap_id, SwapAction.WITHDRAW, acting_user_id)

    async def get_swap(self, swap_id: str) -> Swap:
        swap = await self._repo.get_swap(swap_id)
        if swap is None:
            raise ResourceNotFoundError("Swap", swap_id, ErrorContext(swap_id=swap_id))
        return swap

    async def incoming(self, user_id: str) -> list[Swap]:
        return _newest_first(
            s for s in await self._repo.list_swaps() if s.to_user_id == user_id
        )

    async def outgoing(self, user_id: str) -> list[Swap]:
        return _newest_first(
            s for s in await self._repo.list_swaps() if s.from_user_id == user_id
        )

    async def audit_locks(self) -> list[LockViolation]:
        """Items whose lock state disagrees with the swaps; [] when consistent."""
        violations = find_lock_violations(
            await self._repo.list_items(), await self._repo.list_swaps(),
        )
        for v in violations:
            logger.warning(
                f"Lock invariant violated: {v.reason}",
                extra={"item_id": v.item_id, "swap_id": v.locked_by_swap_id},
            )
        return violations

    async def _apply(self, swap_id: str, action: SwapAction, actor_id: str) -> Swap:
        async with self._repo.mutation():
            swap = await self.get_swap(swap_id)
            items = await self._repo.items_by_id(
                (swap.offered_item_id, swap.requested_item_id),
            )
            plan = plan_transition(swap, action, actor_id, items, self._clock())
            await self._persist(plan, action)

        logger.info(
            f"Swap {action.value}: {swap.status.value} -> {plan.swap.status.value}",
            extra={
                "user_id": actor_id, "swap_id": swap.id,
                "status": plan.swap.status.value,
            },
        )
        return plan.swap

    async def _persist(self, plan: TransitionPlan, action: SwapAction) -> None:
        await self._repo.put_items(plan.acquired)
        await self._repo.put_swap(plan.swap)
        if action is SwapAction.ACCEPT:
            await self._repo.init_message_log(plan.swap.id)
        await self._repo.put_items(plan.released)


def _newest_first(swaps) -> list[Swap]:
    return sorted(swaps, key=lambda s: s.created_at, reverse=True)
