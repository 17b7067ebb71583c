"""Repository: typed CRUD over the four Persistent Store collections.

Invariants:
    - No business logic: every rule lives in core/ or the calling service
    - Reads return fresh entity records built from the current snapshot
    - Each write is a whole-collection read-modify-write of exactly one collection
    - mutation() serializes writers in this process (single writer per store)

Design Decisions:
    - asyncio.Lock as the single-writer guard: the store has no transactions
      across collections, so concurrent operations would interleave their
      read-modify-write cycles
    - Ids are opaque prefixed strings: "i_" items, "s_" swaps
"""

import asyncio
import time
import uuid
from collections.abc import Iterable

from swapsquare.core.domain_types import (
    Collection, ItemId, SwapId, Timestamp, UserId,
)
from swapsquare.core.entities import Item, Message, Profile, Swap
from swapsquare.core.repository_protocols import CollectionStore


def now_ms() -> Timestamp:
    return Timestamp(time.time_ns() // 1_000_000)


def new_id(prefix: str) -> str:
    return f"{prefix}{uuid.uuid4().hex}"


class Repository:
    """Entity-level access to items, swaps, message logs and profiles."""

    def __init__(self, store: CollectionStore):
        self._store = store
        self._write_lock = asyncio.Lock()

    def mutation(self) -> asyncio.Lock:
        """Hold for the whole read-decide-write sequence of one operation."""
        return self._write_lock

    async def health_check(self) -> bool:
        return await self._store.health_check()

    # ─── Items ───────────────────────────────────────────────────

    async def list_items(self) -> list[Item]:
        raw = await self._store.get(Collection.ITEMS)
        return [Item.from_dict(d) for d in raw]

    async def get_item(self, item_id: str) -> Item | None:
        for item in await self.list_items():
            if item.id == item_id:
                return item
        return None

    async def items_by_id(self, item_ids: Iterable[str]) -> dict[ItemId, Item]:
        wanted = set(item_ids)
        return {it.id: it for it in await self.list_items() if it.id in wanted}

    async def add_item(self, item: Item) -> None:
        raw = await self._store.get(Collection.ITEMS)
        raw.append(item.to_dict())
        await self._store.set(Collection.ITEMS, raw)

    async def put_items(self, items: Iterable[Item]) -> None:
        """Replace stored items by id. Unknown ids are ignored."""
        updates = {it.id: it.to_dict() for it in items}
        if not updates:
            return
        raw = await self._store.get(Collection.ITEMS)
        raw = [updates.get(d["id"], d) for d in raw]
        await self._store.set(Collection.ITEMS, raw)

    async def remove_item(self, item_id: str) -> None:
        raw = await self._store.get(Collection.ITEMS)
        await self._store.set(
            Collection.ITEMS, [d for d in raw if d["id"] != item_id],
        )

    # ─── Swaps ───────────────────────────────────────────────────

    async def list_swaps(self) -> list[Swap]:
        raw = await self._store.get(Collection.SWAPS)
        return [Swap.from_dict(d) for d in raw]

    async def get_swap(self, swap_id: str) -> Swap | None:
        for swap in await self.list_swaps():
            if swap.id == swap_id:
                return swap
        return None

    async def add_swap(self, swap: Swap) -> None:
        raw = await self._store.get(Collection.SWAPS)
        raw.append(swap.to_dict())
        await self._store.set(Collection.SWAPS, raw)

    async def put_swap(self, swap: Swap) -> None:
        raw = await self._store.get(Collection.SWAPS)
        raw = [swap.to_dict() if d["id"] == swap.id else d for d in raw]
        await self._store.set(Collection.SWAPS, raw)

    # ─── Messages ────────────────────────────────────────────────

    async def message_logs(self) -> dict[SwapId, list[Message]]:
        raw = await self._store.get(Collection.MESSAGES)
        return {
            SwapId(swap_id): [Message.from_dict(m) for m in log]
            for swap_id, log in raw.items()
        }

    async def has_message_log(self, swap_id: str) -> bool:
        raw = await self._store.get(Collection.MESSAGES)
        return swap_id in raw

    async def messages_for(self, swap_id: str) -> list[Message]:
        raw = await self._store.get(Collection.MESSAGES)
        return [Message.from_dict(m) for m in raw.get(swap_id, [])]

    async def init_message_log(self, swap_id: str) -> None:
        """Create an empty log for `swap_id`; an existing log is kept."""
        raw = await self._store.get(Collection.MESSAGES)
        if swap_id in raw:
            return
        raw[swap_id] = []
        await self._store.set(Collection.MESSAGES, raw)

    async def append_message(self, swap_id: str, message: Message) -> None:
        raw = await self._store.get(Collection.MESSAGES)
        raw.setdefault(swap_id, []).append(message.to_dict())
        await self._store.set(Collection.MESSAGES, raw)

    # ─── Profiles ────────────────────────────────────────────────

    async def profiles(self) -> dict[UserId, Profile]:
        raw = await self._store.get(Collection.PROFILES)
        return {UserId(uid): Profile.from_dict(p) for uid, p in raw.items()}

    async def get_profile(self, user_id: str) -> Profile | None:
        raw = await self._store.get(Collection.PROFILES)
        data = raw.get(user_id)
        return Profile.from_dict(data) if data is not None else None

    async def put_profile(self, user_id: str, profile: Profile) -> None:
        raw = await self._store.get(Collection.PROFILES)
        raw[user_id] = profile.to_dict()
        await self._store.set(Collection.PROFILES, raw)
