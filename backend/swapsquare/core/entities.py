"""Entity Records: typed Item, Swap, Message, Profile and UserRef values.

Invariants:
    - Records are frozen; every change produces a new record via dataclasses.replace
    - Item.status == LOCKED iff Item.locked_by_swap_id is set
    - Swap item pair (offered_item_id, requested_item_id) never changes after creation
    - to_dict()/from_dict() round-trip through the JSON payloads held by the store

Design Decisions:
    - Frozen dataclasses over dicts: the store holds plain JSON, the core never does
    - Timestamps are epoch milliseconds supplied by the caller (core stays deterministic)
"""

from dataclasses import dataclass, field, replace

from swapsquare.core.domain_types import (
    ItemId, ItemStatus, SwapId, SwapStatus, Timestamp, UserId,
)


@dataclass(frozen=True)
class UserRef:
    """Authenticated identity handed out by the Identity Provider."""
    id: UserId
    email: str


@dataclass(frozen=True)
class Profile:
    """Locally cached user profile, keyed by user id in the store."""
    name: str
    city: str
    email: str

    def to_dict(self) -> dict:
        return {"name": self.name, "city": self.city, "email": self.email}

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        return cls(
            name=data.get("name", ""),
            city=data.get("city", ""),
            email=data.get("email", ""),
        )


@dataclass(frozen=True)
class Item:
    """A listing owned by exactly one user."""
    id: ItemId
    owner_id: UserId
    title: str
    category: str
    condition: str
    city: str
    description: str
    images: tuple[str, ...]
    created_at: Timestamp
    status: ItemStatus = ItemStatus.ACTIVE
    locked_by_swap_id: SwapId | None = None

    @property
    def is_locked(self) -> bool:
        return self.status is ItemStatus.LOCKED

    def locked_to(self, swap_id: SwapId) -> "Item":
        return replace(self, status=ItemStatus.LOCKED, locked_by_swap_id=swap_id)

    def unlocked(self) -> "Item":
        return replace(self, status=ItemStatus.ACTIVE, locked_by_swap_id=None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "category": self.category,
            "condition": self.condition,
            "city": self.city,
            "description": self.description,
            "images": list(self.images),
            "status": self.status.value,
            "locked_by_swap_id": self.locked_by_swap_id,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Item":
        return cls(
            id=ItemId(data["id"]),
            owner_id=UserId(data["owner_id"]),
            title=data["title"],
            category=data["category"],
            condition=data["condition"],
            city=data["city"],
            description=data["description"],
            images=tuple(data.get("images", ())),
            status=ItemStatus(data.get("status", ItemStatus.ACTIVE.value)),
            locked_by_swap_id=data.get("locked_by_swap_id"),
            created_at=Timestamp(data["created_at"]),
        )


@dataclass(frozen=True)
class Swap:
    """An item-for-item proposal from one user to another."""
    id: SwapId
    from_user_id: UserId
    to_user_id: UserId
    offered_item_id: ItemId
    requested_item_id: ItemId
    created_at: Timestamp
    updated_at: Timestamp
    status: SwapStatus = SwapStatus.PENDING

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.from_user_id, self.to_user_id)

    def other_party(self, user_id: str) -> UserId:
        return self.to_user_id if user_id == self.from_user_id else self.from_user_id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "from_user_id": self.from_user_id,
            "to_user_id": self.to_user_id,
            "offered_item_id": self.offered_item_id,
            "requested_item_id": self.requested_item_id,
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Swap":
        return cls(
            id=SwapId(data["id"]),
            from_user_id=UserId(data["from_user_id"]),
            to_user_id=UserId(data["to_user_id"]),
            offered_item_id=ItemId(data["offered_item_id"]),
            requested_item_id=ItemId(data["requested_item_id"]),
            status=SwapStatus(data["status"]),
            created_at=Timestamp(data["created_at"]),
            updated_at=Timestamp(data["updated_at"]),
        )


@dataclass(frozen=True)
class Message:
    """One chat line in an accepted swap's conversation."""
    from_user_id: UserId
    text: str
    ts: Timestamp

    def to_dict(self) -> dict:
        return {"from_user_id": self.from_user_id, "text": self.text, "ts": self.ts}

    @classmethod
    def from_dict(cls, data: dict) -> "Message":
        return cls(
            from_user_id=UserId(data["from_user_id"]),
            text=data["text"],
            ts=Timestamp(data["ts"]),
        )


@dataclass(frozen=True)
class ItemDraft:
    """Caller-supplied item fields, before validation."""
    title: str
    category: str
    condition: str
    description: str
    city: str | None = None


@dataclass(frozen=True)
class BrowseFilter:
    """Browse-page filters. Empty values disable the corresponding filter."""
    query: str = ""
    category: str = ""
    same_city: bool = False
    hide_own: bool = False


@dataclass(frozen=True)
class ConversationSummary:
    """One row of a user's conversation list."""
    swap: Swap
    other_user_id: UserId
    other_name: str
    last_message: Message | None = None


@dataclass(frozen=True)
class BadgeCounts:
    """Navigation badge counters for one user."""
    pending_incoming: int = 0
    unread: int = 0


@dataclass(frozen=True)
class LockViolation:
    """An item whose lock state disagrees with the swap it references."""
    item_id: ItemId
    locked_by_swap_id: SwapId | None
    reason: str
    details: dict = field(default_factory=dict)
