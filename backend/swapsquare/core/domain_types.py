"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ItemId, SwapId wrap opaque strings, never compared to other id kinds
    - SwapStatus and SwapAction are closed enumerations; no raw string matching
    - Rejected, Canceled and Withdrawn are terminal

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON payloads without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
ItemId = NewType("ItemId", str)
SwapId = NewType("SwapId", str)

# Milliseconds since the Unix epoch
Timestamp = NewType("Timestamp", int)


# ─── Limits ──────────────────────────────────────────────────────

MAX_LIVE_ITEMS_PER_OWNER = 3
MIN_IMAGES_PER_ITEM = 1
MAX_IMAGES_PER_ITEM = 3
MAX_IMAGE_BYTES = 1_572_864  # 1.5 MiB
DEFAULT_CITY = "Winnipeg"


# ─── Enums ───────────────────────────────────────────────────────

class Collection(str, Enum):
    """The four independently addressable Persistent Store collections."""
    ITEMS = "items"
    SWAPS = "swaps"
    MESSAGES = "messages"
    PROFILES = "profiles"

    @property
    def empty(self) -> list | dict:
        """Value returned for a collection that was never written."""
        if self in (Collection.ITEMS, Collection.SWAPS):
            return []
        return {}


class ItemStatus(str, Enum):
    """Item availability. Locked items are committed to exactly one swap."""
    ACTIVE = "active"
    LOCKED = "locked"


class SwapStatus(str, Enum):
    """Swap lifecycle states."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELED = "canceled"
    WITHDRAWN = "withdrawn"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({
    SwapStatus.REJECTED, SwapStatus.CANCELED, SwapStatus.WITHDRAWN,
})


class SwapAction(str, Enum):
    """Actions a party can take on an existing swap."""
    ACCEPT = "accept"
    REJECT = "reject"
    CANCEL = "cancel"
    WITHDRAW = "withdraw"


class SwapRole(str, Enum):
    """Which party of a swap an action belongs to."""
    PROPOSER = "proposer"    # fromUserId, owns the offered item
    RECIPIENT = "recipient"  # toUserId, owns the requested item
