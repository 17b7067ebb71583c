"""Item Rules: listing validation, post quota, deletion guard and browse filtering.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Live items (Active or Locked) count toward the per-owner quota
    - Required text fields are non-empty after stripping
    - An item is deletable only by its owner and only while Active

Design Decisions:
    - Image payloads are checked by size and content type here; reading them
      is the caller's job so that every image is validated before any write
"""

from collections.abc import Iterable
from dataclasses import dataclass

from swapsquare.core.domain_types import (
    MAX_IMAGE_BYTES, MAX_IMAGES_PER_ITEM, MAX_LIVE_ITEMS_PER_OWNER,
    MIN_IMAGES_PER_ITEM, UserId,
)
from swapsquare.core.entities import BrowseFilter, Item, ItemDraft, Profile
from swapsquare.core.errors import (
    ErrorContext, ForbiddenError, ItemLockedError, LimitExceededError,
    PayloadTooLargeError, ValidationError,
)

REQUIRED_FIELDS = ("title", "category", "condition", "city", "description")


@dataclass(frozen=True)
class ImagePayload:
    """An image whose bytes have been fully read."""
    filename: str
    content_type: str
    data: bytes


def live_item_count(items: Iterable[Item], owner_id: str) -> int:
    return sum(1 for it in items if it.owner_id == owner_id)


def check_post_quota(
    items: Iterable[Item], owner_id: str, limit: int = MAX_LIVE_ITEMS_PER_OWNER,
) -> None:
    """Raise LimitExceededError if the owner already has `limit` live items."""
    if live_item_count(items, owner_id) >= limit:
        raise LimitExceededError(limit, ErrorContext(user_id=owner_id))


def normalize_draft(draft: ItemDraft, default_city: str) -> dict[str, str]:
    """Strip every text field and fill in the city. Raises ValidationError on blanks."""
    fields = {
        "title": (draft.title or "").strip(),
        "category": (draft.category or "").strip(),
        "condition": (draft.condition or "").strip(),
        "city": (draft.city if draft.city is not None else default_city or "").strip(),
        "description": (draft.description or "").strip(),
    }
    missing = [name for name in REQUIRED_FIELDS if not fields[name]]
    if missing:
        raise ValidationError(
            f"Please fill in all required fields: {', '.join(missing)}",
            field=missing[0],
        )
    return fields


def check_image_count(
    count: int,
    minimum: int = MIN_IMAGES_PER_ITEM,
    maximum: int = MAX_IMAGES_PER_ITEM,
) -> None:
    if count < minimum:
        raise ValidationError(
            f"Please upload at least {minimum} image.", field="images",
        )
    if count > maximum:
        raise ValidationError(
            f"You can upload at most {maximum} images.", field="images",
        )


def check_image(image: ImagePayload, max_bytes: int = MAX_IMAGE_BYTES) -> None:
    """Reject non-image content types and payloads over the size ceiling."""
    if not (image.content_type or "").startswith("image/"):
        raise ValidationError(
            f"'{image.filename}' is not an image", field="images",
        )
    if len(image.data) > max_bytes:
        raise PayloadTooLargeError(image.filename, max_bytes)


def check_deletable(item: Item, actor_id: str) -> None:
    ctx = ErrorContext(user_id=actor_id, item_id=item.id)
    if item.owner_id != actor_id:
        raise ForbiddenError("You can only delete your own items", ctx)
    if item.is_locked:
        raise ItemLockedError(item.id, ctx)


def newest_first(items: Iterable[Item]) -> list[Item]:
    return sorted(items, key=lambda it: it.created_at, reverse=True)


def matches_filter(
    item: Item, browse: BrowseFilter, viewer_id: UserId, viewer: Profile | None,
) -> bool:
    """Apply the browse-page filters to one item."""
    if browse.hide_own and item.owner_id == viewer_id:
        return False
    if browse.same_city:
        viewer_city = viewer.city if viewer else ""
        if item.city.lower() != viewer_city.lower():
            return False
    if browse.category and item.category != browse.category:
        return False
    query = browse.query.strip().lower()
    if query:
        haystack = f"{item.title} {item.description}".lower()
        if query not in haystack:
            return False
    return True


def offerable_items(items: Iterable[Item], owner_id: str, target_item_id: str) -> list[Item]:
    """The owner's Active items that could be offered for `target_item_id`."""
    return newest_first(
        it for it in items
        if it.owner_id == owner_id
        and not it.is_locked
        and it.id != target_item_id
    )
