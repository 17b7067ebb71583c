"""Item Catalog: create, delete and list items owned by a user.

Invariants:
    - create_item reads and validates EVERY image before the first store write;
      a failed or oversized image leaves no partial item behind
    - Quota is checked before images are read and re-checked, with the insert,
      under the repository mutation lock
    - Deleting requires ownership and an Active item (locks are released only
      by swap resolution)
    - Listings are ordered newest first

Design Decisions:
    - Images stored as data: URLs inside the item record, matching the
      whole-collection store contract (no separate blob storage)
    - Image reads happen before taking the mutation lock: a slow upload never
      blocks other writers
"""

import base64
import logging
from collections.abc import Callable, Sequence

from swapsquare.core.domain_types import (
    DEFAULT_CITY, MAX_IMAGE_BYTES, MAX_IMAGES_PER_ITEM, MAX_LIVE_ITEMS_PER_OWNER,
    ItemId, ItemStatus, Timestamp, UserId,
)
from swapsquare.core.entities import BrowseFilter, Item, ItemDraft
from swapsquare.core.errors import ErrorContext, ResourceNotFoundError
from swapsquare.core.item_rules import (
    ImagePayload, check_deletable, check_image, check_image_count,
    check_post_quota, matches_filter, newest_first, normalize_draft,
    offerable_items,
)
from swapsquare.core.repository_protocols import ImageUpload
from swapsquare.services.repository import Repository, new_id, now_ms

logger = logging.getLogger(__name__)


def to_data_url(image: ImagePayload) -> str:
    encoded = base64.b64encode(image.data).decode("ascii")
    return f"data:{image.content_type};base64,{encoded}"


class ItemCatalog:
    """Item operations for one marketplace."""

    def __init__(
        self,
        repo: Repository,
        max_live_items: int = MAX_LIVE_ITEMS_PER_OWNER,
        max_images: int = MAX_IMAGES_PER_ITEM,
        max_image_bytes: int = MAX_IMAGE_BYTES,
        default_city: str = DEFAULT_CITY,
        clock: Callable[[], Timestamp] = now_ms,
    ):
        self._repo = repo
        self.max_live_items = max_live_items
        self.max_images = max_images
        self.max_image_bytes = max_image_bytes
        self.default_city = default_city
        self._clock = clock

    async def create_item(
        self,
        owner_id: UserId,
        draft: ItemDraft,
        images: Sequence[ImageUpload],
    ) -> Item:
        """Validate and store a new Active item.

        Raises:
            ValidationError: blank required field, 0 or too many images, non-image file
            PayloadTooLargeError: an image exceeds the size ceiling
            LimitExceededError: owner already has the maximum number of live items
        """
        check_post_quota(await self._repo.list_items(), owner_id, self.max_live_items)
        fields = normalize_draft(draft, await self._owner_city(owner_id))
        check_image_count(len(images), maximum=self.max_images)
        payloads = await self._read_images(images)

        async with self._repo.mutation():
            # another create may have landed while images were read
            check_post_quota(
                await self._repo.list_items(), owner_id, self.max_live_items,
            )
            item = Item(
                id=ItemId(new_id("i_")),
                owner_id=owner_id,
                images=tuple(to_data_url(p) for p in payloads),
                status=ItemStatus.ACTIVE,
                locked_by_swap_id=None,
                created_at=self._clock(),
                **fields,
            )
            await self._repo.add_item(item)

        logger.info(
            f"Item posted: {item.title}",
            extra={"user_id": owner_id, "item_id": item.id},
        )
        return item

    async def delete_item(self, owner_id: UserId, item_id: str) -> None:
        """Permanently remove an Active item owned by the caller."""
        async with self._repo.mutation():
            item = await self._require_item(item_id)
            check_deletable(item, owner_id)
            await self._repo.remove_item(item.id)
        logger.info("Item deleted", extra={"user_id": owner_id, "item_id": item_id})

    async def get_item(self, item_id: str) -> Item:
        return await self._require_item(item_id)

    async def list_by_owner(self, owner_id: str) -> list[Item]:
        return newest_first(
            it for it in await self._repo.list_items() if it.owner_id == owner_id
        )

    async def list_all(self) -> list[Item]:
        return newest_first(await self._repo.list_items())

    async def filter(self, predicate: Callable[[Item], bool]) -> list[Item]:
        return [it for it in await self._repo.list_items() if predicate(it)]

    async def browse(self, viewer_id: UserId, browse: BrowseFilter) -> list[Item]:
        """Items visible on the browse page for `viewer_id`, newest first."""
        viewer = await self._repo.get_profile(viewer_id)
        return newest_first(await self.filter(
            lambda it: matches_filter(it, browse, viewer_id, viewer),
        ))

    async def offerable_items(self, owner_id: str, target_item_id: str) -> list[Item]:
        """Candidate items `owner_id` could offer in exchange for `target_item_id`."""
        await self._require_item(target_item_id)
        return offerable_items(
            await self._repo.list_items(), owner_id, target_item_id,
        )

    async def _require_item(self, item_id: str) -> Item:
        item = await self._repo.get_item(item_id)
        if item is None:
            raise ResourceNotFoundError(
                "Item", item_id, ErrorContext(item_id=item_id),
            )
        return item

    async def _owner_city(self, owner_id: str) -> str:
        profile = await self._repo.get_profile(owner_id)
        if profile and profile.city:
            return profile.city
        return self.default_city

    async def _read_images(self, images: Sequence[ImageUpload]) -> list[ImagePayload]:
        payloads = []
        for upload in images:
            payload = ImagePayload(
                filename=upload.filename or "image",
                content_type=upload.content_type or "",
                data=await upload.read(self.max_image_bytes + 1),
            )
            check_image(payload, self.max_image_bytes)
            payloads.append(payload)
        return payloads
