"""Item Catalog: posting, deletion and listings through the store.

Tests cover:
    - Post quota counts Active and Locked items
    - Every image is validated before anything is written
    - Locked items cannot be deleted; deletion requires ownership
    - City defaults to the owner's profile city, then the configured default
"""

import pytest

from swapsquare.core.domain_types import ItemStatus
from swapsquare.core.entities import BrowseFilter, ItemDraft, Profile
from swapsquare.core.errors import (
    ForbiddenError, ItemLockedError, LimitExceededError,
    PayloadTooLargeError, ResourceNotFoundError, ValidationError,
)
from tests.factories import ALICE, BOB, FakeUpload


async def test_create_item_stores_active_item_with_data_urls(market, post_item):
    item = await post_item(ALICE, "Lamp", images=[FakeUpload(b"abc")])

    assert item.status is ItemStatus.ACTIVE
    assert item.locked_by_swap_id is None
    assert item.images == ("data:image/png;base64,YWJj",)
    assert await market.catalog.get_item(item.id) == item


async def test_fourth_item_exceeds_quota(market, post_item):
    for n in range(3):
        await post_item(ALICE, f"Thing {n}")
    with pytest.raises(LimitExceededError):
        await post_item(ALICE, "One too many")
    assert len(await market.catalog.list_by_owner(ALICE)) == 3


async def test_locked_items_count_toward_quota(market, post_item):
    a1 = await post_item(ALICE)
    await post_item(ALICE)
    await post_item(ALICE)
    b = await post_item(BOB)
    await market.swaps.propose(ALICE, a1.id, b.id)
    with pytest.raises(LimitExceededError):
        await post_item(ALICE)


async def test_quota_checked_before_images_are_read(market, post_item):
    for n in range(3):
        await post_item(ALICE, f"Thing {n}")
    upload = FakeUpload()
    with pytest.raises(LimitExceededError):
        await post_item(ALICE, images=[upload])
    assert upload.reads == 0


async def test_oversized_image_writes_nothing(market, post_item):
    images = [FakeUpload(b"x" * 10), FakeUpload(b"x" * 2_000, filename="big.png")]
    with pytest.raises(PayloadTooLargeError) as exc_info:
        await post_item(ALICE, images=images)
    assert "big.png" in exc_info.value.message
    assert await market.repo.list_items() == []


async def test_image_read_is_bounded_by_size_ceiling(market, post_item):
    big = FakeUpload(b"x" * 50_000, filename="huge.png")
    small = FakeUpload(b"x" * 1_024)

    with pytest.raises(PayloadTooLargeError):
        await post_item(ALICE, images=[small, big])
    assert small.read_sizes == [1_025]
    assert big.read_sizes == [1_025]


async def test_image_at_exact_ceiling_accepted(market, post_item):
    item = await post_item(ALICE, images=[FakeUpload(b"x" * 1_024)])
    assert len(item.images) == 1


async def test_non_image_upload_rejected(market, post_item):
    with pytest.raises(ValidationError):
        await post_item(ALICE, images=[FakeUpload(b"x", content_type="text/plain")])


@pytest.mark.parametrize("count", [0, 4])
async def test_image_count_bounds(market, post_item, count):
    with pytest.raises(ValidationError):
        await post_item(ALICE, images=[FakeUpload() for _ in range(count)])


async def test_blank_field_rejected(market):
    draft = ItemDraft(title="  ", category="Home", condition="Good", description="x")
    with pytest.raises(ValidationError):
        await market.catalog.create_item(ALICE, draft, [FakeUpload()])


async def test_city_defaults_to_profile_then_setting(market, post_item):
    assert (await post_item(ALICE)).city == "Winnipeg"
    await market.repo.put_profile(BOB, Profile("Bob", "Brandon", "bob@example.com"))
    assert (await post_item(BOB)).city == "Brandon"
    assert (await post_item(BOB, city="Selkirk")).city == "Selkirk"


async def test_delete_own_active_item(market, post_item):
    item = await post_item(ALICE)
    await market.catalog.delete_item(ALICE, item.id)
    with pytest.raises(ResourceNotFoundError):
        await market.catalog.get_item(item.id)


async def test_delete_someone_elses_item(market, post_item):
    item = await post_item(ALICE)
    with pytest.raises(ForbiddenError):
        await market.catalog.delete_item(BOB, item.id)


async def test_delete_locked_item_refused(market, post_item):
    a = await post_item(ALICE)
    b = await post_item(BOB)
    await market.swaps.propose(ALICE, a.id, b.id)
    with pytest.raises(ItemLockedError):
        await market.catalog.delete_item(ALICE, a.id)
    assert (await market.catalog.get_item(a.id)).status is ItemStatus.LOCKED


async def test_listings_newest_first(market, post_item):
    first = await post_item(ALICE, "First")
    second = await post_item(BOB, "Second")
    assert [it.id for it in await market.catalog.list_all()] == [second.id, first.id]


async def test_browse_hide_own_and_query(market, post_item):
    await post_item(ALICE, "Guitar")
    bike = await post_item(BOB, "Bicycle")
    found = await market.catalog.browse(ALICE, BrowseFilter(hide_own=True))
    assert [it.id for it in found] == [bike.id]
    assert await market.catalog.browse(ALICE, BrowseFilter(query="drum")) == []


async def test_offerable_items_requires_target(market, post_item):
    await post_item(ALICE)
    with pytest.raises(ResourceNotFoundError):
        await market.catalog.offerable_items(ALICE, "i_missing")


async def test_deleting_frees_exactly_one_slot(market, post_item):
    items = [await post_item(ALICE, f"Thing {n}") for n in range(3)]
    await market.catalog.delete_item(ALICE, items[0].id)

    await post_item(ALICE, "Replacement")
    with pytest.raises(LimitExceededError):
        await post_item(ALICE, "One too many")
