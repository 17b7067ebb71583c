"""Item Rules: tests for quota, draft validation, image checks and browse filters."""

import pytest

from swapsquare.core.entities import BrowseFilter, ItemDraft, Profile
from swapsquare.core.errors import (
    ForbiddenError, ItemLockedError, LimitExceededError,
    PayloadTooLargeError, ValidationError,
)
from swapsquare.core.item_rules import (
    ImagePayload, check_deletable, check_image, check_image_count,
    check_post_quota, matches_filter, normalize_draft, offerable_items,
)
from tests.factories import ALICE, BOB, make_item


def _draft(**overrides):
    fields = dict(
        title="Lamp", category="Home", condition="Good", description="Bright",
    )
    fields.update(overrides)
    return ItemDraft(**fields)


# ─── quota ──────────────────────────────────────────────────────

def test_quota_counts_active_and_locked_items():
    items = [
        make_item("i_1", ALICE),
        make_item("i_2", ALICE, locked_by="s_1"),
        make_item("i_3", ALICE),
        make_item("i_4", BOB),
    ]
    with pytest.raises(LimitExceededError):
        check_post_quota(items, ALICE, limit=3)


def test_quota_allows_below_limit():
    check_post_quota([make_item("i_1", ALICE), make_item("i_2", BOB)], ALICE, limit=2)


# ─── draft ──────────────────────────────────────────────────────

def test_normalize_draft_strips_fields():
    fields = normalize_draft(_draft(title="  Lamp  ", city=" Brandon "), "Winnipeg")
    assert fields["title"] == "Lamp"
    assert fields["city"] == "Brandon"


def test_normalize_draft_uses_default_city_when_omitted():
    assert normalize_draft(_draft(), "Winnipeg")["city"] == "Winnipeg"


def test_normalize_draft_rejects_blank_field():
    with pytest.raises(ValidationError) as exc_info:
        normalize_draft(_draft(description="   "), "Winnipeg")
    assert exc_info.value.code == "VALIDATION_ERROR"
    assert "description" in exc_info.value.message


# ─── images ─────────────────────────────────────────────────────

@pytest.mark.parametrize("count", [0, 4])
def test_image_count_outside_bounds(count):
    with pytest.raises(ValidationError):
        check_image_count(count, minimum=1, maximum=3)


@pytest.mark.parametrize("count", [1, 3])
def test_image_count_within_bounds(count):
    check_image_count(count, minimum=1, maximum=3)


def test_image_at_size_ceiling_is_accepted():
    check_image(ImagePayload("a.png", "image/png", b"x" * 10), max_bytes=10)


def test_image_over_size_ceiling():
    with pytest.raises(PayloadTooLargeError):
        check_image(ImagePayload("a.png", "image/png", b"x" * 11), max_bytes=10)


def test_non_image_content_type():
    with pytest.raises(ValidationError):
        check_image(ImagePayload("a.txt", "text/plain", b"x"), max_bytes=10)


# ─── deletion ───────────────────────────────────────────────────

def test_delete_requires_owner():
    with pytest.raises(ForbiddenError):
        check_deletable(make_item("i_1", ALICE), BOB)


def test_delete_refuses_locked_item():
    with pytest.raises(ItemLockedError):
        check_deletable(make_item("i_1", ALICE, locked_by="s_1"), ALICE)


def test_owner_may_delete_active_item():
    check_deletable(make_item("i_1", ALICE), ALICE)


# ─── browse ─────────────────────────────────────────────────────

def test_browse_query_matches_title_or_description_case_insensitive():
    item = make_item(title="Desk Lamp", description="Brass finish")
    assert matches_filter(item, BrowseFilter(query="lamp"), BOB, None)
    assert matches_filter(item, BrowseFilter(query="BRASS"), BOB, None)
    assert not matches_filter(item, BrowseFilter(query="sofa"), BOB, None)


def test_browse_same_city_uses_viewer_profile():
    item = make_item(city="Winnipeg")
    here = Profile("Bob", "winnipeg", "bob@example.com")
    there = Profile("Bob", "Brandon", "bob@example.com")
    assert matches_filter(item, BrowseFilter(same_city=True), BOB, here)
    assert not matches_filter(item, BrowseFilter(same_city=True), BOB, there)


def test_browse_hide_own():
    item = make_item(owner=ALICE)
    assert not matches_filter(item, BrowseFilter(hide_own=True), ALICE, None)
    assert matches_filter(item, BrowseFilter(hide_own=True), BOB, None)


def test_browse_category_exact():
    item = make_item(category="Books")
    assert matches_filter(item, BrowseFilter(category="Books"), BOB, None)
    assert not matches_filter(item, BrowseFilter(category="Home"), BOB, None)


def test_offerable_items_excludes_locked_and_target_newest_first():
    items = [
        make_item("i_1", ALICE, created_at=1),
        make_item("i_2", ALICE, created_at=3),
        make_item("i_3", ALICE, locked_by="s_1", created_at=2),
        make_item("i_4", BOB, created_at=4),
    ]
    assert [it.id for it in offerable_items(items, ALICE, "i_1")] == ["i_2"]
    assert [it.id for it in offerable_items(items, ALICE, "i_4")] == ["i_2", "i_1"]
