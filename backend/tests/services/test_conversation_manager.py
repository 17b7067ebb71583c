"""Conversation Manager and Badge Aggregator: messaging gate and counters.

Tests cover:
    - Posting works only on Accepted swaps, for parties only
    - Messages keep append order and survive withdrawal read-only
    - Conversation list order follows the latest activity
    - Badges reflect pending proposals and the last sender
"""

import pytest

from swapsquare.core.entities import Profile
from swapsquare.core.errors import (
    ForbiddenError, NotAcceptedError, ValidationError,
)
from tests.factories import ALICE, BOB, CAROL


@pytest.fixture
async def accepted_swap(market, post_item):
    a = await post_item(ALICE, "Guitar")
    b = await post_item(BOB, "Bicycle")
    swap = await market.swaps.propose(ALICE, a.id, b.id)
    return await market.swaps.accept(swap.id, BOB)


@pytest.mark.parametrize("resolve", [None, "reject", "cancel"])
@pytest.mark.parametrize("text", ["hello", "   "])
async def test_post_to_unaccepted_swap_refused(market, post_item, resolve, text):
    a = await post_item(ALICE)
    b = await post_item(BOB)
    swap = await market.swaps.propose(ALICE, a.id, b.id)
    if resolve == "reject":
        await market.swaps.reject(swap.id, BOB)
    elif resolve == "cancel":
        await market.swaps.cancel(swap.id, ALICE)

    with pytest.raises(NotAcceptedError):
        await market.conversations.post_message(swap.id, ALICE, text)
    assert await market.repo.messages_for(swap.id) == []


async def test_conversation_opens_on_accept(market, post_item):
    a = await post_item(ALICE)
    b = await post_item(BOB)
    swap = await market.swaps.propose(ALICE, a.id, b.id)
    with pytest.raises(NotAcceptedError):
        await market.conversations.post_message(swap.id, BOB, "deal?")

    await market.swaps.accept(swap.id, BOB)
    assert await market.conversations.list_messages(swap.id, ALICE) == []

    message = await market.conversations.post_message(swap.id, BOB, "deal")
    assert await market.conversations.list_messages(swap.id, ALICE) == [message]


async def test_messages_in_append_order(market, accepted_swap):
    await market.conversations.post_message(accepted_swap.id, ALICE, "  hi  ")
    await market.conversations.post_message(accepted_swap.id, BOB, "hello")

    messages = await market.conversations.list_messages(accepted_swap.id, BOB)
    assert [(m.from_user_id, m.text) for m in messages] == [
        (ALICE, "hi"), (BOB, "hello"),
    ]


async def test_empty_message_refused(market, accepted_swap):
    with pytest.raises(ValidationError):
        await market.conversations.post_message(accepted_swap.id, ALICE, "   ")


async def test_stranger_cannot_read_or_post(market, accepted_swap):
    with pytest.raises(ForbiddenError):
        await market.conversations.post_message(accepted_swap.id, CAROL, "hey")
    with pytest.raises(ForbiddenError):
        await market.conversations.list_messages(accepted_swap.id, CAROL)


async def test_withdrawn_conversation_is_read_only(market, accepted_swap):
    await market.conversations.post_message(accepted_swap.id, BOB, "see you")
    await market.swaps.withdraw(accepted_swap.id, ALICE)

    with pytest.raises(NotAcceptedError):
        await market.conversations.post_message(accepted_swap.id, ALICE, "sorry")
    messages = await market.conversations.list_messages(accepted_swap.id, ALICE)
    assert [m.text for m in messages] == ["see you"]


async def test_posting_moves_conversation_to_top(market, post_item):
    swaps = []
    for title in ("One", "Two"):
        a = await post_item(ALICE, title)
        b = await post_item(BOB, title)
        swap = await market.swaps.propose(ALICE, a.id, b.id)
        swaps.append(await market.swaps.accept(swap.id, BOB))
    await market.repo.put_profile(BOB, Profile("Bob", "Winnipeg", "bob@example.com"))

    convs = await market.conversations.list_conversations(ALICE)
    assert [c.swap.id for c in convs] == [swaps[1].id, swaps[0].id]

    await market.conversations.post_message(swaps[0].id, BOB, "still on?")

    convs = await market.conversations.list_conversations(ALICE)
    assert [c.swap.id for c in convs] == [swaps[0].id, swaps[1].id]
    assert convs[0].other_user_id == BOB
    assert convs[0].other_name == "Bob"
    assert convs[0].last_message.text == "still on?"
    assert convs[1].last_message is None


async def test_unknown_profile_shows_fallback_name(market, accepted_swap):
    [conv] = await market.conversations.list_conversations(BOB)
    assert conv.other_name == "User"


async def test_badges_track_pending_and_last_sender(market, post_item):
    a = await post_item(ALICE)
    b = await post_item(BOB)
    swap = await market.swaps.propose(ALICE, a.id, b.id)

    bob = await market.badges.counts(BOB)
    assert (bob.pending_incoming, bob.unread) == (1, 0)

    await market.swaps.accept(swap.id, BOB)
    await market.conversations.post_message(swap.id, ALICE, "hi")

    bob = await market.badges.counts(BOB)
    alice = await market.badges.counts(ALICE)
    assert (bob.pending_incoming, bob.unread) == (0, 1)
    assert (alice.pending_incoming, alice.unread) == (0, 0)

    await market.conversations.post_message(swap.id, BOB, "hello")
    assert (await market.badges.counts(BOB)).unread == 0
    assert (await market.badges.counts(ALICE)).unread == 1
