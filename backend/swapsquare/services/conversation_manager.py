"""Conversation Manager: chat between the two parties of an accepted swap.

Invariants:
    - post_message succeeds only while the swap is exactly Accepted
    - Messages are appended; the log is never reordered or truncated
    - Posting bumps the swap's updated_at so the conversation list reorders
    - Logs survive withdrawal (read-only history for both parties)
"""

import logging
from collections.abc import Callable
from dataclasses import replace

from swapsquare.core.conversation_rules import (
    accepted_swaps_for, check_can_post, check_party, last_message, normalize_text,
)
from swapsquare.core.domain_types import Timestamp, UserId
from swapsquare.core.entities import ConversationSummary, Message, Swap
from swapsquare.core.errors import ErrorContext, ResourceNotFoundError
from swapsquare.services.repository import Repository, now_ms

logger = logging.getLogger(__name__)

UNKNOWN_USER_NAME = "User"


class ConversationManager:
    """Message logs keyed by swap id."""

    def __init__(
        self, repo: Repository, clock: Callable[[], Timestamp] = now_ms,
    ):
        self._repo = repo
        self._clock = clock

    async def post_message(self, swap_id: str, sender_id: UserId, text: str) -> Message:
        """Append `text` to the swap's conversation.

        The swap gate runs before the text check, so a blank message to a
        non-Accepted swap still fails NotAccepted.

        Raises:
            ForbiddenError: sender is not a party to the swap
            NotAcceptedError: swap is not Accepted
            ValidationError: text is empty after trimming
        """
        async with self._repo.mutation():
            swap = await self._require_swap(swap_id)
            check_can_post(swap, sender_id)
            body = normalize_text(text)
            message = Message(from_user_id=sender_id, text=body, ts=self._clock())
            await self._repo.append_message(swap.id, message)
            await self._repo.put_swap(replace(swap, updated_at=message.ts))

        logger.info(
            "Message posted", extra={"user_id": sender_id, "swap_id": swap_id},
        )
        return message

    async def list_messages(self, swap_id: str, viewer_id: str) -> list[Message]:
        swap = await self._require_swap(swap_id)
        check_party(swap, viewer_id)
        return await self._repo.messages_for(swap.id)

    async def list_conversations(self, user_id: str) -> list[ConversationSummary]:
        """Accepted swaps of `user_id`, most recently active first."""
        swaps = accepted_swaps_for(await self._repo.list_swaps(), user_id)
        logs = await self._repo.message_logs()
        profiles = await self._repo.profiles()

        summaries = []
        for swap in swaps:
            other = swap.other_party(user_id)
            profile = profiles.get(other)
            summaries.append(ConversationSummary(
                swap=swap,
                other_user_id=other,
                other_name=profile.name if profile and profile.name else UNKNOWN_USER_NAME,
                last_message=last_message(logs.get(swap.id, [])),
            ))
        return summaries

    async def _require_swap(self, swap_id: str) -> Swap:
        swap = await self._repo.get_swap(swap_id)
        if swap is None:
            raise ResourceNotFoundError("Swap", swap_id, ErrorContext(swap_id=swap_id))
        return swap
