"""Badge Aggregator: navigation counters for the signed-in user."""

from swapsquare.core.badges import badge_counts
from swapsquare.core.entities import BadgeCounts
from swapsquare.services.repository import Repository


class BadgeAggregator:

    def __init__(self, repo: Repository):
        self._repo = repo

    async def counts(self, user_id: str) -> BadgeCounts:
        """Pending incoming proposals and unread conversations for `user_id`."""
        return badge_counts(
            await self._repo.list_swaps(), await self._repo.message_logs(), user_id,
        )
