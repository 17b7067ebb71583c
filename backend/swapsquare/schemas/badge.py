"""Badge Schemas."""

from pydantic import BaseModel

from swapsquare.core.entities import BadgeCounts


class BadgeResponse(BaseModel):
    pending_incoming: int
    unread: int

    @classmethod
    def from_entity(cls, counts: BadgeCounts) -> "BadgeResponse":
        return cls(pending_incoming=counts.pending_incoming, unread=counts.unread)
