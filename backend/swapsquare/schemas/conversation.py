"""Conversation Schemas: messages and conversation list rows."""

from pydantic import BaseModel, Field

from swapsquare.core.entities import ConversationSummary, Message
from swapsquare.schemas.swap import SwapResponse


class MessageCreate(BaseModel):
    # emptiness is checked after trimming by the conversation rules
    text: str = Field(max_length=4000)


class MessageResponse(BaseModel):
    from_user_id: str
    text: str
    ts: int

    @classmethod
    def from_entity(cls, message: Message) -> "MessageResponse":
        return cls(
            from_user_id=message.from_user_id, text=message.text, ts=message.ts,
        )


class ConversationResponse(BaseModel):
    swap: SwapResponse
    other_user_id: str
    other_name: str
    last_message: MessageResponse | None = None

    @classmethod
    def from_entity(cls, summary: ConversationSummary) -> "ConversationResponse":
        return cls(
            swap=SwapResponse.from_entity(summary.swap),
            other_user_id=summary.other_user_id,
            other_name=summary.other_name,
            last_message=(
                MessageResponse.from_entity(summary.last_message)
                if summary.last_message else None
            ),
        )
