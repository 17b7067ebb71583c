"""Conversation Routes: conversation list and per-swap messages."""

from fastapi import APIRouter, Depends, status

from swapsquare.api.dependencies import get_current_user, get_marketplace
from swapsquare.core.entities import UserRef
from swapsquare.schemas.conversation import (
    ConversationResponse, MessageCreate, MessageResponse,
)
from swapsquare.services.marketplace import Marketplace

router = APIRouter(prefix="/api/v1/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationResponse])
async def list_conversations(
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    """Accepted swaps of the current user, most recently active first."""
    summaries = await market.conversations.list_conversations(user.id)
    return [ConversationResponse.from_entity(s) for s in summaries]


@router.get("/{swap_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    swap_id: str,
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    messages = await market.conversations.list_messages(swap_id, user.id)
    return [MessageResponse.from_entity(m) for m in messages]


@router.post(
    "/{swap_id}/messages", response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_message(
    swap_id: str,
    body: MessageCreate,
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    message = await market.conversations.post_message(swap_id, user.id, body.text)
    return MessageResponse.from_entity(message)
