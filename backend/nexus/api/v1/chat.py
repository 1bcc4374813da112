"""
API endpoints for durable direct messages.
"""
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from nexus.api.dependencies import get_chat_service
from nexus.auth.dependencies import get_current_user
from nexus.db.models.user import User
from nexus.schemas.common import ApiResponse, Pagination
from nexus.schemas.message import Conversation, MessageCreate, MessageRead, ModifiedCount, UnreadCount
from nexus.services.chat import ChatService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/chat",
    tags=["chat"],
    dependencies=[Depends(get_current_user)],
)


@router.post(
    "/messages",
    response_model=ApiResponse[MessageRead],
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
)
async def send_message(
    body: MessageCreate,
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """
    Store a message, then push it to the receiver if they are connected.
    """
    db_message = await service.send(current_user, body.receiver_id, body.content)
    return ApiResponse(message="Message sent successfully", data=MessageRead.model_validate(db_message))


@router.get("/messages/{user_id}", response_model=ApiResponse[List[MessageRead]], summary="Conversation with a user")
async def get_messages(
    user_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """
    One page of the conversation, oldest first. Marks the other user's messages as read.
    """
    messages, total = await service.conversation(current_user, user_id, page=page, limit=limit)
    return ApiResponse(
        data=[MessageRead.model_validate(m) for m in messages],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/conversations", response_model=ApiResponse[List[Conversation]], summary="Conversation list")
async def get_conversations(
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    conversations = await service.conversations(current_user)
    return ApiResponse(data=[Conversation.model_validate(c, from_attributes=True) for c in conversations])


@router.patch("/messages/{user_id}/read", response_model=ApiResponse[ModifiedCount], summary="Mark a conversation read")
async def mark_messages_read(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    modified = await service.mark_read(current_user, user_id)
    return ApiResponse(message="Messages marked as read", data=ModifiedCount(modified_count=modified))


@router.get("/unread-count", response_model=ApiResponse[UnreadCount], summary="Unread message count")
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    unread = await service.unread_count(current_user)
    return ApiResponse(data=UnreadCount(unread_count=unread))
