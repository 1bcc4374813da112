"""
CRUD operations for durable chat messages.
"""
from typing import Dict, List, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.orm import selectinload

from nexus.db.base import utcnow
from nexus.db.models.message import Message


def _between(user_id: UUID, other_id: UUID):
    return or_(
        and_(Message.sender_id == user_id, Message.receiver_id == other_id),
        and_(Message.sender_id == other_id, Message.receiver_id == user_id),
    )


async def create_message(db: AsyncSession, sender_id: UUID, receiver_id: UUID, content: str) -> Message:
    """
    Persist a message and return it with sender and receiver loaded.
    """
    db_message = Message(sender_id=sender_id, receiver_id=receiver_id, content=content)
    db.add(db_message)
    await db.flush()
    result = await db.execute(
        select(Message)
        .where(Message.id == db_message.id)
        .options(selectinload(Message.sender), selectinload(Message.receiver))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def get_conversation(
    db: AsyncSession,
    user_id: UUID,
    other_id: UUID,
    skip: int = 0,
    limit: int = 50,
) -> Tuple[List[Message], int]:
    """
    Get one page of the conversation between two users, newest first.

    Returns:
        Tuple of (page of messages, total count)
    """
    condition = _between(user_id, other_id)
    total = await db.scalar(select(func.count()).select_from(Message).where(condition))
    result = await db.execute(
        select(Message)
        .where(condition)
        .options(selectinload(Message.sender), selectinload(Message.receiver))
        .order_by(Message.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def mark_read(db: AsyncSession, sender_id: UUID, receiver_id: UUID) -> int:
    """
    Mark every unread message from sender to receiver as read.

    Returns:
        int: Number of messages updated
    """
    result = await db.execute(
        update(Message)
        .where(
            Message.sender_id == sender_id,
            Message.receiver_id == receiver_id,
            Message.read.is_(False),
        )
        .values(read=True, read_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


async def count_unread(db: AsyncSession, receiver_id: UUID) -> int:
    """
    Count unread messages addressed to the user.
    """
    total = await db.scalar(
        select(func.count()).select_from(Message).where(
            Message.receiver_id == receiver_id,
            Message.read.is_(False),
        )
    )
    return total or 0


async def get_conversations(db: AsyncSession, user_id: UUID) -> List[Dict]:
    """
    Summarise every conversation the user takes part in.

    Returns:
        List of dicts with `other_user`, `last_message` and `unread_count`,
        most recently active conversation first.
    """
    result = await db.execute(
        select(Message)
        .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
        .options(selectinload(Message.sender), selectinload(Message.receiver))
        .order_by(Message.created_at.desc())
    )

    conversations: Dict[UUID, Dict] = {}
    for message in result.scalars().all():
        incoming = message.receiver_id == user_id
        other = message.sender if incoming else message.receiver
        entry = conversations.get(other.id)
        if entry is None:
            # Rows arrive newest first, so the first one seen is the last message
            entry = {"other_user": other, "last_message": message, "unread_count": 0}
            conversations[other.id] = entry
        if incoming and not message.read:
            entry["unread_count"] += 1

    return list(conversations.values())
