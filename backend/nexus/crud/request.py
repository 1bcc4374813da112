"""
CRUD operations for collaboration requests.

Transitions are written as conditional statements so the database, not the
caller's earlier read, decides whether a request is still pending.
"""
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import selectinload

from nexus.core.enums import RequestStatus
from nexus.db.base import utcnow
from nexus.db.models.request import CollaborationRequest


def _with_parties(stmt):
    return stmt.options(
        selectinload(CollaborationRequest.investor),
        selectinload(CollaborationRequest.entrepreneur),
    )


async def create_request(
    db: AsyncSession,
    investor_id: UUID,
    entrepreneur_id: UUID,
    message: str,
) -> CollaborationRequest:
    """
    Insert a pending request. Raises IntegrityError if the pair already has one.
    """
    db_request = CollaborationRequest(
        investor_id=investor_id,
        entrepreneur_id=entrepreneur_id,
        message=message,
        status=RequestStatus.PENDING.value,
    )
    db.add(db_request)
    await db.flush()
    return db_request


async def get_request(db: AsyncSession, request_id: UUID) -> Optional[CollaborationRequest]:
    """
    Get a request by ID with both parties loaded.
    """
    stmt = _with_parties(select(CollaborationRequest).where(CollaborationRequest.id == request_id))
    result = await db.execute(stmt.execution_options(populate_existing=True))
    return result.scalar_one_or_none()


async def get_request_by_pair(
    db: AsyncSession,
    investor_id: UUID,
    entrepreneur_id: UUID,
) -> Optional[CollaborationRequest]:
    """
    Get the request for an (investor, entrepreneur) pair, whatever its status.
    """
    result = await db.execute(
        select(CollaborationRequest).where(
            CollaborationRequest.investor_id == investor_id,
            CollaborationRequest.entrepreneur_id == entrepreneur_id,
        )
    )
    return result.scalar_one_or_none()


async def respond_to_pending(
    db: AsyncSession,
    request_id: UUID,
    entrepreneur_id: UUID,
    status: RequestStatus,
    response_message: Optional[str],
    responded_at: Optional[datetime] = None,
) -> bool:
    """
    Move a pending request owned by the entrepreneur to a terminal status.

    Returns:
        bool: True if exactly one pending row was updated
    """
    now = responded_at or utcnow()
    result = await db.execute(
        update(CollaborationRequest)
        .where(
            CollaborationRequest.id == request_id,
            CollaborationRequest.entrepreneur_id == entrepreneur_id,
            CollaborationRequest.status == RequestStatus.PENDING.value,
        )
        .values(
            status=RequestStatus(status).value,
            response_message=response_message,
            responded_at=now,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def delete_pending(db: AsyncSession, request_id: UUID, investor_id: UUID) -> bool:
    """
    Delete a pending request originated by the investor.

    Returns:
        bool: True if exactly one pending row was deleted
    """
    result = await db.execute(
        delete(CollaborationRequest)
        .where(
            CollaborationRequest.id == request_id,
            CollaborationRequest.investor_id == investor_id,
            CollaborationRequest.status == RequestStatus.PENDING.value,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def list_for_party(
    db: AsyncSession,
    party_id: UUID,
    status: Optional[RequestStatus] = None,
    skip: int = 0,
    limit: int = 10,
) -> Tuple[List[CollaborationRequest], int]:
    """
    Get requests where the user is investor or entrepreneur, newest first.

    Returns:
        Tuple of (page of requests, total matching count)
    """
    conditions = [
        or_(
            CollaborationRequest.investor_id == party_id,
            CollaborationRequest.entrepreneur_id == party_id,
        )
    ]
    if status is not None:
        conditions.append(CollaborationRequest.status == RequestStatus(status).value)

    total = await db.scalar(select(func.count()).select_from(CollaborationRequest).where(*conditions))

    stmt = _with_parties(
        select(CollaborationRequest)
        .where(*conditions)
        .order_by(CollaborationRequest.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all()), total or 0
