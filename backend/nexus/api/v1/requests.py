"""
API endpoints for collaboration requests between investors and entrepreneurs.
"""
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from nexus.api.dependencies import get_request_service
from nexus.auth.dependencies import get_current_user, require_role
from nexus.core.enums import Role
from nexus.db.models.user import User
from nexus.schemas.common import ApiResponse, Pagination
from nexus.schemas.request import RequestCreate, RequestRead, RequestRespond, RequestStatusFilter
from nexus.services.requests import CollaborationRequestService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/requests",
    tags=["requests"],
)


@router.post(
    "",
    response_model=ApiResponse[RequestRead],
    status_code=status.HTTP_201_CREATED,
    summary="Send a collaboration request (investors only)",
)
async def create_request(
    body: RequestCreate,
    current_user: User = Depends(require_role(Role.INVESTOR)),
    service: CollaborationRequestService = Depends(get_request_service),
):
    db_request = await service.create(current_user, body.entrepreneur_id, body.message)
    return ApiResponse(
        message="Collaboration request sent successfully",
        data=RequestRead.model_validate(db_request),
    )


@router.get("", response_model=ApiResponse[List[RequestRead]], summary="List the caller's requests")
async def list_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: RequestStatusFilter = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    service: CollaborationRequestService = Depends(get_request_service),
):
    """
    Requests where the caller is either party, newest first.
    """
    requests, total = await service.list_for_user(current_user, status_filter, page=page, limit=limit)
    return ApiResponse(
        data=[RequestRead.model_validate(r) for r in requests],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{request_id}", response_model=ApiResponse[RequestRead], summary="Get one request")
async def get_request(
    request_id: UUID,
    current_user: User = Depends(get_current_user),
    service: CollaborationRequestService = Depends(get_request_service),
):
    db_request = await service.get(current_user, request_id)
    return ApiResponse(data=RequestRead.model_validate(db_request))


@router.patch(
    "/{request_id}",
    response_model=ApiResponse[RequestRead],
    summary="Accept or reject a request (entrepreneurs only)",
)
async def respond_to_request(
    request_id: UUID,
    body: RequestRespond,
    current_user: User = Depends(require_role(Role.ENTREPRENEUR)),
    service: CollaborationRequestService = Depends(get_request_service),
):
    db_request = await service.respond(current_user, request_id, body.status, body.response_message)
    return ApiResponse(
        message=f"Request {db_request.status} successfully",
        data=RequestRead.model_validate(db_request),
    )


@router.delete("/{request_id}", response_model=ApiResponse[None], summary="Withdraw a pending request (investors only)")
async def delete_request(
    request_id: UUID,
    current_user: User = Depends(require_role(Role.INVESTOR)),
    service: CollaborationRequestService = Depends(get_request_service),
):
    await service.delete(current_user, request_id)
    return ApiResponse(message="Request deleted successfully")
