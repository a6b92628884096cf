"""
Travel Request Routes
Submit, list, view and review travel requests
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from travel_expense.config.database import get_db
from travel_expense.config.settings import settings
from travel_expense.models.approvable import ApprovalStatus, RequestKind
from travel_expense.models.user import User
from travel_expense.schemas.approval import ReviewCreate
from travel_expense.schemas.travel import (
    TravelRequestCreate,
    TravelRequestResponse,
    TravelRequestListResponse,
)
from travel_expense.services.approval_service import approval_engine
from travel_expense.services.auth_service import auth_service
from travel_expense.services.notification_service import notification_fanout
from travel_expense.utils.helpers import clamp_pagination
from travel_expense.utils.logger import setup_logger

logger = setup_logger()
router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_travel_request(
    payload: TravelRequestCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    """
    Submit a travel request

    The manager and admins are notified after the response is sent.
    """
    travel_request = approval_engine.submit_travel_request(db, current_user, payload)

    background_tasks.add_task(
        notification_fanout.notify_submission,
        RequestKind.TRAVEL,
        travel_request.id
    )

    return {
        "success": True,
        "message": "Travel request submitted successfully",
        "travel_request": TravelRequestResponse.model_validate(travel_request)
    }


@router.get("", response_model=TravelRequestListResponse)
async def list_travel_requests(
    status_filter: Optional[ApprovalStatus] = Query(None, alias="status"),
    employee_id: Optional[int] = None,
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    """
    List travel requests visible to the current user, newest first

    **Parameters:**
    - status: Filter by overall status
    - employee_id: Admins filter by submitter; managers pass their own id to see their own requests
    - page, limit: Pagination
    """
    page, limit = clamp_pagination(page, limit, settings.DEFAULT_PAGE_SIZE)
    requests, total, total_pages = approval_engine.list_requests(
        db,
        RequestKind.TRAVEL,
        current_user,
        status=status_filter,
        employee_id=employee_id,
        page=page,
        limit=limit
    )

    return TravelRequestListResponse(
        travel_requests=[TravelRequestResponse.model_validate(r) for r in requests],
        total=total,
        total_pages=total_pages,
        current_page=page
    )


@router.get("/{request_id}", response_model=TravelRequestResponse)
async def get_travel_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    """Get one travel request"""
    return approval_engine.get_request(db, RequestKind.TRAVEL, request_id, current_user)


@router.patch("/{request_id}/status")
async def review_travel_request(
    request_id: int,
    review: ReviewCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    """
    Approve or reject a travel request

    Managers review their direct reports' requests; admins review any
    request and their decision is final.
    """
    decision = review.status.to_status()
    travel_request = approval_engine.review(
        db,
        RequestKind.TRAVEL,
        request_id,
        current_user,
        decision,
        review.review_comments
    )

    background_tasks.add_task(
        notification_fanout.notify_review_outcome,
        RequestKind.TRAVEL,
        travel_request.id,
        current_user.id,
        decision,
        review.review_comments
    )

    return {
        "success": True,
        "message": f"Travel request {decision.value.lower()} successfully",
        "travel_request": TravelRequestResponse.model_validate(travel_request)
    }
