"""
Expense Claim Routes
Claims are filed against the submitter's approved travel requests
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from travel_expense.config.database import get_db
from travel_expense.config.settings import settings
from travel_expense.models.approvable import ApprovalStatus, RequestKind
from travel_expense.models.user import User
from travel_expense.schemas.approval import ReviewCreate
from travel_expense.schemas.expense import (
    ExpenseClaimCreate,
    ExpenseClaimResponse,
    ExpenseClaimListResponse,
)
from travel_expense.services.approval_service import approval_engine
from travel_expense.services.auth_service import auth_service
from travel_expense.services.notification_service import notification_fanout
from travel_expense.utils.helpers import clamp_pagination
from travel_expense.utils.logger import setup_logger

logger = setup_logger()
router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_expense_claim(
    payload: ExpenseClaimCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    """Submit an expense claim for an approved travel request"""
    expense_claim = approval_engine.submit_expense_claim(db, current_user, payload)

    background_tasks.add_task(
        notification_fanout.notify_submission,
        RequestKind.EXPENSE,
        expense_claim.id
    )

    return {
        "success": True,
        "message": "Expense claim submitted successfully",
        "expense_claim": ExpenseClaimResponse.model_validate(expense_claim)
    }


@router.get("", response_model=ExpenseClaimListResponse)
async def list_expense_claims(
    status_filter: Optional[ApprovalStatus] = Query(None, alias="status"),
    employee_id: Optional[int] = None,
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    """List expense claims visible to the current user, newest first"""
    page, limit = clamp_pagination(page, limit, settings.DEFAULT_PAGE_SIZE)
    claims, total, total_pages = approval_engine.list_requests(
        db,
        RequestKind.EXPENSE,
        current_user,
        status=status_filter,
        employee_id=employee_id,
        page=page,
        limit=limit
    )

    return ExpenseClaimListResponse(
        expense_claims=[ExpenseClaimResponse.model_validate(c) for c in claims],
        total=total,
        total_pages=total_pages,
        current_page=page
    )


@router.get("/{claim_id}", response_model=ExpenseClaimResponse)
async def get_expense_claim(
    claim_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    return approval_engine.get_request(db, RequestKind.EXPENSE, claim_id, current_user)


@router.patch("/{claim_id}/status")
async def review_expense_claim(
    claim_id: int,
    review: ReviewCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    """Approve or reject an expense claim"""
    decision = review.status.to_status()
    expense_claim = approval_engine.review(
        db,
        RequestKind.EXPENSE,
        claim_id,
        current_user,
        decision,
        review.review_comments
    )

    background_tasks.add_task(
        notification_fanout.notify_review_outcome,
        RequestKind.EXPENSE,
        expense_claim.id,
        current_user.id,
        decision,
        review.review_comments
    )

    return {
        "success": True,
        "message": f"Expense claim {decision.value.lower()} successfully",
        "expense_claim": ExpenseClaimResponse.model_validate(expense_claim)
    }
