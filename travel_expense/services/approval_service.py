"""
Approval Service
Hierarchical (manager + admin) approval state machine shared by travel
requests and expense claims
"""

from sqlalchemy import select
from sqlalchemy.orm import Session, Query
from datetime import datetime, date
from typing import Callable, Dict, Optional, Tuple, Type, Union
import enum
import math

from travel_expense.models.approvable import ApprovalStatus, RequestKind, derive_status
from travel_expense.models.travel_request import TravelRequest
from travel_expense.models.expense_claim import ExpenseClaim
from travel_expense.models.user import User, UserRole
from travel_expense.schemas.travel import TravelRequestCreate
from travel_expense.schemas.expense import ExpenseClaimCreate
from travel_expense.utils.helpers import format_date
from travel_expense.utils.exceptions import (
    RequestNotFoundError,
    ForbiddenActionError,
    RequestFinalizedError,
    SubmissionValidationError,
)
from travel_expense.utils.logger import setup_logger

logger = setup_logger()

ApprovableRequest = Union[TravelRequest, ExpenseClaim]

REQUEST_MODELS: Dict[RequestKind, Type[ApprovableRequest]] = {
    RequestKind.TRAVEL: TravelRequest,
    RequestKind.EXPENSE: ExpenseClaim,
}


class ReviewTier(str, enum.Enum):
    """Review levels"""
    MANAGER = "manager"
    ADMIN = "admin"


# Roles allowed to review, and the tier they act at
REVIEWER_TIERS: Dict[UserRole, ReviewTier] = {
    UserRole.MANAGER: ReviewTier.MANAGER,
    UserRole.ADMIN: ReviewTier.ADMIN,
}


class ApprovalEngine:
    """Validates and applies submissions and reviews"""

    def __init__(self, today: Callable[[], date] = date.today):
        """
        Args:
            today: Clock for date-only submission checks
        """
        self.today = today

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit_travel_request(
        self,
        db: Session,
        submitter: User,
        payload: TravelRequestCreate
    ) -> TravelRequest:
        """
        Create a travel request in the Pending/Pending/Pending state

        Args:
            db: Database session
            submitter: Authenticated principal
            payload: Validated request body

        Returns:
            TravelRequest: Created request

        Raises:
            ForbiddenActionError: If the submitter may not submit requests
            SubmissionValidationError: If the travel dates are invalid
        """
        self._check_can_submit(submitter, RequestKind.TRAVEL)

        today = self.today()
        if payload.start_date < today:
            raise SubmissionValidationError("Travel start date must be today or a future date.")
        if payload.end_date < payload.start_date:
            raise SubmissionValidationError("Return date must be the same as or after travel start date.")

        travel_request = TravelRequest(
            employee_id=submitter.id,
            destination=payload.destination,
            purpose=payload.purpose,
            start_date=payload.start_date,
            end_date=payload.end_date,
            estimated_cost=payload.estimated_cost,
            priority=payload.priority,
            status=ApprovalStatus.PENDING,
            manager_status=ApprovalStatus.PENDING,
            admin_status=ApprovalStatus.PENDING,
        )
        db.add(travel_request)
        db.commit()
        db.refresh(travel_request)

        logger.info(
            f"Travel request {travel_request.id} to {travel_request.destination} "
            f"submitted by user {submitter.id}"
        )
        return travel_request

    def submit_expense_claim(
        self,
        db: Session,
        submitter: User,
        payload: ExpenseClaimCreate
    ) -> ExpenseClaim:
        """
        Create an expense claim against an approved travel request

        The claim date must fall inside the travel window, both ends included.

        Raises:
            ForbiddenActionError: If the submitter may not submit requests
            SubmissionValidationError: If the travel request is missing,
                not approved, not the submitter's, or the date is outside the window
        """
        self._check_can_submit(submitter, RequestKind.EXPENSE)

        travel_request = db.query(TravelRequest).filter(
            TravelRequest.id == payload.travel_request_id
        ).first()

        if (
            not travel_request
            or travel_request.status != ApprovalStatus.APPROVED
            or travel_request.employee_id != submitter.id
        ):
            raise SubmissionValidationError("Invalid or unapproved travel request")

        if not (travel_request.start_date <= payload.expense_date <= travel_request.end_date):
            raise SubmissionValidationError(
                "Expense date must be within the travel period: "
                f"{format_date(travel_request.start_date)} to "
                f"{format_date(travel_request.end_date)}"
            )

        expense_claim = ExpenseClaim(
            employee_id=submitter.id,
            travel_request_id=travel_request.id,
            amount=payload.amount,
            description=payload.description,
            expense_date=payload.expense_date,
            category=payload.category,
            status=ApprovalStatus.PENDING,
            manager_status=ApprovalStatus.PENDING,
            admin_status=ApprovalStatus.PENDING,
        )
        db.add(expense_claim)
        db.commit()
        db.refresh(expense_claim)

        logger.info(
            f"Expense claim {expense_claim.id} of {expense_claim.amount} for travel request "
            f"{travel_request.id} submitted by user {submitter.id}"
        )
        return expense_claim

    def _check_can_submit(self, submitter: User, kind: RequestKind):
        if not submitter.can_submit_requests():
            raise ForbiddenActionError(
                f"Only employees or managers can submit {kind.label.lower()}s"
            )

    # ------------------------------------------------------------------
    # Review
    # ------------------------------------------------------------------

    def review(
        self,
        db: Session,
        kind: RequestKind,
        request_id: int,
        reviewer: User,
        decision: ApprovalStatus,
        comments: Optional[str] = None
    ) -> ApprovableRequest:
        """
        Apply a manager or admin decision

        All field changes go out in one UPDATE guarded by
        ``admin_status = Pending``; a request finalized by a concurrent admin
        review is left untouched.

        Args:
            db: Database session
            kind: Request kind
            request_id: Request id
            reviewer: Authenticated principal acting as reviewer
            decision: Approved or Rejected
            comments: Optional review comments

        Returns:
            Updated request

        Raises:
            RequestNotFoundError: Unknown request id
            ForbiddenActionError: Self-review, unassigned manager, or role without review rights
            RequestFinalizedError: Admin has already decided
        """
        if decision not in (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED):
            raise SubmissionValidationError("Decision must be Approved or Rejected")

        model = REQUEST_MODELS[kind]
        request = db.query(model).filter(model.id == request_id).first()

        if not request:
            raise RequestNotFoundError(f"{kind.label} not found")

        if request.employee_id == reviewer.id:
            raise ForbiddenActionError(f"You cannot approve or reject your own {kind.label.lower()}")

        if request.is_finalized:
            raise RequestFinalizedError(
                f"This {kind.label.lower()} is finalized by admin. No further action allowed."
            )

        tier = REVIEWER_TIERS.get(reviewer.role)
        if tier is None or not reviewer.is_active:
            raise ForbiddenActionError("Only manager or admin can approve/reject requests.")

        if tier is ReviewTier.MANAGER and not reviewer.manages(request.employee):
            raise ForbiddenActionError(f"You are not authorized to approve/reject this {kind.label.lower()}")

        values = self._tier_update(tier, request, reviewer, decision, comments)

        updated = db.query(model).filter(
            model.id == request_id,
            model.admin_status == ApprovalStatus.PENDING
        ).update(values, synchronize_session=False)

        if updated == 0:
            db.rollback()
            logger.warning(
                f"{kind.label} {request_id} was finalized before {reviewer.id}'s {tier.value} review was applied"
            )
            raise RequestFinalizedError(
                f"This {kind.label.lower()} is finalized by admin. No further action allowed."
            )

        db.commit()
        db.refresh(request)

        logger.info(
            f"{kind.label} {request.id} {decision.value.lower()} by user {reviewer.id} at {tier.value} level. "
            f"Status: {request.status.value} (manager: {request.manager_status.value}, "
            f"admin: {request.admin_status.value})"
        )
        return request

    def _tier_update(
        self,
        tier: ReviewTier,
        request: ApprovableRequest,
        reviewer: User,
        decision: ApprovalStatus,
        comments: Optional[str]
    ) -> dict:
        """Column values written by a review at the given tier"""
        now = datetime.utcnow()

        if tier is ReviewTier.MANAGER:
            # The write is conditional on admin_status still being Pending
            return {
                "manager_status": decision,
                "manager_reviewer_id": reviewer.id,
                "manager_comments": comments,
                "manager_reviewed_at": now,
                "status": derive_status(decision, ApprovalStatus.PENDING),
                "updated_at": now,
            }

        if tier is ReviewTier.ADMIN:
            return {
                "admin_status": decision,
                "admin_reviewer_id": reviewer.id,
                "admin_comments": comments,
                "admin_reviewed_at": now,
                "status": derive_status(request.manager_status, decision),
                "updated_at": now,
            }

        raise ForbiddenActionError("Only manager or admin can approve/reject requests.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_request(
        self,
        db: Session,
        kind: RequestKind,
        request_id: int,
        viewer: User
    ) -> ApprovableRequest:
        """
        Load one request visible to the viewer

        Visible to the submitter, the submitter's assigned manager, and admins.
        """
        model = REQUEST_MODELS[kind]
        request = db.query(model).filter(model.id == request_id).first()

        if not request:
            raise RequestNotFoundError(f"{kind.label} not found")

        if not self.can_view(viewer, request):
            raise ForbiddenActionError(f"You are not authorized to view this {kind.label.lower()}")

        return request

    def can_view(self, viewer: User, request: ApprovableRequest) -> bool:
        if viewer.role == UserRole.ADMIN:
            return True
        if request.employee_id == viewer.id:
            return True
        return viewer.role == UserRole.MANAGER and viewer.manages(request.employee)

    def list_requests(
        self,
        db: Session,
        kind: RequestKind,
        viewer: User,
        status: Optional[ApprovalStatus] = None,
        employee_id: Optional[int] = None,
        page: int = 1,
        limit: int = 10
    ) -> Tuple[list, int, int]:
        """
        Role-scoped, newest-first page of requests

        Employees see their own requests. Managers see their direct reports'
        requests, or their own when ``employee_id`` is their id. Admins see all.

        Returns:
            Tuple of (requests, total, total_pages)
        """
        model = REQUEST_MODELS[kind]
        query = self._visible_query(db, model, viewer, employee_id)

        if status:
            query = query.filter(model.status == status)

        total = query.count()
        requests = query.order_by(model.created_at.desc(), model.id.desc()).offset(
            (page - 1) * limit
        ).limit(limit).all()

        total_pages = math.ceil(total / limit) if limit else 0
        return requests, total, total_pages

    def _visible_query(
        self,
        db: Session,
        model: Type[ApprovableRequest],
        viewer: User,
        employee_id: Optional[int]
    ) -> Query:
        query = db.query(model)

        if viewer.role == UserRole.EMPLOYEE:
            return query.filter(model.employee_id == viewer.id)

        if viewer.role == UserRole.MANAGER:
            if employee_id is not None and employee_id == viewer.id:
                return query.filter(model.employee_id == viewer.id)
            report_ids = select(User.id).where(User.manager_id == viewer.id)
            query = query.filter(model.employee_id.in_(report_ids))
            if employee_id is not None:
                query = query.filter(model.employee_id == employee_id)
            return query

        # Admins see every request
        if employee_id is not None:
            query = query.filter(model.employee_id == employee_id)
        return query


# Create singleton instance
approval_engine = ApprovalEngine()
