"""
Notification Service
Fans a submission or review outcome out to persisted notifications,
real-time pushes, emails and the audit trail
"""

import asyncio
import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from typing import Any, Callable, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from travel_expense.config.database import SessionLocal
from travel_expense.config.settings import settings
from travel_expense.models.approvable import ApprovalStatus, RequestKind
from travel_expense.models.notification import Notification, NotificationType, RelatedKind
from travel_expense.models.user import User, UserRole
from travel_expense.schemas.notification import NotificationResponse
from travel_expense.services.approval_service import REQUEST_MODELS
from travel_expense.services.audit_service import AuditService, audit_service
from travel_expense.services.email_service import EmailService, email_service
from travel_expense.services.realtime_service import ConnectionRegistry, connection_registry
from travel_expense.utils.helpers import format_currency, format_date
from travel_expense.utils.logger import setup_logger

logger = setup_logger()


class NotificationFanout:
    """
    Best-effort side-effect pipeline run after a transition is committed

    Every channel is independent: a failed push, email or audit write never
    affects another channel or the already-committed transition. The
    persisted notification write is the only durable record a recipient sees
    in-app, so it is retried before being abandoned.

    Session work runs in the threadpool; the event loop only awaits pushes,
    side effects and the delay between write attempts.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        registry: ConnectionRegistry,
        mailer: EmailService,
        auditor: AuditService,
        write_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None
    ):
        self.session_factory = session_factory
        self.registry = registry
        self.mailer = mailer
        self.auditor = auditor
        self.write_attempts = write_attempts or settings.NOTIFICATION_WRITE_ATTEMPTS
        self.retry_delay = settings.NOTIFICATION_RETRY_DELAY_SECONDS if retry_delay is None else retry_delay

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def notify_submission(self, kind: RequestKind, request_id: int):
        """
        Notify the assigned manager and all active admins of a new request,
        and email the submitter and the manager

        Args:
            kind: Request kind
            request_id: Id of the submitted request
        """
        db = self.session_factory()
        try:
            plan = await run_in_threadpool(self._plan_submission, db, kind, request_id)
            if plan is None:
                return

            await self._push_all(await self._persist(db, plan["manager_rows"]))
            await self._push_all(await self._persist(db, plan["admin_rows"]))

            submitter_email, submitter_name = plan["submitter"]
            await self._guard(
                f"confirmation email to {submitter_email}",
                self.mailer.send_submission_confirmation,
                submitter_email, submitter_name, plan["text"]
            )
            if plan["manager"]:
                manager_email, manager_name = plan["manager"]
                await self._guard(
                    f"heads-up email to {manager_email}",
                    self.mailer.send_manager_heads_up,
                    manager_email, manager_name, submitter_name, plan["text"]
                )

            logger.info(f"Submission fan-out finished for {kind.label} {request_id}")
        except Exception:
            logger.exception(f"Submission fan-out failed for {kind.label} {request_id}")
        finally:
            await run_in_threadpool(db.close)

    async def notify_review_outcome(
        self,
        kind: RequestKind,
        request_id: int,
        reviewer_id: int,
        decision: ApprovalStatus,
        comments: Optional[str] = None
    ):
        """
        Notify the submitter (exactly once) and the other active admins of a
        review outcome, email the submitter and append an audit entry

        Args:
            kind: Request kind
            request_id: Id of the reviewed request
            reviewer_id: User who reviewed
            decision: Approved or Rejected
            comments: Reviewer comments
        """
        db = self.session_factory()
        try:
            plan = await run_in_threadpool(
                self._plan_review_outcome, db, kind, request_id, reviewer_id, decision, comments
            )
            if plan is None:
                return

            await self._push_all(await self._persist(db, plan["submitter_rows"]))
            await self._push_all(await self._persist(db, plan["admin_rows"]))

            email = plan["email"]
            await self._guard(
                f"outcome email to {email[0]}",
                self.mailer.send_review_outcome,
                *email
            )

            await self._guard(
                f"audit entry for {kind.label} {request_id}",
                self._record_audit,
                db, kind, request_id, reviewer_id, decision, comments, plan["text"]
            )

            logger.info(f"Review fan-out finished for {kind.label} {request_id}")
        except Exception:
            logger.exception(f"Review fan-out failed for {kind.label} {request_id}")
        finally:
            await run_in_threadpool(db.close)

    # ------------------------------------------------------------------
    # Planning (runs in the threadpool; returns plain values only)
    # ------------------------------------------------------------------

    def _plan_submission(self, db: Session, kind: RequestKind, request_id: int) -> Optional[Dict[str, Any]]:
        request = self._load_request(db, kind, request_id)
        if request is None:
            return None

        submitter = request.employee
        manager = submitter.manager if submitter.manager and submitter.manager.is_active else None
        text = self._describe(kind, request)
        notification_type = NotificationType.for_event(kind.value, "submitted")
        message = f"{submitter.full_name} submitted {text['phrase']}."

        notified = {submitter.id}
        manager_rows = []
        if manager:
            notified.add(manager.id)
            manager_rows.append(
                self._row(manager.id, f"New {kind.label} Submitted", message, notification_type, kind, request.id)
            )

        admin_rows = [
            self._row(admin.id, f"{kind.label} Submitted", message, notification_type, kind, request.id)
            for admin in self._active_admins(db)
            if admin.id not in notified
        ]

        return {
            "text": text,
            "manager_rows": manager_rows,
            "admin_rows": admin_rows,
            "submitter": (submitter.email, submitter.full_name),
            "manager": (manager.email, manager.full_name) if manager else None,
        }

    def _plan_review_outcome(
        self,
        db: Session,
        kind: RequestKind,
        request_id: int,
        reviewer_id: int,
        decision: ApprovalStatus,
        comments: Optional[str]
    ) -> Optional[Dict[str, Any]]:
        request = self._load_request(db, kind, request_id)
        reviewer = db.query(User).filter(User.id == reviewer_id).first()
        if request is None or reviewer is None:
            logger.warning(f"Review fan-out skipped: {kind.label} {request_id} or reviewer {reviewer_id} missing")
            return None

        submitter = request.employee
        text = self._describe(kind, request)
        notification_type = NotificationType.for_event(kind.value, decision.value.lower())
        verb = decision.value.lower()

        if reviewer.role == UserRole.ADMIN and submitter.role == UserRole.MANAGER:
            title = f"{kind.label} {decision.value} (Admin Action)"
            message = f"Your {text['summary_phrase']} has been {verb} by Admin {reviewer.full_name}."
            if comments:
                message += f"\nAdmin's comment: {comments}"
        else:
            title = f"{kind.label} {decision.value}"
            message = f"Your {text['summary_phrase']} has been {verb} by {reviewer.full_name}."
            if comments:
                message += f"\n{reviewer.role.value}'s comment: {comments}"

        admin_message = (
            f"{text['summary_phrase'][0].upper()}{text['summary_phrase'][1:]} submitted by "
            f"{submitter.full_name} has been {verb} by {reviewer.full_name}."
        )
        if comments:
            admin_message += f"\nComment: {comments}"
        admin_rows = [
            self._row(
                admin.id,
                f"{kind.label} {decision.value} by {reviewer.full_name}",
                admin_message,
                notification_type,
                kind,
                request.id
            )
            for admin in self._active_admins(db)
            if admin.id not in (reviewer.id, submitter.id)
        ]

        reviewed_at = request.admin_reviewed_at if reviewer.role == UserRole.ADMIN else request.manager_reviewed_at
        return {
            "text": text,
            "submitter_rows": [self._row(submitter.id, title, message, notification_type, kind, request.id)],
            "admin_rows": admin_rows,
            "email": (
                submitter.email, submitter.full_name, text, decision.value,
                reviewer.full_name, reviewer.role.value, comments, reviewed_at
            ),
        }

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------

    async def _persist(self, db: Session, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Insert notifications as one unit, retrying on database errors

        Returns:
            Serialized notifications that were stored (empty if abandoned)
        """
        if not rows:
            return []

        for attempt in range(1, self.write_attempts + 1):
            try:
                return await run_in_threadpool(self._write, db, rows)
            except SQLAlchemyError as e:
                if attempt < self.write_attempts:
                    logger.warning(
                        f"Notification write attempt {attempt}/{self.write_attempts} failed "
                        f"for recipients {[row['recipient_id'] for row in rows]}: {e}"
                    )
                    await asyncio.sleep(self.retry_delay)
                else:
                    logger.error(
                        f"Giving up on notifications for recipients "
                        f"{[row['recipient_id'] for row in rows]} after {attempt} attempts: {e}"
                    )
        return []

    def _write(self, db: Session, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        notifications = [Notification(**row) for row in rows]
        try:
            db.add_all(notifications)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        return [
            NotificationResponse.model_validate(notification).model_dump(mode="json")
            for notification in notifications
        ]


    async def _push_all(self, notifications: List[Dict[str, Any]]):
        for notification in notifications:
            await self._guard(
                f"push to user {notification['recipient_id']}",
                self.registry.push_if_connected,
                notification["recipient_id"],
                {"event": "notification", "data": notification}
            )

    async def _guard(self, description: str, func: Callable, *args):
        """Run one best-effort side effect, logging instead of raising"""
        try:
            if inspect.iscoroutinefunction(func):
                return await func(*args)
            return await run_in_threadpool(func, *args)
        except Exception as e:
            logger.warning(f"Side effect failed ({description}): {e}")
            return None

    def _record_audit(
        self,
        db: Session,
        kind: RequestKind,
        request_id: int,
        reviewer_id: int,
        decision: ApprovalStatus,
        comments: Optional[str],
        text: dict
    ):
        try:
            self.auditor.record(
                db,
                actor_id=reviewer_id,
                action=f"{kind.model_name} {decision.value}",
                entity_type=kind.model_name,
                entity_id=request_id,
                description=f"{kind.label} ID: {request_id}, {text['audit']}, comment: {comments or ''}",
                changes={
                    "reviewer_id": reviewer_id,
                    "decision": decision.value,
                    "request_id": request_id,
                    "comments": comments,
                }
            )
        except SQLAlchemyError:
            db.rollback()
            raise

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_request(self, db: Session, kind: RequestKind, request_id: int):
        model = REQUEST_MODELS[kind]
        request = db.query(model).filter(model.id == request_id).first()
        if request is None:
            logger.warning(f"{kind.label} {request_id} not found for notification fan-out")
        return request

    def _active_admins(self, db: Session) -> List[User]:
        return db.query(User).filter(
            User.role == UserRole.ADMIN,
            User.is_active == True  # noqa: E712
        ).order_by(User.id).all()

    def _row(
        self,
        recipient_id: int,
        title: str,
        message: str,
        notification_type: NotificationType,
        kind: RequestKind,
        request_id: int
    ) -> Dict[str, Any]:
        return {
            "recipient_id": recipient_id,
            "title": title,
            "message": message,
            "type": notification_type,
            "related_id": request_id,
            "related_kind": RelatedKind(kind.model_name),
        }

    def _describe(self, kind: RequestKind, request) -> dict:
        """Wording shared by notifications and emails"""
        if kind is RequestKind.TRAVEL:
            dates = f"{format_date(request.start_date)} to {format_date(request.end_date)}"
            summary = f"to {request.destination}"
            return {
                "label": kind.label,
                "summary": summary,
                "phrase": f"a travel request {summary}",
                "summary_phrase": f"travel request {summary}",
                "audit": f"Destination: {request.destination}",
                "details": [
                    ("Destination", request.destination),
                    ("Travel Dates", dates),
                    ("Estimated Cost", format_currency(request.estimated_cost)),
                    ("Priority", request.priority.value),
                ],
            }

        destination = request.travel_request.destination if request.travel_request else "N/A"
        amount = format_currency(request.amount)
        summary = f"of {amount} for {destination}"
        return {
            "label": kind.label,
            "summary": summary,
            "phrase": f"an expense claim {summary}",
            "summary_phrase": f"expense claim {summary}",
            "audit": f"Amount: {amount}",
            "details": [
                ("Amount", amount),
                ("Category", request.category.value),
                ("Expense Date", format_date(request.expense_date)),
                ("Destination", destination),
            ],
        }


# Process-lifetime fan-out bound to the shared connection registry
notification_fanout = NotificationFanout(SessionLocal, connection_registry, email_service, audit_service)
