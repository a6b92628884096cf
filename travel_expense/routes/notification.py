"""
Notification Routes
User notification inbox and the real-time notification channel
"""

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy import func
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
import math

from travel_expense.config.database import SessionLocal, get_db
from travel_expense.config.settings import settings
from travel_expense.models.notification import Notification
from travel_expense.models.user import User
from travel_expense.schemas.notification import NotificationResponse
from travel_expense.services.auth_service import auth_service
from travel_expense.services.realtime_service import connection_registry
from travel_expense.utils.helpers import clamp_pagination
from travel_expense.utils.logger import setup_logger

logger = setup_logger()
router = APIRouter()


def _unread_query(db: Session, user: User):
    return db.query(Notification).filter(
        Notification.recipient_id == user.id,
        Notification.is_read == False  # noqa: E712
    )


@router.get("")
async def get_my_notifications(
    unread_only: bool = False,
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    """
    Get current user's notifications, newest first

    **Parameters:**
    - unread_only: If True, only return unread notifications
    - page, limit: Pagination

    **Returns:**
    - notifications: Notification objects
    - total: Matching notification count
    - unread_count: Count of unread notifications
    """
    page, limit = clamp_pagination(page, limit, settings.NOTIFICATION_PAGE_SIZE)

    query = db.query(Notification).filter(Notification.recipient_id == current_user.id)
    if unread_only:
        query = query.filter(Notification.is_read == False)  # noqa: E712

    total = query.count()
    notifications = query.order_by(
        Notification.created_at.desc(),
        Notification.id.desc()
    ).offset((page - 1) * limit).limit(limit).all()

    unread_count = _unread_query(db, current_user).count()

    logger.info(
        f"User {current_user.id} fetched {len(notifications)} notifications (unread: {unread_count})"
    )

    return {
        "success": True,
        "notifications": [NotificationResponse.model_validate(n) for n in notifications],
        "total": total,
        "unread_count": unread_count,
        "total_pages": math.ceil(total / limit),
        "current_page": page
    }


@router.get("/unread-count")
async def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    """Count of unread notifications (lightweight endpoint for polling)"""
    return {
        "success": True,
        "unread_count": _unread_query(db, current_user).count()
    }


@router.get("/stats")
async def get_notification_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    """
    Notification statistics for current user

    **Returns:**
    - total, unread, read
    - by_type: Count of notifications by type
    """
    total = db.query(Notification).filter(
        Notification.recipient_id == current_user.id
    ).count()
    unread = _unread_query(db, current_user).count()

    type_counts = db.query(
        Notification.type,
        func.count(Notification.id).label("count")
    ).filter(
        Notification.recipient_id == current_user.id
    ).group_by(Notification.type).all()

    return {
        "success": True,
        "total": total,
        "unread": unread,
        "read": total - unread,
        "by_type": {notification_type.value: count for notification_type, count in type_counts}
    }


@router.patch("/read-all")
async def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    """Mark all notifications as read for current user"""
    count = _unread_query(db, current_user).update({
        "is_read": True,
        "read_at": datetime.utcnow()
    }, synchronize_session=False)
    db.commit()

    logger.info(f"User {current_user.id} marked {count} notifications as read")

    return {
        "success": True,
        "message": "All notifications marked as read" if count else "No unread notifications to mark",
        "count": count
    }


@router.patch("/{notification_id}/read")
async def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user)
):
    """
    Mark a notification as read

    Only the recipient may do this; anyone else gets 404.
    """
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.recipient_id == current_user.id
    ).first()

    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.utcnow()
        db.commit()
        db.refresh(notification)
        logger.info(f"User {current_user.id} marked notification {notification_id} as read")

    return {
        "success": True,
        "message": "Notification marked as read",
        "notification": NotificationResponse.model_validate(notification)
    }


@router.websocket("/ws")
async def notification_socket(websocket: WebSocket, token: str = Query(...)):
    """
    Real-time notification channel

    Connect with ``?token=<bearer token>``. New notifications arrive as
    ``{"event": "notification", "data": {...}}``; a text "ping" is answered
    with "pong".
    """
    db = SessionLocal()
    try:
        user = auth_service.resolve_user(db, token)
        user_id = user.id if user else None
    finally:
        db.close()

    if user_id is None:
        logger.warning("Rejected notification socket with invalid token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    connection_registry.register(user_id, websocket)

    try:
        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect as e:
        logger.debug(f"Notification socket for user {user_id} closed ({e.code})")
    finally:
        connection_registry.unregister(user_id, websocket)
