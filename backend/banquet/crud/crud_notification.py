from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from .. import models
from ..models.notification import NotificationStatus
from ..utils.dates import utcnow
from .base import paginate


def create_notification(
    db: Session,
    to: str,
    subject: str,
    message: str,
    status: NotificationStatus,
    created_by: Optional[str] = None,
    recipient_id: Optional[str] = None,
) -> models.Notification:
    notification = models.Notification(
        to=to,
        subject=subject,
        message=message,
        status=status,
        created_by=created_by,
        recipient_id=recipient_id,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def get_notification(db: Session, notification_id: int) -> Optional[models.Notification]:
    return db.get(models.Notification, notification_id)


def mark_read(db: Session, notification: models.Notification) -> models.Notification:
    if notification.read_at is None:
        notification.read_at = utcnow()
        db.commit()
        db.refresh(notification)
    return notification


def list_notifications(db: Session, page: int, limit: int):
    query = db.query(models.Notification).order_by(models.Notification.id.desc())
    return paginate(query, page, limit)


def list_for_recipient(db: Session, user_id: str, email: Optional[str], page: int, limit: int):
    condition = models.Notification.recipient_id == user_id
    if email:
        condition = or_(condition, func.lower(models.Notification.to) == email.strip().lower())
    query = db.query(models.Notification).filter(condition).order_by(models.Notification.id.desc())
    return paginate(query, page, limit)
