import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import schemas
from ..auth.principal import Principal
from ..context import AppContext
from ..crud import crud_notification
from ..models.notification import NotificationStatus
from ..services import policy
from ..services.directories import UserDirectory
from ..utils.email import EmailDeliveryError
from ..utils.errors import Forbidden, NotFound
from .dependencies import get_context, get_db, get_principal, get_user_directory, page_params

router = APIRouter(tags=["notifications"])
logger = logging.getLogger(__name__)


def _deliver(ctx: AppContext, to: str, subject: str, message: str) -> NotificationStatus:
    try:
        ctx.mailer.send(to, subject, message)
    except EmailDeliveryError as exc:
        logger.warning("Notification to %s not delivered: %s", to, exc)
        return NotificationStatus.FAILED
    return NotificationStatus.SENT


@router.post("/send", response_model=schemas.NotificationRead, status_code=status.HTTP_201_CREATED)
def send_email(
    payload: schemas.NotificationSend,
    principal: Principal = Depends(get_principal),
    ctx: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    if not policy.can_send_notification(principal, recipient_email=payload.to):
        logger.warning("Notification denied", extra={"principal_id": principal.id, "recipient": payload.to})
        raise Forbidden("Not allowed to notify this recipient")
    result = _deliver(ctx, payload.to, payload.subject, payload.message)
    return crud_notification.create_notification(
        db,
        to=payload.to,
        subject=payload.subject,
        message=payload.message,
        status=result,
        created_by=principal.id,
    )


@router.post("/notifications", response_model=schemas.NotificationRead, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: schemas.NotificationCreate,
    principal: Principal = Depends(get_principal),
    users: UserDirectory = Depends(get_user_directory),
    ctx: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    if not policy.can_send_notification(principal, recipient_user_id=payload.user_id):
        logger.warning("Notification denied", extra={"principal_id": principal.id, "recipient": payload.user_id})
        raise Forbidden("Not allowed to notify this user")
    if payload.user_id == principal.id and principal.email:
        to = principal.email
    else:
        to = users.get(payload.user_id).email
    result = _deliver(ctx, to, payload.subject, payload.message)
    return crud_notification.create_notification(
        db,
        to=to,
        subject=payload.subject,
        message=payload.message,
        status=result,
        created_by=principal.id,
        recipient_id=payload.user_id,
    )


@router.get("/notifications", response_model=schemas.NotificationList)
def list_notifications(
    paging: tuple = Depends(page_params),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    if not principal.is_admin:
        raise Forbidden("Only admins can list all notifications")
    page, limit = paging
    notifications, pagination = crud_notification.list_notifications(db, page, limit)
    return {"notifications": notifications, "pagination": pagination}


@router.get("/notifications/{notification_id}", response_model=schemas.NotificationRead)
def read_notification(
    notification_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    notification = crud_notification.get_notification(db, notification_id)
    if notification is None:
        raise NotFound("Notification not found")
    if not policy.can_view_notification(principal, notification):
        raise Forbidden("Not allowed to view this notification")
    is_recipient = notification.recipient_id == principal.id or (
        principal.email and notification.to.lower() == principal.email.lower()
    )
    if is_recipient:
        notification = crud_notification.mark_read(db, notification)
    return notification


@router.get("/user/notifications", response_model=schemas.NotificationList)
def list_my_notifications(
    paging: tuple = Depends(page_params),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    page, limit = paging
    notifications, pagination = crud_notification.list_for_recipient(db, principal.id, principal.email, page, limit)
    return {"notifications": notifications, "pagination": pagination}
