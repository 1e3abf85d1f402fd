"""Follow-up work after a booking transition is persisted.

The booking write is authoritative; calendar updates and emails are best
effort and their failures are only logged.
"""

from typing import Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..crud import crud_calendar
from ..models.booking import BookingStatus
from ..utils.email import EmailDeliveryError, Mailer
from ..utils.errors import BanquetError
from .directories import UserDirectory

logger = logging.getLogger(__name__)


def sync_calendar(db: Session, booking: models.Booking) -> None:
    """Reserve the venue's day for a confirmed booking, release it otherwise."""
    if booking.status == BookingStatus.CONFIRMED:
        event = crud_calendar.get_event_for_day(db, booking.venue_id, booking.date)
        if event is None:
            crud_calendar.create_event(
                db,
                booking.vendor_id,
                {"venue_id": booking.venue_id, "date": booking.date, "is_available": False, "booking_id": booking.id},
            )
        else:
            crud_calendar.update_event(db, event, {"is_available": False, "booking_id": booking.id})
        return

    event = (
        db.query(models.CalendarEvent)
        .filter(models.CalendarEvent.booking_id == booking.id)
        .first()
    )
    if event is not None:
        crud_calendar.update_event(db, event, {"is_available": True, "booking_id": None})


def notify_user(booking: models.Booking, mailer: Mailer, users: UserDirectory) -> None:
    status = getattr(booking.status, "value", booking.status)
    user = users.get(booking.user_id)
    mailer.send(
        user.email,
        f"Your booking #{booking.id} is {status}",
        f"Your booking for {booking.date.isoformat()} is now {status}.",
    )


def after_status_change(
    db: Session,
    booking: models.Booking,
    previous: Optional[BookingStatus],
    mailer: Mailer,
    users: UserDirectory,
) -> None:
    if previous is None:
        return
    try:
        sync_calendar(db, booking)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Calendar sync failed for booking %s: %s", booking.id, exc)
    try:
        notify_user(booking, mailer, users)
    except (BanquetError, EmailDeliveryError) as exc:
        logger.warning("Booking email for %s not sent: %s", booking.id, exc)
