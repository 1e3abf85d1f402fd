"""Booking status transitions.

    pending -> confirmed -> cancelled
    pending -> cancelled

Nothing leaves ``cancelled``. Requesting the current status is a no-op.
"""

from datetime import datetime
from typing import Any, Optional
import logging

from sqlalchemy.orm import Session

from ..auth.principal import Principal
from ..crud import crud_booking
from ..models.booking import Booking, BookingStatus
from ..utils.errors import Conflict, Forbidden, InvalidStatus, ValidationError
from . import policy

logger = logging.getLogger(__name__)

TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED},
    BookingStatus.CANCELLED: set(),
}

DEFAULT_DELETION_REASON = "User requested deletion"


def parse_status(value: Any) -> BookingStatus:
    if isinstance(value, BookingStatus):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("status", "status is required")
    try:
        return BookingStatus(value.strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in BookingStatus)
        raise ValidationError("status", f"Invalid status. Must be one of: {allowed}")


def check_transition(
    principal: Principal,
    booking: Booking,
    target: BookingStatus,
    now: datetime,
    notice_days: int = policy.CANCELLATION_NOTICE_DAYS,
) -> bool:
    """Validate moving ``booking`` to ``target``.

    Returns False for a self-transition (nothing to do), True when the
    transition may proceed, and raises InvalidStatus or Forbidden otherwise.
    """
    current = BookingStatus(booking.status)
    if target == current:
        return False
    if target not in TRANSITIONS[current]:
        raise InvalidStatus(current, target)
    if target == BookingStatus.CONFIRMED and not policy.can_confirm_booking(principal, booking):
        raise Forbidden("Only the venue's vendor or an admin can confirm a booking")
    if target == BookingStatus.CANCELLED and not policy.can_cancel_booking(principal, booking, now, notice_days):
        remaining = policy.cancellation_days_remaining(booking, now)
        if policy.can_access_booking(principal, booking) and remaining < notice_days:
            raise Forbidden(
                f"Confirmed bookings cannot be cancelled less than {notice_days} days before the event",
                {"daysUntilEvent": remaining, "minDaysRequired": notice_days},
            )
        raise Forbidden("Not allowed to cancel this booking")
    return True


def change_status(
    db: Session,
    principal: Principal,
    booking: Booking,
    raw_status: Any,
    now: datetime,
    notice_days: int = policy.CANCELLATION_NOTICE_DAYS,
) -> Optional[BookingStatus]:
    """Apply a status change and return the previous status.

    Returns None when the booking already had the requested status.
    """
    target = parse_status(raw_status)
    if not check_transition(principal, booking, target, now, notice_days):
        return None
    previous = BookingStatus(booking.status)
    if target == BookingStatus.CONFIRMED and crud_booking.has_confirmed_booking(
        db, booking.venue_id, booking.date, exclude_id=booking.id
    ):
        raise Conflict(
            "Venue is already booked for this date",
            {"venueId": booking.venue_id, "date": booking.date.isoformat()},
        )
    crud_booking.compare_and_set_status(db, booking, previous, target)
    logger.info(
        "Booking status changed",
        extra={
            "booking_id": booking.id,
            "from_status": previous.value,
            "to_status": target.value,
            "principal_id": principal.id,
        },
    )
    return previous


def delete_booking(
    db: Session,
    principal: Principal,
    booking: Booking,
    reason: Optional[str],
    now: datetime,
) -> bool:
    """Soft-delete ``booking``: force it to cancelled and stamp who/when/why.

    Returns False when the booking was already deleted.
    """
    if not policy.can_delete_booking(principal, booking):
        raise Forbidden("Only the booking's user or an admin can delete a booking")
    if booking.deleted_at is not None:
        return False
    current = BookingStatus(booking.status)
    crud_booking.compare_and_set_status(
        db,
        booking,
        current,
        BookingStatus.CANCELLED,
        deleted_by=principal.id,
        deleted_at=now,
        deletion_reason=(reason or "").strip() or DEFAULT_DELETION_REASON,
    )
    logger.info(
        "Booking deleted",
        extra={"booking_id": booking.id, "principal_id": principal.id, "reason": booking.deletion_reason},
    )
    return True
