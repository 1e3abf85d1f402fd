from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from .. import models
from ..models.booking import BookingStatus
from ..services.pricing import PricedBooking
from ..utils.errors import Conflict
from .base import compare_and_set, paginate


def has_confirmed_booking(
    db: Session,
    venue_id: int,
    on: date,
    exclude_id: Optional[int] = None,
) -> bool:
    query = db.query(models.Booking.id).filter(
        models.Booking.venue_id == venue_id,
        models.Booking.date == on,
        models.Booking.status == BookingStatus.CONFIRMED,
    )
    if exclude_id is not None:
        query = query.filter(models.Booking.id != exclude_id)
    return query.first() is not None


def create_booking(db: Session, priced: PricedBooking) -> models.Booking:
    if has_confirmed_booking(db, priced.venue_id, priced.date):
        raise Conflict("Venue is already booked for this date", {"venueId": priced.venue_id, "date": priced.date.isoformat()})
    booking = models.Booking(
        user_id=priced.user_id,
        venue_id=priced.venue_id,
        vendor_id=priced.vendor_id,
        date=priced.date,
        guest_count=priced.guest_count,
        pricing_type=priced.pricing_type,
        flat_price=priced.flat_price,
        per_head_price=priced.per_head_price,
        min_guests=priced.min_guests,
        additional_services=priced.additional_services,
        total_price=priced.total_price,
        status=BookingStatus.PENDING,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def get_booking(db: Session, booking_id: int) -> Optional[models.Booking]:
    return db.get(models.Booking, booking_id)


def list_bookings(
    db: Session,
    page: int,
    limit: int,
    user_id: Optional[str] = None,
    vendor_id: Optional[str] = None,
    status: Optional[BookingStatus] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
):
    query = db.query(models.Booking)
    if user_id is not None:
        query = query.filter(models.Booking.user_id == user_id)
    if vendor_id is not None:
        query = query.filter(models.Booking.vendor_id == vendor_id)
    if status is not None:
        query = query.filter(models.Booking.status == status)
    if from_date is not None:
        query = query.filter(models.Booking.date >= from_date)
    if to_date is not None:
        query = query.filter(models.Booking.date <= to_date)
    query = query.order_by(models.Booking.date.desc(), models.Booking.id.desc())
    return paginate(query, page, limit)


def compare_and_set_status(
    db: Session,
    booking: models.Booking,
    expected: BookingStatus,
    new: BookingStatus,
    **fields,
) -> models.Booking:
    """Move ``booking`` from ``expected`` to ``new`` in one conditional UPDATE.

    Raises Conflict when another writer changed the status first.
    """
    if not compare_and_set(db, booking, expected, {"status": new, **fields}):
        db.rollback()
        raise Conflict("Booking was modified concurrently, please retry")
    db.commit()
    db.refresh(booking)
    return booking
