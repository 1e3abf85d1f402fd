from typing import Optional
import logging

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth.principal import Principal, Role
from ..context import AppContext
from ..crud import crud_booking
from ..services import booking_events, booking_status, policy
from ..services.directories import UserDirectory
from ..services.pricing import BookingDraft, price_booking
from ..utils.dates import parse_datetime
from ..utils.errors import Forbidden, NotFound, ValidationError
from .dependencies import (
    get_context,
    get_db,
    get_principal,
    get_user_directory,
    get_venue_directory,
    page_params,
)

router = APIRouter(tags=["bookings"])
logger = logging.getLogger(__name__)


def _load_booking(db: Session, principal: Principal, booking_id: int) -> models.Booking:
    booking = crud_booking.get_booking(db, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    if not policy.can_access_booking(principal, booking):
        raise Forbidden("Not allowed to access this booking")
    return booking


def _parse_day(field: str, value: Optional[str]):
    if value is None:
        return None
    parsed = parse_datetime(value)
    if parsed is None:
        raise ValidationError(field, f"{field} must be a valid date")
    return parsed.date()


@router.post("", response_model=schemas.BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: schemas.BookingCreate,
    principal: Principal = Depends(get_principal),
    venues=Depends(get_venue_directory),
    ctx: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    draft = BookingDraft(**payload.model_dump())
    if not principal.is_admin:
        # Non-admins always book for themselves
        draft.user_id = principal.id
    priced = price_booking(draft, venues, ctx.now())
    booking = crud_booking.create_booking(db, priced)
    logger.info(
        "Booking created",
        extra={"booking_id": booking.id, "principal_id": principal.id, "total_price": str(booking.total_price)},
    )
    return booking


@router.get("", response_model=schemas.BookingList)
def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    paging: tuple = Depends(page_params),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    page, limit = paging
    scope = {}
    if principal.role == Role.VENDOR:
        scope["vendor_id"] = principal.id
    elif not principal.is_admin:
        scope["user_id"] = principal.id
    bookings, pagination = crud_booking.list_bookings(
        db,
        page,
        limit,
        status=booking_status.parse_status(status_filter) if status_filter else None,
        from_date=_parse_day("fromDate", from_date),
        to_date=_parse_day("toDate", to_date),
        **scope,
    )
    return {"bookings": bookings, "pagination": pagination}


@router.get("/{booking_id}", response_model=schemas.BookingRead)
def read_booking(
    booking_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return _load_booking(db, principal, booking_id)


@router.put("/{booking_id}/status", response_model=schemas.BookingRead)
def update_booking_status(
    booking_id: int,
    payload: schemas.BookingStatusUpdate,
    principal: Principal = Depends(get_principal),
    users: UserDirectory = Depends(get_user_directory),
    ctx: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    booking = _load_booking(db, principal, booking_id)
    previous = booking_status.change_status(
        db,
        principal,
        booking,
        payload.status,
        ctx.now(),
        ctx.settings.CANCELLATION_NOTICE_DAYS,
    )
    booking_events.after_status_change(db, booking, previous, ctx.mailer, users)
    return booking


@router.delete("/{booking_id}", response_model=schemas.BookingDeleted)
def delete_booking(
    booking_id: int,
    payload: Optional[schemas.BookingDelete] = Body(None),
    reason: Optional[str] = Query(None),
    principal: Principal = Depends(get_principal),
    users: UserDirectory = Depends(get_user_directory),
    ctx: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    booking = crud_booking.get_booking(db, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    previous = booking.status
    deleted = booking_status.delete_booking(
        db,
        principal,
        booking,
        (payload.reason if payload else None) or reason,
        ctx.now(),
    )
    if deleted and previous != booking.status:
        booking_events.after_status_change(db, booking, previous, ctx.mailer, users)
    return {"message": "Booking successfully deleted", "success": True, "booking": booking}
