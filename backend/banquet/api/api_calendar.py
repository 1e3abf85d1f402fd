from datetime import timedelta
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth.principal import Principal, Role
from ..crud import crud_booking, crud_calendar
from ..services import policy
from ..utils.dates import parse_datetime
from ..utils.errors import Conflict, Forbidden, NotFound, ValidationError
from .dependencies import get_db, get_principal, get_venue_directory, page_params

router = APIRouter(tags=["calendar"])
logger = logging.getLogger(__name__)

MAX_AVAILABILITY_DAYS = 366


def _load_event(db: Session, event_id: int) -> models.CalendarEvent:
    event = crud_calendar.get_event(db, event_id)
    if event is None:
        raise NotFound("Calendar event not found")
    return event


def _require_manager(principal: Principal, venues, venue_id: int) -> None:
    if principal.is_admin:
        return
    venue = venues.get(venue_id)
    if venue is None or not policy.can_manage_venue(principal, venue):
        raise Forbidden("Not allowed to manage this venue's calendar")


def _check_booking_link(db: Session, booking_id: Optional[int], venue_id: int) -> None:
    if booking_id is None:
        return
    booking = crud_booking.get_booking(db, booking_id)
    if booking is None:
        raise ValidationError("bookingId", "Booking not found")
    if booking.venue_id != venue_id:
        raise ValidationError("bookingId", "Booking is for a different venue")


def _parse_day(field: str, value: Optional[str], required: bool = False):
    if value is None:
        if required:
            raise ValidationError(field, f"{field} is required")
        return None
    parsed = parse_datetime(value)
    if parsed is None:
        raise ValidationError(field, f"{field} must be a valid date")
    return parsed.date()


@router.post("/events", response_model=schemas.CalendarEventRead, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: schemas.CalendarEventCreate,
    principal: Principal = Depends(get_principal),
    venues=Depends(get_venue_directory),
    db: Session = Depends(get_db),
):
    if venues.get(payload.venue_id) is None:
        raise ValidationError("venueId", "Venue not found")
    _require_manager(principal, venues, payload.venue_id)
    _check_booking_link(db, payload.booking_id, payload.venue_id)
    event = crud_calendar.create_event(db, principal.id, payload.model_dump())
    logger.info("Calendar event created", extra={"event_id": event.id, "principal_id": principal.id})
    return event


@router.get("/events", response_model=schemas.CalendarEventList)
def list_events(
    venue_id: Optional[int] = Query(None, alias="venueId"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    paging: tuple = Depends(page_params),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    page, limit = paging
    events, pagination = crud_calendar.list_events(
        db,
        page,
        limit,
        venue_id=venue_id,
        start_date=_parse_day("startDate", start_date),
        end_date=_parse_day("endDate", end_date),
        visible_to_vendor=principal.id if principal.role == Role.VENDOR else None,
        available_only=not principal.is_admin,
    )
    return {"events": events, "pagination": pagination}


@router.get("/events/{event_id}", response_model=schemas.CalendarEventRead)
def read_event(
    event_id: int,
    principal: Principal = Depends(get_principal),
    venues=Depends(get_venue_directory),
    db: Session = Depends(get_db),
):
    event = _load_event(db, event_id)
    if policy.can_view_calendar_event(principal, event):
        return event
    booking = crud_booking.get_booking(db, event.booking_id) if event.booking_id else None
    if not policy.can_view_calendar_event(principal, event, venues.get(event.venue_id), booking):
        raise Forbidden("Not allowed to view this calendar event")
    return event


@router.put("/events/{event_id}", response_model=schemas.CalendarEventRead)
def update_event(
    event_id: int,
    payload: schemas.CalendarEventUpdate,
    principal: Principal = Depends(get_principal),
    venues=Depends(get_venue_directory),
    db: Session = Depends(get_db),
):
    event = _load_event(db, event_id)
    _require_manager(principal, venues, event.venue_id)
    changes = payload.model_dump(exclude_unset=True)
    if "venue_id" in changes and changes["venue_id"] != event.venue_id:
        if not principal.is_admin:
            raise Forbidden("Only admins can move an event to another venue")
        if venues.get(changes["venue_id"]) is None:
            raise ValidationError("venueId", "Venue not found")
    if changes.get("booking_id") is not None:
        _check_booking_link(db, changes["booking_id"], changes.get("venue_id", event.venue_id))
    event = crud_calendar.update_event(db, event, changes)
    logger.info("Calendar event updated", extra={"event_id": event.id, "principal_id": principal.id})
    return event


@router.delete("/events/{event_id}", response_model=schemas.MessageResponse)
def delete_event(
    event_id: int,
    principal: Principal = Depends(get_principal),
    venues=Depends(get_venue_directory),
    db: Session = Depends(get_db),
):
    event = _load_event(db, event_id)
    _require_manager(principal, venues, event.venue_id)
    if event.booking_id is not None:
        raise Conflict("Calendar event is linked to a booking", {"bookingId": event.booking_id})
    crud_calendar.delete_event(db, event)
    logger.info("Calendar event deleted", extra={"event_id": event_id, "principal_id": principal.id})
    return {"message": "Calendar event deleted", "success": True}


@router.get("/availability", response_model=schemas.AvailabilityRead)
def read_availability(
    venue_id: Optional[int] = Query(None, alias="venueId"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    if venue_id is None:
        raise ValidationError("venueId", "venueId is required")
    start = _parse_day("startDate", start_date, required=True)
    end = _parse_day("endDate", end_date, required=True)
    if end < start:
        raise ValidationError("endDate", "endDate must not be before startDate")
    if (end - start).days >= MAX_AVAILABILITY_DAYS:
        raise ValidationError("endDate", f"Range must not exceed {MAX_AVAILABILITY_DAYS} days")

    by_day = {}
    for event in crud_calendar.events_between(db, venue_id, start, end):
        by_day.setdefault(event.date, event)
    days = []
    current = start
    while current <= end:
        event = by_day.get(current)
        days.append(
            {
                "date": current,
                "is_available": event.is_available if event else True,
                "event_id": event.id if event else None,
            }
        )
        current += timedelta(days=1)
    return {"venue_id": venue_id, "start_date": start, "end_date": end, "days": days}
