from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .. import models
from .base import paginate


def create_event(db: Session, created_by: str, data: dict) -> models.CalendarEvent:
    event = models.CalendarEvent(created_by=created_by, **data)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def get_event(db: Session, event_id: int) -> Optional[models.CalendarEvent]:
    return db.get(models.CalendarEvent, event_id)


def get_event_for_day(db: Session, venue_id: int, on: date) -> Optional[models.CalendarEvent]:
    return (
        db.query(models.CalendarEvent)
        .filter(models.CalendarEvent.venue_id == venue_id, models.CalendarEvent.date == on)
        .order_by(models.CalendarEvent.id)
        .first()
    )


def list_events(
    db: Session,
    page: int,
    limit: int,
    venue_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    visible_to_vendor: Optional[str] = None,
    available_only: bool = False,
):
    """List events; ``available_only`` hides unavailable days except on
    venues owned by ``visible_to_vendor``."""
    query = db.query(models.CalendarEvent)
    if venue_id is not None:
        query = query.filter(models.CalendarEvent.venue_id == venue_id)
    if start_date is not None:
        query = query.filter(models.CalendarEvent.date >= start_date)
    if end_date is not None:
        query = query.filter(models.CalendarEvent.date <= end_date)
    if available_only:
        condition = models.CalendarEvent.is_available.is_(True)
        if visible_to_vendor is not None:
            owned = db.query(models.Venue.id).filter(models.Venue.vendor_id == visible_to_vendor)
            condition = or_(condition, models.CalendarEvent.venue_id.in_(owned.scalar_subquery()))
        query = query.filter(condition)
    return paginate(query.order_by(models.CalendarEvent.date, models.CalendarEvent.id), page, limit)


def events_between(db: Session, venue_id: int, start_date: date, end_date: date) -> list:
    return (
        db.query(models.CalendarEvent)
        .filter(
            models.CalendarEvent.venue_id == venue_id,
            models.CalendarEvent.date >= start_date,
            models.CalendarEvent.date <= end_date,
        )
        .order_by(models.CalendarEvent.date, models.CalendarEvent.id)
        .all()
    )


def update_event(db: Session, event: models.CalendarEvent, changes: dict) -> models.CalendarEvent:
    for key, value in changes.items():
        setattr(event, key, value)
    db.commit()
    db.refresh(event)
    return event


def delete_event(db: Session, event: models.CalendarEvent) -> None:
    db.delete(event)
    db.commit()
