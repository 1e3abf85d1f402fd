from typing import Optional

from sqlalchemy.orm import Session

from .. import models
from ..models.venue import PricingType
from ..utils.errors import NotFound, ValidationError
from .base import paginate


def validate_pricing(pricing_type, flat_price, per_head_price, min_guests) -> None:
    if pricing_type == PricingType.FLAT:
        if flat_price is None or flat_price <= 0:
            raise ValidationError("flatPrice", "flatPrice must be greater than 0 for flat pricing")
    elif pricing_type == PricingType.PER_HEAD:
        if per_head_price is None or per_head_price <= 0:
            raise ValidationError("perHeadPrice", "perHeadPrice must be greater than 0 for per-head pricing")
    if min_guests is not None and min_guests <= 0:
        raise ValidationError("minGuests", "minGuests must be greater than 0")


def create_venue(db: Session, vendor_id: str, data: dict) -> models.Venue:
    venue = models.Venue(vendor_id=vendor_id, **data)
    validate_pricing(venue.pricing_type, venue.flat_price, venue.per_head_price, venue.min_guests)
    db.add(venue)
    db.commit()
    db.refresh(venue)
    return venue


def get_venue(db: Session, venue_id: int) -> Optional[models.Venue]:
    return db.get(models.Venue, venue_id)


def get_venue_or_404(db: Session, venue_id: int) -> models.Venue:
    venue = get_venue(db, venue_id)
    if venue is None:
        raise NotFound("Venue not found")
    return venue


def list_venues(
    db: Session,
    page: int,
    limit: int,
    vendor_id: Optional[str] = None,
    category_id: Optional[int] = None,
):
    query = db.query(models.Venue)
    if vendor_id is not None:
        query = query.filter(models.Venue.vendor_id == vendor_id)
    if category_id is not None:
        query = query.filter(models.Venue.category_id == category_id)
    return paginate(query.order_by(models.Venue.id), page, limit)


def update_venue(db: Session, venue: models.Venue, changes: dict) -> models.Venue:
    for key, value in changes.items():
        setattr(venue, key, value)
    validate_pricing(venue.pricing_type, venue.flat_price, venue.per_head_price, venue.min_guests)
    db.commit()
    db.refresh(venue)
    return venue


def delete_venue(db: Session, venue: models.Venue) -> None:
    db.delete(venue)
    db.commit()
