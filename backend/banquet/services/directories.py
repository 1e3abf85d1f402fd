"""Lookups of records that may live in another service's store.

The venue directory is local when this process owns the venues table and
remote when ``VENUE_SERVICE_URL`` points at the venue service. Callers only
see ``get(id) -> record or None``.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional
import logging

from sqlalchemy.orm import Session

from .. import models
from ..utils.errors import DependencyUnavailable, NotFound
from .sibling_client import RemoteNotFound, RemoteUnavailable, SiblingClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VenueRecord:
    id: int
    vendor_id: str
    name: Optional[str] = None
    pricing_type: Optional[str] = None
    flat_price: Optional[Decimal] = None
    per_head_price: Optional[Decimal] = None
    min_guests: Optional[int] = None

    @classmethod
    def from_model(cls, venue: models.Venue) -> "VenueRecord":
        return cls(
            id=venue.id,
            vendor_id=str(venue.vendor_id),
            name=venue.name,
            pricing_type=getattr(venue.pricing_type, "value", venue.pricing_type),
            flat_price=venue.flat_price,
            per_head_price=venue.per_head_price,
            min_guests=venue.min_guests,
        )

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "VenueRecord":
        vendor_id = payload.get("vendorId", payload.get("vendor_id"))
        if payload.get("id") is None or vendor_id is None:
            raise DependencyUnavailable("Venue service returned an incomplete venue")
        return cls(
            id=int(payload["id"]),
            vendor_id=str(vendor_id),
            name=payload.get("name"),
            pricing_type=payload.get("pricingType"),
            flat_price=_decimal_or_none(payload.get("flatPrice")),
            per_head_price=_decimal_or_none(payload.get("perHeadPrice")),
            min_guests=payload.get("minGuests"),
        )


def _decimal_or_none(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


class LocalVenueDirectory:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, venue_id: int) -> Optional[VenueRecord]:
        venue = self.db.get(models.Venue, venue_id)
        return VenueRecord.from_model(venue) if venue else None


class RemoteVenueDirectory:
    """Venue lookups against the venue service, forwarding caller identity."""

    def __init__(self, client: SiblingClient, headers: Mapping[str, str]) -> None:
        self.client = client
        self.headers = dict(headers)

    def get(self, venue_id: int) -> Optional[VenueRecord]:
        try:
            payload = self.client.get_json(f"/api/venue/venues/{venue_id}", headers=self.headers)
        except RemoteNotFound:
            return None
        except RemoteUnavailable as exc:
            raise DependencyUnavailable("Venue service unavailable, please retry") from exc
        return VenueRecord.from_payload(payload)


class LocalBookingDirectory:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, booking_id: int) -> Optional[models.Booking]:
        return self.db.get(models.Booking, booking_id)


@dataclass(frozen=True)
class UserRecord:
    id: str
    email: str
    name: Optional[str] = None


class UserDirectory:
    """Resolve user ids to contact details through the auth service."""

    def __init__(self, client: Optional[SiblingClient], headers: Mapping[str, str]) -> None:
        self.client = client
        self.headers = dict(headers)

    def get(self, user_id: str) -> UserRecord:
        if self.client is None:
            raise DependencyUnavailable("Auth service not configured")
        try:
            payload = self.client.get_json(f"/api/auth/users/{user_id}", headers=self.headers)
        except RemoteNotFound as exc:
            raise NotFound("User not found") from exc
        except RemoteUnavailable as exc:
            raise DependencyUnavailable("Auth service unavailable, please retry") from exc
        if isinstance(payload, Mapping) and isinstance(payload.get("user"), Mapping):
            payload = payload["user"]
        email = payload.get("email") if isinstance(payload, Mapping) else None
        if not email:
            raise DependencyUnavailable("Auth service returned a user without an email")
        return UserRecord(id=str(payload.get("id", user_id)), email=email, name=payload.get("name"))
