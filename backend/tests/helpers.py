from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from banquet import models
from banquet.context import build_context
from banquet.core.config import Settings
from banquet.models.booking import BookingStatus
from banquet.services.sibling_client import SiblingClient
from banquet.utils.email import EmailDeliveryError

FIXED_NOW = datetime(2026, 6, 1, 12, 0, 0)
SECRET = "test-secret"


class FakeMailer:
    configured = True

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent = []

    def send(self, recipient: str, subject: str, body: str) -> None:
        if self.fail:
            raise EmailDeliveryError("smtp unavailable")
        self.sent.append((recipient, subject, body))


def make_settings(**overrides) -> Settings:
    values = {
        "SQLALCHEMY_DATABASE_URL": "sqlite://",
        "SECRET_KEY": SECRET,
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_context(settings=None, mailer=None, auth_transport=None, venue_transport=None):
    ctx = build_context(settings or make_settings())
    ctx.mailer = mailer or FakeMailer()
    ctx.clock = lambda: FIXED_NOW
    if auth_transport is not None:
        ctx.auth_client = SiblingClient("http://auth.test", transport=auth_transport)
    if venue_transport is not None:
        ctx.venue_client = SiblingClient("http://venue.test", transport=venue_transport)
    return ctx


def identity(user_id: str, role: str = "user", kyc: Optional[str] = None, email: Optional[str] = None) -> dict:
    headers = {"X-User-Id": user_id, "X-User-Role": role}
    if kyc:
        headers["X-Kyc-Status"] = kyc
    if email:
        headers["X-User-Email"] = email
    return headers


ADMIN = identity("admin-1", "admin")
VENDOR = identity("vendor-1", "vendor", kyc="approved")
OTHER_VENDOR = identity("vendor-2", "vendor", kyc="approved")
USER = identity("user-1", "user", email="user1@example.com")
OTHER_USER = identity("user-2", "user", email="user2@example.com")
PROVIDER = identity("provider-1", "service_provider")
OTHER_PROVIDER = identity("provider-2", "service_provider")


def add_venue(db, vendor_id: str = "vendor-1", **overrides) -> models.Venue:
    fields = {
        "name": "Grand Hall",
        "capacity": 200,
        "pricing_type": models.PricingType.PER_HEAD,
        "per_head_price": Decimal("50"),
        "min_guests": 50,
    }
    fields.update(overrides)
    venue = models.Venue(vendor_id=vendor_id, **fields)
    db.add(venue)
    db.commit()
    db.refresh(venue)
    return venue


def add_booking(
    db,
    venue: models.Venue,
    user_id: str = "user-1",
    on: date = date(2026, 7, 1),
    status: BookingStatus = BookingStatus.PENDING,
) -> models.Booking:
    booking = models.Booking(
        user_id=user_id,
        venue_id=venue.id,
        vendor_id=venue.vendor_id,
        date=on,
        guest_count=100,
        pricing_type=models.PricingType.FLAT,
        flat_price=Decimal("1000"),
        additional_services=[],
        total_price=Decimal("1000"),
        status=status,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def booking_payload(venue: models.Venue, **overrides) -> dict:
    payload = {
        "userId": "user-1",
        "venueId": venue.id,
        "vendorId": venue.vendor_id,
        "date": "2026-07-01",
        "guestCount": 80,
        "pricingType": "per_head",
        "perHeadPrice": 50,
        "minGuests": 50,
    }
    payload.update(overrides)
    return payload
