"""Server-side booking price computation.

``price_booking`` validates a raw booking request in a fixed order and
returns the first violated rule as a ValidationError naming the field. The
only I/O is the venue lookup used to cross-check the vendor.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from ..models.venue import PricingType
from ..utils.dates import parse_datetime
from ..utils.errors import ValidationError

CENTS = Decimal("0.01")


@dataclass
class BookingDraft:
    user_id: Any = None
    venue_id: Any = None
    vendor_id: Any = None
    date: Any = None
    guest_count: Any = None
    pricing_type: Any = None
    flat_price: Any = None
    per_head_price: Any = None
    min_guests: Any = None
    additional_services: Any = None


@dataclass
class PricedBooking:
    user_id: str
    venue_id: int
    vendor_id: str
    date: date
    guest_count: int
    pricing_type: PricingType
    total_price: Decimal
    flat_price: Optional[Decimal] = None
    per_head_price: Optional[Decimal] = None
    min_guests: Optional[int] = None
    additional_services: List[dict] = field(default_factory=list)


def to_decimal(value: Any) -> Optional[Decimal]:
    """Parse a finite number, or return None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def to_int(value: Any) -> Optional[int]:
    number = to_decimal(value)
    if number is None or number != number.to_integral_value():
        return None
    return int(number)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _required_ids(draft: BookingDraft) -> None:
    if _blank(draft.user_id):
        raise ValidationError("userId", "userId is required")
    if _blank(draft.venue_id):
        raise ValidationError("venueId", "venueId is required")
    if _blank(draft.vendor_id):
        raise ValidationError("vendorId", "vendorId is required")


def _additional_services(raw: Any) -> tuple:
    if raw is None:
        return [], Decimal("0")
    if not isinstance(raw, list):
        raise ValidationError("additionalServices", "additionalServices must be a list")
    services: List[dict] = []
    extra = Decimal("0")
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValidationError("additionalServices", f"additionalServices[{index}] must be an object")
        raw_price = item.get("price")
        if raw_price is None:
            price = Decimal("0")
        else:
            price = to_decimal(raw_price)
            if price is None or price < 0:
                raise ValidationError(
                    "additionalServices",
                    f"additionalServices[{index}].price must be a non-negative number",
                )
        extra += price
        services.append({"name": item.get("name"), "price": float(price)})
    return services, extra


def price_booking(draft: BookingDraft, venues, now: datetime) -> PricedBooking:
    """Validate ``draft`` and compute its total price.

    ``venues`` is a venue directory; an unreachable remote directory raises
    DependencyUnavailable, which aborts the booking.
    """
    _required_ids(draft)

    venue_id = to_int(draft.venue_id)
    if venue_id is None:
        raise ValidationError("venueId", "venueId must be an integer")
    venue = venues.get(venue_id)
    if venue is None:
        raise ValidationError("venueId", "Venue not found")
    vendor_id = str(draft.vendor_id).strip()
    if vendor_id != str(venue.vendor_id):
        raise ValidationError("vendorId", "vendorId mismatch")

    guest_count = to_int(draft.guest_count)
    if guest_count is None or guest_count <= 0:
        raise ValidationError("guestCount", "Valid guestCount is required")

    when = parse_datetime(draft.date)
    if when is None:
        raise ValidationError("date", "date must be a valid date")
    if when <= now:
        raise ValidationError("date", "date must be in the future")

    raw_type = draft.pricing_type
    if _blank(raw_type):
        pricing_type = PricingType.FLAT
    else:
        try:
            pricing_type = PricingType(str(raw_type).strip().lower())
        except ValueError:
            raise ValidationError("pricingType", "invalid pricingType")

    flat_price = per_head_price = None
    min_guests = None
    if pricing_type == PricingType.FLAT:
        flat_price = to_decimal(draft.flat_price)
        if flat_price is None or flat_price <= 0:
            raise ValidationError("flatPrice", "Valid flatPrice is required for flat pricing")
        total = flat_price
    else:
        per_head_price = to_decimal(draft.per_head_price)
        if per_head_price is None or per_head_price <= 0:
            raise ValidationError("perHeadPrice", "Valid perHeadPrice is required for per-head pricing")
        if _blank(draft.min_guests):
            min_guests = 1
        else:
            min_guests = to_int(draft.min_guests)
            if min_guests is None or min_guests <= 0:
                raise ValidationError("minGuests", "minGuests must be a positive integer")
        if guest_count < min_guests:
            raise ValidationError(
                "guestCount",
                f"Guest count ({guest_count}) below minimum required ({min_guests})",
                {"guestCount": guest_count, "minGuests": min_guests},
            )
        total = per_head_price * guest_count

    services, extra = _additional_services(draft.additional_services)
    total = (total + extra).quantize(CENTS)

    return PricedBooking(
        user_id=str(draft.user_id).strip(),
        venue_id=venue_id,
        vendor_id=vendor_id,
        date=when.date(),
        guest_count=guest_count,
        pricing_type=pricing_type,
        total_price=total,
        flat_price=flat_price,
        per_head_price=per_head_price,
        min_guests=min_guests,
        additional_services=services,
    )
