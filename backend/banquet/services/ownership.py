"""Who owns the thing a media record (or any reference) points at.

A reference is one of a closed set of kinds. Each kind has exactly one
resolver handler, so adding a kind means adding a dataclass and a handler.
"""

from dataclasses import dataclass
from functools import singledispatchmethod
from typing import Any, Optional, Tuple, Union
import logging

from ..auth.principal import Principal, Role
from ..models.media import ReferenceType
from ..utils.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VenueRef:
    venue_id: int


@dataclass(frozen=True)
class BookingRef:
    booking_id: int


@dataclass(frozen=True)
class UserRef:
    user_id: str


@dataclass(frozen=True)
class ProfileRef:
    user_id: str


Reference = Union[VenueRef, BookingRef, UserRef, ProfileRef]


@dataclass(frozen=True)
class Party:
    id: str
    label: str
    role: Optional[Role] = None

    def matches(self, principal: Principal) -> bool:
        if self.id != str(principal.id):
            return False
        return self.role is None or self.role == principal.role


@dataclass(frozen=True)
class Ownership:
    kind: ReferenceType
    parties: Tuple[Party, ...]

    def includes(self, principal: Principal, label: Optional[str] = None) -> bool:
        return any(
            party.matches(principal) and (label is None or party.label == label)
            for party in self.parties
        )


def _int_id(field: str, value: Any) -> int:
    try:
        return int(str(value))
    except (TypeError, ValueError):
        raise ValidationError(field, f"{field} must be an integer for this reference type")


def reference_for(reference_type: Union[ReferenceType, str], reference_id: Any) -> Reference:
    """Build the typed reference for a ``(referenceType, referenceId)`` pair."""
    try:
        kind = ReferenceType(getattr(reference_type, "value", reference_type))
    except ValueError:
        raise ValidationError("referenceType", f"Unknown referenceType {reference_type!r}")
    if kind == ReferenceType.VENUE:
        return VenueRef(_int_id("referenceId", reference_id))
    if kind == ReferenceType.BOOKING:
        return BookingRef(_int_id("referenceId", reference_id))
    if kind == ReferenceType.USER:
        return UserRef(str(reference_id))
    return ProfileRef(str(reference_id))


class OwnershipResolver:
    """Resolve a reference into the parties that own it.

    ``venues`` and ``bookings`` are directories exposing ``get(id)``; the
    venue directory may be remote, in which case a failed lookup raises
    DependencyUnavailable.
    """

    def __init__(self, venues, bookings) -> None:
        self.venues = venues
        self.bookings = bookings

    def resolve(self, reference: Reference, missing_ok: bool = False) -> Optional[Ownership]:
        ownership = self._resolve(reference)
        if ownership is None:
            if missing_ok:
                return None
            raise NotFound(f"Referenced {type(reference).__name__[:-3].lower()} not found")
        return ownership

    @singledispatchmethod
    def _resolve(self, reference) -> Optional[Ownership]:
        raise TypeError(f"Unsupported reference {reference!r}")

    @_resolve.register
    def _(self, reference: VenueRef) -> Optional[Ownership]:
        venue = self.venues.get(reference.venue_id)
        if venue is None:
            return None
        return Ownership(ReferenceType.VENUE, (Party(str(venue.vendor_id), "vendor", Role.VENDOR),))

    @_resolve.register
    def _(self, reference: BookingRef) -> Optional[Ownership]:
        booking = self.bookings.get(reference.booking_id)
        if booking is None:
            return None
        return Ownership(
            ReferenceType.BOOKING,
            (
                Party(str(booking.user_id), "customer"),
                Party(str(booking.vendor_id), "vendor", Role.VENDOR),
            ),
        )

    @_resolve.register
    def _(self, reference: UserRef) -> Optional[Ownership]:
        return Ownership(ReferenceType.USER, (Party(reference.user_id, "self"),))

    @_resolve.register
    def _(self, reference: ProfileRef) -> Optional[Ownership]:
        return Ownership(ReferenceType.PROFILE, (Party(reference.user_id, "self"),))
