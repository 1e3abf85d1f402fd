"""Authorization decisions.

Every check is a pure function of a Principal and resources fetched in the
same request. Checks return a bool and never raise; the caller decides
which error to surface.
"""

from datetime import datetime
from typing import Any, Optional

from ..auth.principal import KycStatus, Principal, Role
from ..models.booking import BookingStatus
from ..models.media import MediaType, ReferenceType
from ..utils.dates import days_until
from .ownership import Ownership

CANCELLATION_NOTICE_DAYS = 3


def _value(enum_or_str: Any) -> Any:
    return getattr(enum_or_str, "value", enum_or_str)


def _same_id(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return False
    return str(left) == str(right)


def is_vendor_owner(principal: Principal, vendor_id: Any) -> bool:
    return principal.role == Role.VENDOR and _same_id(principal.id, vendor_id)


# Bookings

def can_access_booking(principal: Principal, booking) -> bool:
    return (
        principal.is_admin
        or _same_id(principal.id, booking.user_id)
        or is_vendor_owner(principal, booking.vendor_id)
    )


def can_confirm_booking(principal: Principal, booking) -> bool:
    return principal.is_admin or is_vendor_owner(principal, booking.vendor_id)


def cancellation_days_remaining(booking, now: datetime) -> int:
    return days_until(booking.date, now)


def can_cancel_booking(
    principal: Principal,
    booking,
    now: datetime,
    notice_days: int = CANCELLATION_NOTICE_DAYS,
) -> bool:
    if principal.is_admin or is_vendor_owner(principal, booking.vendor_id):
        return True
    if not _same_id(principal.id, booking.user_id):
        return False
    if (
        principal.role == Role.USER
        and _value(booking.status) == BookingStatus.CONFIRMED.value
        and cancellation_days_remaining(booking, now) < notice_days
    ):
        return False
    return True


def can_delete_booking(principal: Principal, booking) -> bool:
    # Stricter than read access: the owning vendor cancels, it never deletes
    return principal.is_admin or _same_id(principal.id, booking.user_id)


# Venues

def can_manage_venue(principal: Principal, venue) -> bool:
    return principal.is_admin or is_vendor_owner(principal, venue.vendor_id)


def can_create_venue(principal: Principal) -> bool:
    if principal.is_admin:
        return True
    return principal.role == Role.VENDOR and principal.kyc_status == KycStatus.APPROVED


def can_write_venue(principal: Principal, venue) -> bool:
    """Owning vendors keep write access only while their KYC is approved."""
    return can_manage_venue(principal, venue) and can_create_venue(principal)


# Media

def can_access_media(principal: Principal, media, ownership: Optional[Ownership] = None) -> bool:
    if principal.is_admin or media.is_public or _same_id(principal.id, media.created_by):
        return True
    return ownership is not None and ownership.includes(principal)


def can_upload_media(
    principal: Principal,
    reference_type: ReferenceType,
    media_type: MediaType,
    ownership: Optional[Ownership],
) -> bool:
    if principal.is_admin:
        return True
    if _value(media_type) == MediaType.OTHER.value:
        return False
    if ownership is None:
        return False
    kind = _value(reference_type)
    if kind == ReferenceType.VENUE.value:
        return ownership.includes(principal, label="vendor")
    if kind == ReferenceType.BOOKING.value:
        return ownership.includes(principal, label="customer")
    return ownership.includes(principal, label="self")


def can_delete_media(principal: Principal, media, ownership: Optional[Ownership] = None) -> bool:
    if principal.is_admin or _same_id(principal.id, media.created_by):
        return True
    return (
        ownership is not None
        and _value(media.reference_type) == ReferenceType.VENUE.value
        and ownership.includes(principal, label="vendor")
    )


# Calendar

def can_view_calendar_event(principal: Principal, event, venue=None, booking=None) -> bool:
    if principal.is_admin or event.is_available:
        return True
    if venue is not None and is_vendor_owner(principal, venue.vendor_id):
        return True
    return booking is not None and _same_id(principal.id, booking.user_id)


# Notifications

def can_send_notification(
    principal: Principal,
    recipient_user_id: Any = None,
    recipient_email: Optional[str] = None,
) -> bool:
    """Admins notify anyone; everyone else may only notify themselves."""
    if principal.is_admin:
        return True
    if _same_id(principal.id, recipient_user_id):
        return True
    if recipient_email and principal.email:
        return recipient_email.strip().lower() == principal.email.strip().lower()
    return False


def can_view_notification(principal: Principal, notification) -> bool:
    if principal.is_admin:
        return True
    if _same_id(principal.id, notification.created_by) or _same_id(principal.id, notification.recipient_id):
        return True
    return bool(
        principal.email
        and notification.to
        and notification.to.strip().lower() == principal.email.strip().lower()
    )


# Quotes, invoices and service orders

def is_service_provider_owner(principal: Principal, record) -> bool:
    return principal.role == Role.SERVICE_PROVIDER and _same_id(principal.id, record.service_provider_id)


def is_addressed_user(principal: Principal, record) -> bool:
    return principal.role == Role.USER and _same_id(principal.id, record.user_id)


def can_access_quote(principal: Principal, quote) -> bool:
    return (
        principal.is_admin
        or is_service_provider_owner(principal, quote)
        or is_addressed_user(principal, quote)
    )


def can_access_invoice(principal: Principal, invoice) -> bool:
    return (
        principal.is_admin
        or is_service_provider_owner(principal, invoice)
        or is_addressed_user(principal, invoice)
    )
