from datetime import date
from types import SimpleNamespace

from banquet.auth import Principal, Role, KycStatus
from banquet.models.media import MediaType, ReferenceType
from banquet.services import policy
from banquet.services.ownership import Ownership, Party
from helpers import FIXED_NOW

admin = Principal(id="admin-1", role=Role.ADMIN)
vendor = Principal(id="vendor-1", role=Role.VENDOR, kyc_status=KycStatus.APPROVED)
other_vendor = Principal(id="vendor-2", role=Role.VENDOR)
user = Principal(id="user-1", role=Role.USER, email="User1@Example.com")
other_user = Principal(id="user-2", role=Role.USER)


def booking(status="pending", on=date(2026, 7, 1)):
    return SimpleNamespace(user_id="user-1", vendor_id="vendor-1", status=status, date=on)


def test_booking_access_is_limited_to_parties():
    b = booking()
    assert policy.can_access_booking(admin, b)
    assert policy.can_access_booking(user, b)
    assert policy.can_access_booking(vendor, b)
    assert not policy.can_access_booking(other_user, b)
    assert not policy.can_access_booking(other_vendor, b)


def test_vendor_id_match_requires_vendor_role():
    impostor = Principal(id="vendor-1", role=Role.USER)
    assert not policy.can_access_booking(impostor, booking())
    assert not policy.can_confirm_booking(impostor, booking())


def test_only_admin_or_owning_vendor_confirms():
    b = booking()
    assert policy.can_confirm_booking(admin, b)
    assert policy.can_confirm_booking(vendor, b)
    assert not policy.can_confirm_booking(user, b)
    assert not policy.can_confirm_booking(other_vendor, b)


def test_user_cannot_cancel_confirmed_booking_inside_notice_window():
    soon = booking("confirmed", date(2026, 6, 3))
    later = booking("confirmed", date(2026, 6, 5))
    assert not policy.can_cancel_booking(user, soon, FIXED_NOW)
    assert policy.can_cancel_booking(user, later, FIXED_NOW)


def test_notice_window_exempts_vendor_and_admin():
    soon = booking("confirmed", date(2026, 6, 2))
    assert policy.can_cancel_booking(vendor, soon, FIXED_NOW)
    assert policy.can_cancel_booking(admin, soon, FIXED_NOW)


def test_pending_booking_cancellable_by_user_any_time():
    assert policy.can_cancel_booking(user, booking("pending", date(2026, 6, 2)), FIXED_NOW)


def test_strangers_cannot_cancel():
    assert not policy.can_cancel_booking(other_user, booking(), FIXED_NOW)
    assert not policy.can_cancel_booking(other_vendor, booking(), FIXED_NOW)


def test_vendor_cannot_delete_booking():
    b = booking()
    assert policy.can_delete_booking(admin, b)
    assert policy.can_delete_booking(user, b)
    assert not policy.can_delete_booking(vendor, b)


def test_venue_management_and_creation():
    venue = SimpleNamespace(vendor_id="vendor-1")
    assert policy.can_manage_venue(vendor, venue)
    assert policy.can_manage_venue(admin, venue)
    assert not policy.can_manage_venue(other_vendor, venue)
    assert not policy.can_manage_venue(user, venue)

    assert policy.can_create_venue(admin)
    assert policy.can_create_venue(vendor)
    assert not policy.can_create_venue(other_vendor)
    assert not policy.can_create_venue(user)


def _media(reference_type, created_by="someone", is_public=False):
    return SimpleNamespace(reference_type=reference_type, created_by=created_by, is_public=is_public)


def test_media_access_paths():
    venue_owner = Ownership(ReferenceType.VENUE, (Party("vendor-1", "vendor", Role.VENDOR),))
    private = _media(ReferenceType.BOOKING)
    assert policy.can_access_media(admin, private)
    assert policy.can_access_media(user, _media(ReferenceType.BOOKING, created_by="user-1"))
    assert policy.can_access_media(other_user, _media(ReferenceType.VENUE, is_public=True))
    assert policy.can_access_media(vendor, private, venue_owner)
    assert not policy.can_access_media(other_vendor, private, venue_owner)
    assert not policy.can_access_media(other_user, private)


def test_media_upload_rules():
    booking_parties = Ownership(
        ReferenceType.BOOKING,
        (Party("user-1", "customer"), Party("vendor-1", "vendor", Role.VENDOR)),
    )
    venue_owner = Ownership(ReferenceType.VENUE, (Party("vendor-1", "vendor", Role.VENDOR),))
    self_owned = Ownership(ReferenceType.USER, (Party("user-1", "self"),))

    assert policy.can_upload_media(user, ReferenceType.BOOKING, MediaType.IMAGE, booking_parties)
    assert not policy.can_upload_media(vendor, ReferenceType.BOOKING, MediaType.IMAGE, booking_parties)
    assert policy.can_upload_media(vendor, ReferenceType.VENUE, MediaType.VIDEO, venue_owner)
    assert not policy.can_upload_media(other_vendor, ReferenceType.VENUE, MediaType.IMAGE, venue_owner)
    assert policy.can_upload_media(user, ReferenceType.USER, MediaType.IMAGE, self_owned)
    assert not policy.can_upload_media(user, ReferenceType.USER, MediaType.OTHER, self_owned)
    assert policy.can_upload_media(admin, ReferenceType.USER, MediaType.OTHER, None)


def test_media_delete_rules():
    venue_owner = Ownership(ReferenceType.VENUE, (Party("vendor-1", "vendor", Role.VENDOR),))
    media = _media(ReferenceType.VENUE, created_by="admin-1")
    assert policy.can_delete_media(vendor, media, venue_owner)
    assert not policy.can_delete_media(other_vendor, media, venue_owner)
    assert policy.can_delete_media(user, _media(ReferenceType.USER, created_by="user-1"))


def test_calendar_event_visibility():
    blocked = SimpleNamespace(is_available=False)
    venue = SimpleNamespace(vendor_id="vendor-1")
    b = SimpleNamespace(user_id="user-1")
    assert policy.can_view_calendar_event(other_user, SimpleNamespace(is_available=True))
    assert not policy.can_view_calendar_event(other_user, blocked, venue, b)
    assert policy.can_view_calendar_event(vendor, blocked, venue)
    assert policy.can_view_calendar_event(user, blocked, venue, b)


def test_notifications_only_to_self_unless_admin():
    assert policy.can_send_notification(admin, recipient_email="anyone@example.com")
    assert policy.can_send_notification(user, recipient_user_id="user-1")
    assert policy.can_send_notification(user, recipient_email="user1@example.COM")
    assert not policy.can_send_notification(vendor, recipient_user_id="user-1")
    assert not policy.can_send_notification(user, recipient_email="user2@example.com")


def test_notification_visibility():
    n = SimpleNamespace(created_by="admin-1", recipient_id="user-1", to="user1@example.com")
    assert policy.can_view_notification(user, n)
    assert not policy.can_view_notification(other_user, n)


def test_quote_and_invoice_access():
    provider = Principal(id="provider-1", role=Role.SERVICE_PROVIDER)
    record = SimpleNamespace(service_provider_id="provider-1", user_id="user-1")
    assert policy.can_access_quote(provider, record)
    assert policy.can_access_quote(user, record)
    assert policy.can_access_invoice(admin, record)
    assert not policy.can_access_invoice(other_user, record)
    assert not policy.can_access_quote(Principal(id="provider-1", role=Role.VENDOR), record)


def test_venue_writes_need_approved_kyc():
    venue = SimpleNamespace(vendor_id="vendor-1")
    rejected = Principal(id="vendor-1", role=Role.VENDOR, kyc_status=KycStatus.REJECTED)
    assert policy.can_manage_venue(rejected, venue)
    assert not policy.can_write_venue(rejected, venue)
    assert policy.can_write_venue(vendor, venue)
    assert policy.can_write_venue(admin, venue)
    assert not policy.can_write_venue(Principal(id="vendor-2", role=Role.VENDOR, kyc_status=KycStatus.APPROVED), venue)


def test_addressed_user_must_hold_user_role():
    record = SimpleNamespace(service_provider_id="provider-1", user_id="user-1")
    assert policy.is_addressed_user(user, record)
    assert not policy.is_addressed_user(Principal(id="user-1", role=Role.VENDOR), record)
    assert not policy.can_access_quote(Principal(id="user-1", role=Role.SERVICE_PROVIDER), record)
