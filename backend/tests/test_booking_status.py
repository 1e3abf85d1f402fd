from datetime import date

import pytest

from banquet.auth import Principal, Role
from banquet.models.booking import BookingStatus
from banquet.services import booking_status
from banquet.utils.errors import Conflict, Forbidden, InvalidStatus, ValidationError
from helpers import FIXED_NOW, add_booking, add_venue

admin = Principal(id="admin-1", role=Role.ADMIN)
vendor = Principal(id="vendor-1", role=Role.VENDOR)
user = Principal(id="user-1", role=Role.USER)


def test_parse_status_rejects_unknown_values():
    assert booking_status.parse_status("CONFIRMED") == BookingStatus.CONFIRMED
    for bad in ("archived", "", None, 3):
        with pytest.raises(ValidationError) as exc:
            booking_status.parse_status(bad)
        assert exc.value.field == "status"


def test_self_transition_is_a_noop(db):
    booking = add_booking(db, add_venue(db), status=BookingStatus.CONFIRMED)
    before = booking.updated_at
    assert booking_status.change_status(db, user, booking, "confirmed", FIXED_NOW) is None
    db.refresh(booking)
    assert booking.status == BookingStatus.CONFIRMED
    assert booking.updated_at == before


def test_nothing_leaves_cancelled(db):
    booking = add_booking(db, add_venue(db), status=BookingStatus.CANCELLED)
    with pytest.raises(InvalidStatus) as exc:
        booking_status.change_status(db, admin, booking, "confirmed", FIXED_NOW)
    assert exc.value.details == {"currentStatus": "cancelled", "attemptedStatus": "confirmed"}


def test_confirmed_cannot_return_to_pending(db):
    booking = add_booking(db, add_venue(db), status=BookingStatus.CONFIRMED)
    with pytest.raises(InvalidStatus):
        booking_status.change_status(db, admin, booking, "pending", FIXED_NOW)


def test_vendor_confirms_and_user_cannot(db):
    booking = add_booking(db, add_venue(db))
    with pytest.raises(Forbidden):
        booking_status.change_status(db, user, booking, "confirmed", FIXED_NOW)
    previous = booking_status.change_status(db, vendor, booking, "confirmed", FIXED_NOW)
    assert previous == BookingStatus.PENDING
    assert booking.status == BookingStatus.CONFIRMED


def test_cancellation_window_details(db):
    booking = add_booking(db, add_venue(db), on=date(2026, 6, 3), status=BookingStatus.CONFIRMED)
    with pytest.raises(Forbidden) as exc:
        booking_status.change_status(db, user, booking, "cancelled", FIXED_NOW)
    assert exc.value.details == {"daysUntilEvent": 2, "minDaysRequired": 3}
    booking_status.change_status(db, vendor, booking, "cancelled", FIXED_NOW)
    assert booking.status == BookingStatus.CANCELLED


def test_stale_read_loses_compare_and_set(db, ctx):
    booking = add_booking(db, add_venue(db))
    other = ctx.session_factory()
    try:
        twin = other.get(type(booking), booking.id)
        booking_status.change_status(other, vendor, twin, "cancelled", FIXED_NOW)
    finally:
        other.close()
    # ``booking`` still believes it is pending
    assert booking.status == BookingStatus.PENDING
    with pytest.raises(Conflict):
        booking_status.change_status(db, vendor, booking, "confirmed", FIXED_NOW)


def test_confirming_second_booking_for_same_day_conflicts(db):
    venue = add_venue(db)
    add_booking(db, venue, user_id="user-2", status=BookingStatus.CONFIRMED)
    booking = add_booking(db, venue)
    with pytest.raises(Conflict):
        booking_status.change_status(db, vendor, booking, "confirmed", FIXED_NOW)


def test_soft_delete_defaults_reason_and_is_idempotent(db):
    booking = add_booking(db, add_venue(db), status=BookingStatus.CONFIRMED)
    assert booking_status.delete_booking(db, user, booking, None, FIXED_NOW)
    assert booking.status == BookingStatus.CANCELLED
    assert booking.deleted_by == "user-1"
    assert booking.deletion_reason == "User requested deletion"
    assert booking.deleted_at == FIXED_NOW
    assert not booking_status.delete_booking(db, admin, booking, "again", FIXED_NOW)
    assert booking.deletion_reason == "User requested deletion"


def test_vendor_cannot_delete(db):
    booking = add_booking(db, add_venue(db))
    with pytest.raises(Forbidden):
        booking_status.delete_booking(db, vendor, booking, None, FIXED_NOW)
