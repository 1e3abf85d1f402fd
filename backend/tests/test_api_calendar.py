from datetime import date

from banquet import models
from banquet.models.booking import BookingStatus
from helpers import ADMIN, OTHER_USER, OTHER_VENDOR, USER, VENDOR, add_booking, add_venue

EVENTS = "/api/calendar/events"


def add_event(db, venue, on=date(2026, 7, 1), available=True, booking=None) -> models.CalendarEvent:
    event = models.CalendarEvent(
        venue_id=venue.id,
        date=on,
        is_available=available,
        booking_id=booking.id if booking else None,
        created_by=venue.vendor_id,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def test_vendor_creates_event_on_own_venue(client, db):
    venue = add_venue(db)
    payload = {"venueId": venue.id, "date": "2026-07-04", "isAvailable": False}
    res = client.post(EVENTS, json=payload, headers=VENDOR)
    assert res.status_code == 201, res.text
    assert res.json()["createdBy"] == "vendor-1"
    assert res.json()["isAvailable"] is False

    assert client.post(EVENTS, json=payload, headers=OTHER_VENDOR).status_code == 403
    assert client.post(EVENTS, json=payload, headers=USER).status_code == 403


def test_unknown_venue_is_a_validation_error(client):
    res = client.post(EVENTS, json={"venueId": 404, "date": "2026-07-04"}, headers=ADMIN)
    assert res.status_code == 400
    assert res.json()["details"]["field"] == "venueId"


def test_booking_link_must_match_venue(client, db):
    venue = add_venue(db)
    other = add_venue(db)
    booking = add_booking(db, other)
    payload = {"venueId": venue.id, "date": "2026-07-04", "bookingId": booking.id}
    res = client.post(EVENTS, json=payload, headers=ADMIN)
    assert res.status_code == 400
    assert res.json()["details"]["field"] == "bookingId"


def test_unavailable_events_hidden_from_non_owners(client, db):
    venue = add_venue(db)
    booking = add_booking(db, venue, status=BookingStatus.CONFIRMED)
    open_day = add_event(db, venue, on=date(2026, 7, 2))
    taken = add_event(db, venue, available=False, booking=booking)

    ids = [e["id"] for e in client.get(EVENTS, headers=OTHER_USER).json()["events"]]
    assert ids == [open_day.id]
    ids = [e["id"] for e in client.get(EVENTS, headers=VENDOR).json()["events"]]
    assert ids == [taken.id, open_day.id]
    assert client.get(EVENTS, headers=OTHER_VENDOR).json()["pagination"]["total"] == 1
    assert client.get(EVENTS, headers=ADMIN).json()["pagination"]["total"] == 2

    assert client.get(f"{EVENTS}/{taken.id}", headers=OTHER_USER).status_code == 403
    assert client.get(f"{EVENTS}/{taken.id}", headers=USER).status_code == 200
    assert client.get(f"{EVENTS}/{taken.id}", headers=VENDOR).status_code == 200
    assert client.get(f"{EVENTS}/{open_day.id}", headers=OTHER_USER).status_code == 200


def test_update_and_delete_event(client, db):
    venue = add_venue(db)
    event = add_event(db, venue)
    url = f"{EVENTS}/{event.id}"
    assert client.put(url, json={"isAvailable": False}, headers=OTHER_VENDOR).status_code == 403
    res = client.put(url, json={"isAvailable": False}, headers=VENDOR)
    assert res.status_code == 200
    assert res.json()["isAvailable"] is False

    assert client.delete(url, headers=VENDOR).status_code == 200
    assert client.get(url, headers=ADMIN).status_code == 404


def test_event_linked_to_booking_cannot_be_deleted(client, db):
    venue = add_venue(db)
    booking = add_booking(db, venue, status=BookingStatus.CONFIRMED)
    event = add_event(db, venue, available=False, booking=booking)
    res = client.delete(f"{EVENTS}/{event.id}", headers=VENDOR)
    assert res.status_code == 409
    assert res.json()["details"] == {"bookingId": booking.id}


def test_availability_fills_every_day(client, db):
    venue = add_venue(db)
    taken = add_event(db, venue, on=date(2026, 7, 2), available=False)
    res = client.get(
        f"/api/calendar/availability?venueId={venue.id}&startDate=2026-07-01&endDate=2026-07-03",
        headers=USER,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["venueId"] == venue.id
    assert body["days"] == [
        {"date": "2026-07-01", "isAvailable": True, "eventId": None},
        {"date": "2026-07-02", "isAvailable": False, "eventId": taken.id},
        {"date": "2026-07-03", "isAvailable": True, "eventId": None},
    ]


def test_availability_range_checks(client, db):
    venue = add_venue(db)
    base = f"/api/calendar/availability?venueId={venue.id}"
    res = client.get(f"{base}&startDate=2026-07-03&endDate=2026-07-01", headers=USER)
    assert res.status_code == 400
    res = client.get(f"{base}&startDate=2026-01-01&endDate=2027-01-02", headers=USER)
    assert res.status_code == 400
    res = client.get(f"{base}&startDate=2026-07-01", headers=USER)
    assert res.json()["details"]["field"] == "endDate"
