from helpers import ADMIN, OTHER_USER, OTHER_VENDOR, USER, VENDOR, add_booking, add_venue

MEDIA = "/api/media"


def _media(reference_type, reference_id, **overrides) -> dict:
    payload = {
        "referenceType": reference_type,
        "referenceId": reference_id,
        "url": "https://cdn.example.com/a.jpg",
        "filename": "a.jpg",
        "mimetype": "image/jpeg",
    }
    payload.update(overrides)
    return payload


def test_vendor_uploads_public_venue_media(client, db):
    venue = add_venue(db)
    res = client.post(MEDIA, json=_media("venue", venue.id), headers=VENDOR)
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["isPublic"] is True
    assert body["referenceId"] == str(venue.id)
    assert body["createdBy"] == "vendor-1"

    assert client.post(MEDIA, json=_media("venue", venue.id), headers=OTHER_VENDOR).status_code == 403
    assert client.post(MEDIA, json=_media("venue", venue.id), headers=USER).status_code == 403
    assert client.get(f"{MEDIA}/{body['id']}", headers=OTHER_USER).status_code == 200


def test_missing_reference_is_404_and_bad_id_is_400(client):
    assert client.post(MEDIA, json=_media("venue", 404), headers=ADMIN).status_code == 404
    res = client.post(MEDIA, json=_media("booking", "abc"), headers=USER)
    assert res.status_code == 400
    assert res.json()["details"]["field"] == "referenceId"


def test_booking_media_is_private_to_parties(client, db):
    booking = add_booking(db, add_venue(db))
    res = client.post(MEDIA, json=_media("booking", booking.id), headers=USER)
    assert res.status_code == 201
    media = res.json()
    assert media["isPublic"] is False

    assert client.get(f"{MEDIA}/{media['id']}", headers=VENDOR).status_code == 200
    assert client.get(f"{MEDIA}/{media['id']}", headers=ADMIN).status_code == 200
    assert client.get(f"{MEDIA}/{media['id']}", headers=OTHER_USER).status_code == 403

    assert client.post(MEDIA, json=_media("booking", booking.id), headers=OTHER_USER).status_code == 403

    listing = client.get(f"{MEDIA}/booking/{booking.id}", headers=OTHER_USER).json()
    assert listing["media"] == []
    listing = client.get(f"{MEDIA}/booking/{booking.id}", headers=VENDOR).json()
    assert [m["id"] for m in listing["media"]] == [media["id"]]


def test_profile_media_only_for_self(client):
    assert client.post(MEDIA, json=_media("profile", "user-1"), headers=USER).status_code == 201
    assert client.post(MEDIA, json=_media("profile", "user-2"), headers=USER).status_code == 403


def test_other_media_type_is_admin_only(client):
    payload = _media("user", "user-1", mediaType="other")
    assert client.post(MEDIA, json=payload, headers=USER).status_code == 403
    assert client.post(MEDIA, json=payload, headers=ADMIN).status_code == 201


def test_venue_owner_deletes_admin_uploaded_media(client, db):
    venue = add_venue(db)
    media_id = client.post(MEDIA, json=_media("venue", venue.id), headers=ADMIN).json()["id"]
    assert client.delete(f"{MEDIA}/{media_id}", headers=USER).status_code == 403
    assert client.delete(f"{MEDIA}/{media_id}", headers=OTHER_VENDOR).status_code == 403
    res = client.delete(f"{MEDIA}/{media_id}", headers=VENDOR)
    assert res.status_code == 200
    assert client.get(f"{MEDIA}/{media_id}", headers=ADMIN).status_code == 404


def test_media_type_is_derived_from_mimetype_when_omitted(client):
    payload = _media("user", "user-1", filename="notes.pdf", mimetype="application/pdf")
    assert client.post(MEDIA, json=payload, headers=USER).status_code == 403
    res = client.post(MEDIA, json=payload, headers=ADMIN)
    assert res.status_code == 201
    assert res.json()["mediaType"] == "other"

    res = client.post(MEDIA, json=_media("user", "user-1", mimetype="video/mp4"), headers=USER)
    assert res.status_code == 201
    assert res.json()["mediaType"] == "video"
