"""Tests for calendar conflicts and blackout periods."""

from datetime import date, timedelta

import pytest
from icalendar import Calendar

from app.domain.availability.intervals import intervals_overlap, validate_stay_dates
from app.domain.availability.service import AvailabilityService
from app.exceptions import ValidationError
from app.models import BlackoutPeriod, Reservation


def auth(user):
    return {"X-User-Id": str(user.id)}


def days_from_now(days):
    return date.today() + timedelta(days=days)


def _reserve(db, prop, guest, start, end, status="confirmed"):
    reservation = Reservation(
        property_id=prop.id,
        user_id=guest.id,
        start_date=start,
        end_date=end,
        guest_count=2,
        status=status,
        total_price=500,
    )
    db.add(reservation)
    db.commit()
    return reservation


# --- intervals ---


@pytest.mark.parametrize(
    "new_start,new_end,expected",
    [
        (date(2024, 6, 15), date(2024, 6, 18), False),  # departure day is free
        (date(2024, 6, 5), date(2024, 6, 10), False),  # ends on arrival day
        (date(2024, 6, 14), date(2024, 6, 20), True),
        (date(2024, 6, 11), date(2024, 6, 12), True),  # inside
        (date(2024, 6, 1), date(2024, 6, 30), True),  # covers
    ],
)
def test_intervals_overlap_half_open(new_start, new_end, expected):
    assert intervals_overlap(date(2024, 6, 10), date(2024, 6, 15), new_start, new_end) is expected


def test_validate_stay_dates():
    current = date(2024, 6, 1)
    validate_stay_dates(date(2024, 6, 1), date(2024, 6, 2), current)

    with pytest.raises(ValidationError, match="past"):
        validate_stay_dates(date(2024, 5, 31), date(2024, 6, 2), current)
    with pytest.raises(ValidationError, match="after start"):
        validate_stay_dates(date(2024, 6, 5), date(2024, 6, 5), current)


# --- conflict lookup against stored reservations ---


def test_boundary_touch_is_not_a_conflict(db, app_db, villa, guest):
    _reserve(db, villa, guest, date(2024, 6, 10), date(2024, 6, 15))

    service = AvailabilityService(app_db)
    assert service.find_conflict(villa.id, date(2024, 6, 15), date(2024, 6, 18)) is None


def test_overlapping_reservation_is_identified(db, app_db, villa, guest):
    reservation = _reserve(db, villa, guest, date(2024, 6, 10), date(2024, 6, 15))

    conflict = AvailabilityService(app_db).find_conflict(villa.id, date(2024, 6, 14), date(2024, 6, 20))
    assert conflict["type"] == "reservation"
    assert conflict["id"] == reservation.id
    assert conflict["startDate"] == date(2024, 6, 10)
    assert conflict["endDate"] == date(2024, 6, 15)


def test_cancelled_and_pending_reservations_do_not_block(db, app_db, villa, guest):
    _reserve(db, villa, guest, date(2024, 6, 10), date(2024, 6, 15), status="cancelled")
    _reserve(db, villa, guest, date(2024, 6, 10), date(2024, 6, 15), status="pending")

    assert AvailabilityService(app_db).find_conflict(villa.id, date(2024, 6, 11), date(2024, 6, 12)) is None


# --- API ---


async def test_check_availability_free(client, villa, guest):
    resp = await client.post(
        "/availability/check",
        json={"propertyId": villa.id, "startDate": str(days_from_now(10)), "endDate": str(days_from_now(12))},
        headers=auth(guest),
    )
    assert resp.status_code == 200
    assert resp.json() == {"available": True, "conflictingEntity": None}


async def test_check_availability_reports_blackout(client, db, villa, guest):
    blackout = BlackoutPeriod(
        property_id=villa.id,
        start_date=days_from_now(20),
        end_date=days_from_now(25),
        title="Renovation",
    )
    db.add(blackout)
    db.commit()

    resp = await client.post(
        "/availability/check",
        json={"propertyId": villa.id, "startDate": str(days_from_now(24)), "endDate": str(days_from_now(28))},
        headers=auth(guest),
    )
    data = resp.json()
    assert data["available"] is False
    assert data["conflictingEntity"]["type"] == "blackout"
    assert data["conflictingEntity"]["id"] == blackout.id
    assert data["conflictingEntity"]["title"] == "Renovation"


async def test_check_availability_rejects_past_dates(client, villa, guest):
    resp = await client.post(
        "/availability/check",
        json={"propertyId": villa.id, "startDate": str(days_from_now(-2)), "endDate": str(days_from_now(2))},
        headers=auth(guest),
    )
    assert resp.status_code == 400


async def test_check_availability_unknown_property(client, guest):
    resp = await client.post(
        "/availability/check",
        json={"propertyId": 999, "startDate": str(days_from_now(1)), "endDate": str(days_from_now(2))},
        headers=auth(guest),
    )
    assert resp.status_code == 404


async def test_check_availability_requires_user(client, villa):
    resp = await client.post(
        "/availability/check",
        json={"propertyId": villa.id, "startDate": str(days_from_now(1)), "endDate": str(days_from_now(2))},
    )
    assert resp.status_code == 401


async def test_create_blackout(client, villa, host):
    resp = await client.post(
        "/availability/blackouts",
        json={
            "propertyId": villa.id,
            "startDate": str(days_from_now(30)),
            "endDate": str(days_from_now(35)),
            "title": "  Family holidays  ",
        },
        headers=auth(host),
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["title"] == "Family holidays"
    assert data["propertyName"] == "Villa Ivato"
    assert data["type"] == "blackout"


async def test_create_blackout_conflicts_with_reservation(client, db, villa, host, guest):
    reservation = _reserve(db, villa, guest, days_from_now(30), days_from_now(33))

    resp = await client.post(
        "/availability/blackouts",
        json={
            "propertyId": villa.id,
            "startDate": str(days_from_now(32)),
            "endDate": str(days_from_now(40)),
            "title": "Maintenance",
        },
        headers=auth(host),
    )
    assert resp.status_code == 409
    conflict = resp.json()["conflicts"][0]
    assert conflict["type"] == "reservation"
    assert conflict["id"] == reservation.id


async def test_create_blackout_requires_title(client, villa, host):
    resp = await client.post(
        "/availability/blackouts",
        json={
            "propertyId": villa.id,
            "startDate": str(days_from_now(30)),
            "endDate": str(days_from_now(35)),
            "title": "   ",
        },
        headers=auth(host),
    )
    assert resp.status_code == 400


async def test_create_blackout_on_someone_elses_property(client, villa, other_host):
    resp = await client.post(
        "/availability/blackouts",
        json={
            "propertyId": villa.id,
            "startDate": str(days_from_now(30)),
            "endDate": str(days_from_now(35)),
            "title": "Not mine",
        },
        headers=auth(other_host),
    )
    assert resp.status_code == 403


async def test_guest_cannot_manage_blackouts(client, villa, guest):
    resp = await client.get("/availability/blackouts", headers=auth(guest))
    assert resp.status_code == 403


async def test_blackout_update_list_and_delete(client, villa, host):
    created = await client.post(
        "/availability/blackouts",
        json={
            "propertyId": villa.id,
            "startDate": str(days_from_now(30)),
            "endDate": str(days_from_now(35)),
            "title": "Painting",
        },
        headers=auth(host),
    )
    blackout_id = created.json()["id"]

    # Moving a blackout over its own former range is not a conflict
    updated = await client.put(
        f"/availability/blackouts/{blackout_id}",
        json={"endDate": str(days_from_now(37))},
        headers=auth(host),
    )
    assert updated.status_code == 200
    assert updated.json()["endDate"] == str(days_from_now(37))

    listed = await client.get(f"/availability/blackouts?propertyId={villa.id}", headers=auth(host))
    assert [b["id"] for b in listed.json()] == [blackout_id]

    deleted = await client.delete(f"/availability/blackouts/{blackout_id}", headers=auth(host))
    assert deleted.json() == {"success": True}

    listed = await client.get("/availability/blackouts", headers=auth(host))
    assert listed.json() == []


async def test_blackout_cannot_move_into_the_past(client, app_db, villa, host):
    created = await client.post(
        "/availability/blackouts",
        json={
            "propertyId": villa.id,
            "startDate": str(days_from_now(30)),
            "endDate": str(days_from_now(35)),
            "title": "Painting",
        },
        headers=auth(host),
    )
    blackout_id = created.json()["id"]

    resp = await client.put(
        f"/availability/blackouts/{blackout_id}",
        json={"startDate": str(days_from_now(-3))},
        headers=auth(host),
    )
    assert resp.status_code == 400
    assert app_db.get(BlackoutPeriod, blackout_id).start_date == days_from_now(30)


# --- ICS feed ---


def _events(content):
    return {str(event["uid"]): event for event in Calendar.from_ical(content).walk("VEVENT")}


async def test_calendar_feed_exports_reservations_and_blackouts(client, db, villa, host, guest):
    reservation = _reserve(db, villa, guest, days_from_now(10), days_from_now(13))
    _reserve(db, villa, guest, days_from_now(20), days_from_now(22), status="cancelled")
    blackout = BlackoutPeriod(
        property_id=villa.id, start_date=days_from_now(30), end_date=days_from_now(35), title="Renovation"
    )
    db.add(blackout)
    db.commit()

    feed = await client.get(f"/availability/{villa.id}/calendar-feed", headers=auth(host))
    assert feed.status_code == 200
    token = feed.json()["token"]
    assert feed.json()["url"].endswith(f"/availability/{villa.id}/calendar.ics?token={token}")

    resp = await client.get(f"/availability/{villa.id}/calendar.ics", params={"token": token})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/calendar")

    calendar = Calendar.from_ical(resp.content)
    assert str(calendar["x-wr-calname"]) == "Villa Ivato - Hosteed"

    events = _events(resp.content)
    assert set(events) == {f"reservation-{reservation.id}@hosteed.com", f"blackout-{blackout.id}@hosteed.com"}

    booked = events[f"reservation-{reservation.id}@hosteed.com"]
    assert str(booked["summary"]) == "Reserved - guest"
    assert str(booked["description"]) == "Reservation for 2 guest(s)"
    assert booked.decoded("dtstart") == days_from_now(10)
    assert booked.decoded("dtend") == days_from_now(13)
    assert str(booked["transp"]) == "OPAQUE"

    blocked = events[f"blackout-{blackout.id}@hosteed.com"]
    assert str(blocked["summary"]) == "Renovation"
    assert str(blocked["description"]) == "Blocked period"


async def test_calendar_feed_token_is_stable(client, villa, host):
    first = await client.get(f"/availability/{villa.id}/calendar-feed", headers=auth(host))
    second = await client.get(f"/availability/{villa.id}/calendar-feed", headers=auth(host))
    assert first.json()["token"] == second.json()["token"]


async def test_calendar_feed_rejects_bad_tokens(client, villa, host):
    await client.get(f"/availability/{villa.id}/calendar-feed", headers=auth(host))

    wrong = await client.get(f"/availability/{villa.id}/calendar.ics", params={"token": "not-the-token"})
    assert wrong.status_code == 403

    missing = await client.get(f"/availability/{villa.id}/calendar.ics")
    assert missing.status_code == 403

    unknown = await client.get("/availability/999/calendar.ics", params={"token": "not-the-token"})
    assert unknown.status_code == 404


async def test_feed_without_token_yet_is_closed(client, villa):
    resp = await client.get(f"/availability/{villa.id}/calendar.ics", params={"token": ""})
    assert resp.status_code == 403


async def test_regenerated_token_replaces_the_old_one(client, villa, host):
    old = (await client.get(f"/availability/{villa.id}/calendar-feed", headers=auth(host))).json()["token"]

    regenerated = await client.post(f"/availability/{villa.id}/calendar-feed/regenerate", headers=auth(host))
    assert regenerated.status_code == 200
    new = regenerated.json()["token"]
    assert new != old

    stale = await client.get(f"/availability/{villa.id}/calendar.ics", params={"token": old})
    assert stale.status_code == 403
    fresh = await client.get(f"/availability/{villa.id}/calendar.ics", params={"token": new})
    assert fresh.status_code == 200


async def test_calendar_feed_token_is_owner_only(client, villa, other_host, guest):
    resp = await client.get(f"/availability/{villa.id}/calendar-feed", headers=auth(other_host))
    assert resp.status_code == 403

    resp = await client.post(f"/availability/{villa.id}/calendar-feed/regenerate", headers=auth(guest))
    assert resp.status_code == 403
