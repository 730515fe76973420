"""
ICS export of a property's calendar

Reservations and blackout periods become all-day busy events. Both use an
exclusive end date, which is exactly what DTEND means for all-day events.
"""

from datetime import datetime, timezone

from icalendar import Calendar, Event

PRODID = "-//Hosteed//Calendar Sync//EN"
UID_DOMAIN = "hosteed.com"


def _busy_event(uid: str, start, end, summary: str, description: str, stamp: datetime) -> Event:
    event = Event()
    event.add("uid", uid)
    event.add("dtstamp", stamp)
    event.add("dtstart", start)
    event.add("dtend", end)
    event.add("summary", summary)
    event.add("description", description)
    event.add("status", "CONFIRMED")
    event.add("transp", "OPAQUE")
    return event


def build_property_calendar(prop, reservations, blackouts) -> bytes:
    calendar = Calendar()
    calendar.add("prodid", PRODID)
    calendar.add("version", "2.0")
    calendar.add("calscale", "GREGORIAN")
    calendar.add("x-wr-calname", f"{prop.name} - Hosteed")
    calendar.add("x-wr-caldesc", f"Availability calendar for {prop.name}")

    stamp = datetime.now(timezone.utc)
    for reservation in reservations:
        guest = (reservation.user.name or reservation.user.email) if reservation.user else "guest"
        calendar.add_component(
            _busy_event(
                f"reservation-{reservation.id}@{UID_DOMAIN}",
                reservation.start_date,
                reservation.end_date,
                f"Reserved - {guest}",
                f"Reservation for {reservation.guest_count} guest(s)",
                stamp,
            )
        )

    for blackout in blackouts:
        calendar.add_component(
            _busy_event(
                f"blackout-{blackout.id}@{UID_DOMAIN}",
                blackout.start_date,
                blackout.end_date,
                blackout.title,
                blackout.description or "Blocked period",
                stamp,
            )
        )

    return calendar.to_ical()
