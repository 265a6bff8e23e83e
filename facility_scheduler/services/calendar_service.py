from dataclasses import dataclass
from datetime import datetime

import pytz
from icalendar import Calendar, Event

from facility_scheduler.interfaces import BookingStore, FacilityRegistry

PLACEHOLDER_FACILITY = 'Unknown'

PAYMENT_COLORS = {
    'paid': '#10b981',      # green
    'unpaid': '#ef4444',    # red
    'refunded': '#6b7280',  # gray
}
DEFAULT_COLOR = '#6b7280'


@dataclass(frozen=True)
class CalendarEvent:
    id: int
    title: str
    start: datetime
    end: datetime
    category: str
    color: str
    booking_code: str = ''

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'start': self.start.isoformat(),
            'end': self.end.isoformat(),
            'backgroundColor': self.color,
            'borderColor': self.color,
            'extendedProps': {
                'category': self.category,
                'booking_code': self.booking_code,
            },
        }


def project(bookings, facility_names=None):
    """
    Map bookings to calendar events, one per booking, in input order.
    facility_names maps facility id -> display name; unresolved ids get a
    placeholder title rather than failing the projection.
    """
    facility_names = facility_names or {}
    events = []
    for booking in bookings:
        facility_name = facility_names.get(booking.facility_id) or PLACEHOLDER_FACILITY
        events.append(CalendarEvent(
            id=booking.id,
            title=f"{facility_name} - {booking.requester_name}",
            start=datetime.combine(booking.booking_date, booking.start_time),
            end=datetime.combine(booking.booking_date, booking.end_time),
            category=booking.payment_status,
            color=PAYMENT_COLORS.get(booking.payment_status, DEFAULT_COLOR),
            booking_code=booking.booking_code or '',
        ))
    return events


def to_ical(events, timezone='UTC'):
    """Render calendar events as an iCalendar feed (bytes)."""
    tz = pytz.timezone(timezone)
    cal = Calendar()
    cal.add('prodid', '-//Facility Scheduler//Bookings//EN')
    cal.add('version', '2.0')

    for event in events:
        component = Event()
        component.add('uid', f"{event.booking_code or event.id}@facility-scheduler")
        component.add('summary', event.title)
        component.add('dtstart', tz.localize(event.start))
        component.add('dtend', tz.localize(event.end))
        component.add('dtstamp', datetime.now(pytz.utc))
        component.add('categories', [event.category])
        cal.add_component(component)

    return cal.to_ical()


class CalendarService:
    """Reads bookings through the store and projects them for display."""

    def __init__(self, registry: FacilityRegistry, store: BookingStore):
        self.registry = registry
        self.store = store

    def events_for(self, facility_id, booking_date):
        facility = self.registry.get_facility(facility_id)
        names = {facility.id: facility.name} if facility else {}
        bookings = [b for b in self.store.query_bookings(facility_id, booking_date)
                    if b.status != 'cancelled']
        return project(bookings, names)

    def events(self, facility_id=None, status=None, date_from=None, date_to=None):
        """
        Events across facilities, newest date first. Cancelled bookings are
        left out unless asked for by status.
        """
        bookings = self.store.list_bookings(facility_id=facility_id, status=status,
                                            date_from=date_from, date_to=date_to)
        if status is None:
            bookings = [b for b in bookings if b.status != 'cancelled']
        names = {f.id: f.name for f in self.registry.list_facilities()}
        return project(bookings, names)
