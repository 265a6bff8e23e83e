from datetime import time
from typing import Iterable, List, NamedTuple

from facility_scheduler.interfaces import BookingStore


class Interval(NamedTuple):
    """Half-open wall-clock span [start, end) on a single day."""
    start: time
    end: time

    @classmethod
    def from_booking(cls, booking):
        return cls(booking.start_time, booking.end_time)

    def overlaps(self, other: 'Interval') -> bool:
        # (StartA < EndB) and (StartB < EndA); touching edges do not overlap
        return self.start < other.end and other.start < self.end

    def to_dict(self):
        return {
            'start': self.start.strftime('%H:%M'),
            'end': self.end.strftime('%H:%M'),
        }


def has_conflict(candidate: Interval, existing: Iterable[Interval]) -> bool:
    """True if candidate overlaps any interval in existing."""
    return any(candidate.overlaps(interval) for interval in existing)


def conflicting_intervals(candidate: Interval, existing: Iterable[Interval]) -> List[Interval]:
    return [interval for interval in existing if candidate.overlaps(interval)]


def free_slots(booked: Iterable[Interval], opening: time, closing: time) -> List[Interval]:
    """
    Gaps between booked intervals inside [opening, closing).
    """
    slots = []
    cursor = opening
    for interval in sorted(booked):
        if interval.end <= cursor:
            continue
        if interval.start >= closing:
            break
        if interval.start > cursor:
            slots.append(Interval(cursor, interval.start))
        cursor = max(cursor, interval.end)

    # Final gap
    if cursor < closing:
        slots.append(Interval(cursor, closing))
    return slots


class AvailabilityEngine:
    """Answers what is already booked on a facility for a given date."""

    def __init__(self, store: BookingStore):
        self.store = store

    def list_booked_intervals(self, facility_id, booking_date) -> List[Interval]:
        bookings = self.store.query_bookings(facility_id, booking_date)
        intervals = [Interval.from_booking(b) for b in bookings if b.is_live]
        intervals.sort(key=lambda i: i.start)
        return intervals

    def list_free_intervals(self, facility_id, booking_date, opening: time, closing: time) -> List[Interval]:
        return free_slots(self.list_booked_intervals(facility_id, booking_date), opening, closing)
