"""
Collaborator interfaces (ports) consumed by the scheduling services.

Services receive implementations at construction time, so they can be
exercised against the SQL-backed repositories or any test double.
"""
from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol

from facility_scheduler.models import Booking, Facility


class FacilityRegistry(Protocol):
    """Read-only facility lookup."""

    def get_facility(self, facility_id: int) -> Optional[Facility]: ...
    def list_facilities(self) -> List[Facility]: ...


class BookingStore(Protocol):
    """Durable record of bookings.

    ``insert_booking`` is the correctness boundary: it must reject a booking
    that overlaps a live booking of the same facility and date
    (``SlotConflict``) and a reused booking code (``DuplicateCodeError``).
    """

    def query_bookings(self, facility_id: int, booking_date: date) -> List[Booking]: ...
    def list_bookings(self, facility_id: Optional[int] = None, status: Optional[str] = None,
                      date_from: Optional[date] = None, date_to: Optional[date] = None) -> List[Booking]: ...
    def insert_booking(self, booking: Booking) -> Booking: ...
    def get_booking(self, booking_id: int) -> Optional[Booking]: ...
    def get_by_code(self, booking_code: str) -> Optional[Booking]: ...
    def save(self, booking: Booking) -> Booking: ...
