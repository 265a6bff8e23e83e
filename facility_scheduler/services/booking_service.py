import logging
import re
import secrets
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

import pytz

from facility_scheduler.errors import (
    BookingError,
    DuplicateCodeError,
    FacilityUnavailable,
    InvalidTimeRange,
    Rejection,
    SlotConflict,
    StoreUnavailable,
    ValidationError,
)
from facility_scheduler.interfaces import BookingStore, FacilityRegistry
from facility_scheduler.models import Booking
from facility_scheduler.models.booking import BOOKING_STATUSES, PAYMENT_STATUSES
from facility_scheduler.services.availability_service import (
    AvailabilityEngine,
    Interval,
    conflicting_intervals,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

# Forward-only payment transitions
PAYMENT_TRANSITIONS = {
    'unpaid': ('paid', 'refunded'),
    'paid': ('refunded',),
    'refunded': (),
}


def parse_date(value, field_name):
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise ValidationError(field_name, f"{field_name} must be a date in YYYY-MM-DD format.")


def parse_time(value, field_name):
    if isinstance(value, time):
        return value
    for fmt in ('%H:%M', '%H:%M:%S'):
        try:
            return datetime.strptime(value, fmt).time()
        except (TypeError, ValueError):
            continue
    raise ValidationError(field_name, f"{field_name} must be a time in HH:MM format.")


def parse_int(value, field_name):
    """Accept ints and digit strings; bools and fractional numbers are refused."""
    if isinstance(value, bool):
        raise ValidationError(field_name, f"{field_name} must be an integer.")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(field_name, f"{field_name} must be an integer.")
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value)
    raise ValidationError(field_name, f"{field_name} must be an integer.")


def parse_text(value, field_name, optional=False):
    if value is None and optional:
        return None
    if not isinstance(value, str):
        raise ValidationError(field_name, f"{field_name} must be text.")
    return value


@dataclass
class BookingRequest:
    facility_id: int
    requester_name: str
    requester_email: str
    booking_date: date
    start_time: time
    end_time: time
    requester_phone: Optional[str] = None
    attendees: Optional[int] = None
    purpose: Optional[str] = None
    special_requests: Optional[str] = None

    @classmethod
    def from_payload(cls, data):
        """Build a request from a JSON form payload, parsing dates and times."""
        if not isinstance(data, dict):
            raise ValidationError('body', "Request body must be a JSON object.")

        for name in ('facility_id', 'requester_name', 'requester_email',
                     'booking_date', 'start_time', 'end_time'):
            if data.get(name) in (None, ''):
                raise ValidationError(name, f"{name} is required.")

        attendees = data.get('attendees')
        return cls(
            facility_id=parse_int(data['facility_id'], 'facility_id'),
            requester_name=parse_text(data['requester_name'], 'requester_name'),
            requester_email=parse_text(data['requester_email'], 'requester_email'),
            booking_date=parse_date(data['booking_date'], 'booking_date'),
            start_time=parse_time(data['start_time'], 'start_time'),
            end_time=parse_time(data['end_time'], 'end_time'),
            requester_phone=parse_text(data.get('requester_phone'), 'requester_phone', optional=True),
            attendees=parse_int(attendees, 'attendees') if attendees is not None else None,
            purpose=parse_text(data.get('purpose'), 'purpose', optional=True),
            special_requests=parse_text(data.get('special_requests'), 'special_requests', optional=True),
        )


def parse_filters(args):
    """
    Listing filters from query-string args: facility_id, status, date_from
    and date_to, all optional. A single ``date`` pins both bounds.
    """
    filters = {'facility_id': None, 'status': None, 'date_from': None, 'date_to': None}
    if args.get('facility_id') not in (None, ''):
        filters['facility_id'] = parse_int(args['facility_id'], 'facility_id')
    status = args.get('status')
    if status:
        if status not in BOOKING_STATUSES:
            raise ValidationError('status', f"status must be one of {', '.join(BOOKING_STATUSES)}.")
        filters['status'] = status
    if args.get('date'):
        filters['date_from'] = filters['date_to'] = parse_date(args['date'], 'date')
    else:
        if args.get('date_from'):
            filters['date_from'] = parse_date(args['date_from'], 'date_from')
        if args.get('date_to'):
            filters['date_to'] = parse_date(args['date_to'], 'date_to')
    if filters['date_from'] and filters['date_to'] and filters['date_from'] > filters['date_to']:
        raise ValidationError('date_to', "date_to must not be before date_from.")
    return filters


def duration_hours(start_time: time, end_time: time) -> float:
    """Length of [start_time, end_time) in hours, negative if inverted."""
    start = datetime.combine(date.min, start_time)
    end = datetime.combine(date.min, end_time)
    return round((end - start).total_seconds() / 3600, 2)


def local_today(timezone):
    """Current date in the facility timezone, not the server's."""
    return datetime.now(pytz.timezone(timezone)).date()


def generate_booking_code(prefix='BK', now=None):
    """Prefix + YYYYMM + 8 random digits, e.g. BK20251104829317."""
    now = now or datetime.now()
    return f"{prefix}{now:%Y%m}{secrets.randbelow(10 ** 8):08d}"


class BookingService:
    """
    Sole writer of facility bookings.

    Every expected failure is returned as a Rejection; only StoreUnavailable
    propagates to the caller.
    """

    def __init__(self, registry: FacilityRegistry, store: BookingStore, engine=None, today=date.today,
                 code_generator=generate_booking_code, code_prefix='BK', code_attempts=3):
        self.registry = registry
        self.store = store
        self.engine = engine or AvailabilityEngine(store)
        self.today = today
        self.code_generator = code_generator
        self.code_prefix = code_prefix
        self.code_attempts = code_attempts

    @classmethod
    def from_config(cls, config, registry, store):
        return cls(
            registry,
            store,
            code_prefix=config.get('BOOKING_CODE_PREFIX', 'BK'),
            code_attempts=config.get('BOOKING_CODE_ATTEMPTS', 3),
            today=lambda: local_today(config.get('TIMEZONE', 'UTC')),
        )

    def validate_request(self, request: BookingRequest):
        """Check presence and shape of the request fields, first failure wins."""
        if request.facility_id in (None, ''):
            raise ValidationError('facility_id', "facility_id is required.")
        if not isinstance(request.requester_name, str) or not request.requester_name.strip():
            raise ValidationError('requester_name', "Requester name is required.")
        if not isinstance(request.requester_email, str) or not request.requester_email.strip():
            raise ValidationError('requester_email', "Requester email is required.")
        if not EMAIL_PATTERN.match(request.requester_email.strip()):
            raise ValidationError('requester_email', "Requester email is not a valid address.")
        if request.booking_date is None:
            raise ValidationError('booking_date', "booking_date is required.")
        if request.booking_date < self.today():
            raise ValidationError('booking_date', "Bookings cannot be made for a past date.")
        if request.start_time is None:
            raise ValidationError('start_time', "start_time is required.")
        if request.end_time is None:
            raise ValidationError('end_time', "end_time is required.")
        if request.attendees is not None and request.attendees <= 0:
            raise ValidationError('attendees', "attendees must be a positive number.")

    def create_booking(self, request: BookingRequest):
        """
        Main entry point to book a facility.
        Returns the stored Booking or a Rejection.
        """
        try:
            return self._create_booking(request)
        except StoreUnavailable:
            raise
        except BookingError as e:
            return Rejection.from_error(e)

    def _create_booking(self, request):
        # 1. Fields
        try:
            self.validate_request(request)
        except ValidationError as e:
            logger.debug("Rejected booking request on %s: %s", e.field, e.message)
            raise

        # 2. Time ordering
        if request.end_time <= request.start_time:
            raise InvalidTimeRange(
                f"End time {request.end_time:%H:%M} must be after start time {request.start_time:%H:%M}."
            )
        duration = duration_hours(request.start_time, request.end_time)

        # 3. Facility state
        facility = self.registry.get_facility(request.facility_id)
        if facility is None:
            raise FacilityUnavailable(f"Facility {request.facility_id} not found.")
        if not facility.is_bookable:
            logger.info("Facility %s is %s, booking refused", facility.id, facility.status)
            raise FacilityUnavailable(f"Facility {facility.name} is {facility.status} and cannot be booked.")

        # 4-5. Fast-path conflict check, the store re-checks on insert
        candidate = Interval(request.start_time, request.end_time)
        booked = self.engine.list_booked_intervals(facility.id, request.booking_date)
        conflicts = conflicting_intervals(candidate, booked)
        if conflicts:
            logger.info("Slot conflict on facility %s %s %s-%s",
                        facility.id, request.booking_date, request.start_time, request.end_time)
            raise SlotConflict("Facility is already booked for this interval.", conflicts=conflicts)

        booking = Booking(
            facility_id=facility.id,
            requester_name=request.requester_name.strip(),
            requester_email=request.requester_email.strip(),
            requester_phone=request.requester_phone,
            booking_date=request.booking_date,
            start_time=request.start_time,
            end_time=request.end_time,
            duration=duration,
            total_price=0,
            payment_status='unpaid',
            status='confirmed',
            attendees=request.attendees,
            purpose=request.purpose,
            special_requests=request.special_requests,
        )

        # 6-7. Code generation and the single mutation point
        for attempt in range(1, self.code_attempts + 1):
            booking.booking_code = self.code_generator(self.code_prefix)
            try:
                stored = self.store.insert_booking(booking)
            except DuplicateCodeError:
                logger.warning("Booking code collision on %s (attempt %d/%d)",
                               booking.booking_code, attempt, self.code_attempts)
                continue
            logger.info("Booking %s committed for facility %s on %s %s-%s",
                        stored.booking_code, facility.id, stored.booking_date,
                        stored.start_time, stored.end_time)
            return stored

        raise DuplicateCodeError(
            f"Could not allocate a unique booking code after {self.code_attempts} attempts."
        )

    def list_booked_slots_for(self, facility_id, booking_date):
        return self.engine.list_booked_intervals(facility_id, booking_date)

    def list_free_slots_for(self, facility_id, booking_date, opening, closing):
        return self.engine.list_free_intervals(facility_id, booking_date, opening, closing)

    def list_bookings(self, facility_id=None, status=None, date_from=None, date_to=None):
        return self.store.list_bookings(facility_id=facility_id, status=status,
                                        date_from=date_from, date_to=date_to)

    def get_by_code(self, booking_code):
        return self.store.get_by_code(booking_code)

    def cancel_booking(self, booking_id):
        """Cancel a booking, releasing its slot."""
        booking = self.store.get_booking(booking_id)
        if booking is None:
            return Rejection(kind='NotFound', message="Booking not found.")
        if booking.status == 'cancelled':
            return Rejection(kind='ValidationError', message="Booking is already cancelled.", field='status')

        booking.status = 'cancelled'
        self.store.save(booking)
        logger.info("Booking %s cancelled", booking.booking_code)
        return booking

    def update_payment_status(self, booking_id, payment_status):
        """Record a payment transition reported by the payment collaborator."""
        if payment_status not in PAYMENT_STATUSES:
            return Rejection(kind='ValidationError',
                             message=f"Unknown payment status {payment_status!r}.",
                             field='payment_status')

        booking = self.store.get_booking(booking_id)
        if booking is None:
            return Rejection(kind='NotFound', message="Booking not found.")
        if payment_status not in PAYMENT_TRANSITIONS[booking.payment_status]:
            return Rejection(kind='ValidationError',
                             message=f"Cannot move payment from {booking.payment_status} to {payment_status}.",
                             field='payment_status')

        booking.payment_status = payment_status
        self.store.save(booking)
        logger.info("Booking %s payment status set to %s", booking.booking_code, payment_status)
        return booking
