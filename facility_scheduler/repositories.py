"""SQLAlchemy-backed facility registry and booking store."""
import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from functools import wraps

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError

from facility_scheduler.errors import DuplicateCodeError, SlotConflict, StoreUnavailable
from facility_scheduler.extensions import db
from facility_scheduler.models import Booking, Facility
from facility_scheduler.services.availability_service import Interval, conflicting_intervals

logger = logging.getLogger(__name__)

# One lock per facility id, shared by every store instance in the process
_facility_locks = defaultdict(threading.Lock)
_registry_lock = threading.Lock()


@contextmanager
def facility_lock(facility_id):
    with _registry_lock:
        lock = _facility_locks[facility_id]
    with lock:
        yield


def store_call(f):
    """Translate connectivity failures into StoreUnavailable."""
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            db.session.rollback()
            logger.exception("Store call %s failed", f.__name__)
            raise StoreUnavailable("Booking store is unavailable.") from e
    return decorated


class SqlFacilityRegistry:

    @store_call
    def get_facility(self, facility_id):
        return db.session.get(Facility, facility_id)

    @store_call
    def list_facilities(self):
        return Facility.query.order_by(Facility.id).all()


class SqlBookingStore:

    @store_call
    def query_bookings(self, facility_id, booking_date):
        return Booking.query.filter(
            Booking.facility_id == facility_id,
            Booking.booking_date == booking_date,
        ).order_by(Booking.start_time).all()

    @store_call
    def list_bookings(self, facility_id=None, status=None, date_from=None, date_to=None):
        """Bookings across facilities, newest booking date first."""
        query = Booking.query
        if facility_id is not None:
            query = query.filter(Booking.facility_id == facility_id)
        if status:
            query = query.filter(Booking.status == status)
        if date_from:
            query = query.filter(Booking.booking_date >= date_from)
        if date_to:
            query = query.filter(Booking.booking_date <= date_to)
        return query.order_by(Booking.booking_date.desc(), Booking.start_time).all()

    @store_call
    def get_booking(self, booking_id):
        return db.session.get(Booking, booking_id)

    @store_call
    def get_by_code(self, booking_code):
        return Booking.query.filter_by(booking_code=booking_code).first()

    @store_call
    def insert_booking(self, booking):
        """
        Commit a new booking, serialised per facility.

        The overlap check is repeated here under the facility lock (and a row
        lock on the facility for databases that support SELECT ... FOR UPDATE),
        so two requests that both passed the caller's check cannot both commit.
        """
        with facility_lock(booking.facility_id):
            db.session.execute(
                select(Facility.id).where(Facility.id == booking.facility_id).with_for_update()
            )

            live = Booking.query.filter(
                Booking.facility_id == booking.facility_id,
                Booking.booking_date == booking.booking_date,
                Booking.status != 'cancelled',
                Booking.payment_status != 'refunded',
            ).all()
            candidate = Interval(booking.start_time, booking.end_time)
            conflicts = conflicting_intervals(candidate, [Interval.from_booking(b) for b in live])
            if conflicts:
                db.session.rollback()
                raise SlotConflict("Facility is already booked for this interval.", conflicts=conflicts)

            if Booking.query.filter_by(booking_code=booking.booking_code).first() is not None:
                db.session.rollback()
                raise DuplicateCodeError(f"Booking code {booking.booking_code} already exists.")

            db.session.add(booking)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                if self.get_by_code(booking.booking_code) is not None:
                    raise DuplicateCodeError(f"Booking code {booking.booking_code} already exists.")
                raise
        return booking

    @store_call
    def save(self, booking):
        db.session.add(booking)
        db.session.commit()
        return booking
