from facility_scheduler.extensions import db
from datetime import datetime
from facility_scheduler.models.facility import in_clause

PAYMENT_STATUSES = ('unpaid', 'paid', 'refunded')
BOOKING_STATUSES = ('confirmed', 'cancelled')


class Booking(db.Model):
    __tablename__ = 'facility_bookings'

    id = db.Column(db.Integer, primary_key=True)
    booking_code = db.Column(db.String(32), unique=True, nullable=False, index=True)
    facility_id = db.Column(db.Integer, db.ForeignKey('facilities.id'), nullable=False)

    requester_name = db.Column(db.String(128), nullable=False)
    requester_email = db.Column(db.String(255), nullable=False)
    requester_phone = db.Column(db.String(32))

    booking_date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    duration = db.Column(db.Float, nullable=False)  # hours

    total_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    payment_status = db.Column(db.String(20), nullable=False, default='unpaid')
    status = db.Column(db.String(20), nullable=False, default='confirmed')

    attendees = db.Column(db.Integer)
    purpose = db.Column(db.Text)
    special_requests = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    facility = db.relationship('Facility', backref='bookings', lazy=True)

    __table_args__ = (
        db.CheckConstraint('end_time > start_time', name='check_booking_time_order'),
        db.CheckConstraint(in_clause('payment_status', PAYMENT_STATUSES), name='check_booking_payment_status'),
        db.CheckConstraint(in_clause('status', BOOKING_STATUSES), name='check_booking_status'),
        db.CheckConstraint('attendees IS NULL OR attendees > 0', name='check_booking_attendees'),
        db.Index('ix_facility_bookings_facility_date', 'facility_id', 'booking_date'),
    )

    @property
    def is_live(self):
        """Whether this booking still holds its slot."""
        return self.status != 'cancelled' and self.payment_status != 'refunded'

    def to_dict(self):
        return {
            'id': self.id,
            'booking_code': self.booking_code,
            'facility_id': self.facility_id,
            'requester_name': self.requester_name,
            'requester_email': self.requester_email,
            'requester_phone': self.requester_phone,
            'booking_date': self.booking_date.isoformat(),
            'start_time': self.start_time.strftime('%H:%M'),
            'end_time': self.end_time.strftime('%H:%M'),
            'duration': self.duration,
            'total_price': float(self.total_price or 0),
            'payment_status': self.payment_status,
            'status': self.status,
            'attendees': self.attendees,
            'purpose': self.purpose,
            'special_requests': self.special_requests,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
