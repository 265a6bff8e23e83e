from facility_scheduler.extensions import db

CATEGORIES = (
    'Sports & Recreation',
    'Meeting & Events',
    'Wellness',
    'Recreation',
    'Education',
    'Other',
)

STATUSES = ('available', 'occupied', 'maintenance', 'closed')


def in_clause(column, values):
    return "{} IN ({})".format(column, ', '.join("'{}'".format(v) for v in values))


# Facilities in these states reject new bookings
UNBOOKABLE_STATUSES = ('maintenance', 'closed')


class Facility(db.Model):
    __tablename__ = 'facilities'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False)
    category = db.Column(db.String(64), nullable=False, default='Other')
    status = db.Column(db.String(20), nullable=False, default='available')
    location = db.Column(db.String(255))
    capacity = db.Column(db.Integer, default=0)
    price_per_hour = db.Column(db.Numeric(12, 2), default=0)
    description = db.Column(db.Text)

    __table_args__ = (
        db.CheckConstraint(in_clause('status', STATUSES), name='check_facility_status'),
        db.CheckConstraint(in_clause('category', CATEGORIES), name='check_facility_category'),
    )

    @property
    def is_bookable(self):
        return self.status not in UNBOOKABLE_STATUSES

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'status': self.status,
            'location': self.location,
            'capacity': self.capacity,
        }
