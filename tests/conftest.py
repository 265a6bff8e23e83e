import pytest
import jwt
from datetime import date
from facility_scheduler import create_app, db
from facility_scheduler.config import TestingConfig
from facility_scheduler.models import Facility
from facility_scheduler.repositories import SqlBookingStore, SqlFacilityRegistry
from facility_scheduler.services.booking_service import BookingService

# Fixed "today" so the 2025 scenarios stay in the future
TODAY = date(2025, 10, 1)

@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def facilities(app):
    pool = Facility(name='Swimming Pool A', category='Sports & Recreation', status='available', capacity=50)
    court = Facility(name='Tennis Court 1', category='Sports & Recreation', status='maintenance', capacity=4)
    garden = Facility(name='Rooftop Garden', category='Recreation', status='closed', capacity=40)
    db.session.add_all([pool, court, garden])
    db.session.commit()
    return pool, court, garden

@pytest.fixture
def service(app):
    return BookingService(SqlFacilityRegistry(), SqlBookingStore(), today=lambda: TODAY)

@pytest.fixture
def auth_header(app):
    token = jwt.encode({'sub': 'manager@example.com'}, app.config['SECRET_KEY'], algorithm="HS256")
    return {'Authorization': f'Bearer {token}'}
