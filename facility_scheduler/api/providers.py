from flask import current_app

from facility_scheduler.repositories import SqlBookingStore, SqlFacilityRegistry
from facility_scheduler.services.booking_service import BookingService
from facility_scheduler.services.calendar_service import CalendarService


def get_booking_service():
    return BookingService.from_config(current_app.config, SqlFacilityRegistry(), SqlBookingStore())


def get_calendar_service():
    return CalendarService(SqlFacilityRegistry(), SqlBookingStore())
