from facility_scheduler.models.facility import Facility
from facility_scheduler.models.booking import Booking

__all__ = ['Facility', 'Booking']
