"""Booking failure kinds and the rejection value returned to callers.

Services raise these internally and convert everything except
``StoreUnavailable`` into a ``Rejection`` before returning.
"""
import dataclasses
from dataclasses import dataclass
from typing import List, Optional


class BookingError(Exception):
    kind = 'BookingError'

    def __init__(self, message: str, **detail):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(BookingError):
    kind = 'ValidationError'

    def __init__(self, field_name: str, message: str):
        super().__init__(message, field=field_name)
        self.field = field_name


class InvalidTimeRange(BookingError):
    kind = 'InvalidTimeRange'


class FacilityUnavailable(BookingError):
    kind = 'FacilityUnavailable'


class SlotConflict(BookingError):
    kind = 'SlotConflict'

    def __init__(self, message: str, conflicts=None):
        conflicts = list(conflicts or [])
        super().__init__(message, conflicts=conflicts)
        self.conflicts = conflicts


class DuplicateCodeError(BookingError):
    kind = 'DuplicateCodeError'


class StoreUnavailable(BookingError):
    """The booking store or facility registry could not be reached."""
    kind = 'StoreUnavailable'


@dataclass(frozen=True)
class Rejection:
    kind: str
    message: str
    field: Optional[str] = None
    conflicts: List = dataclasses.field(default_factory=list)

    @classmethod
    def from_error(cls, error: BookingError) -> 'Rejection':
        return cls(
            kind=error.kind,
            message=error.message,
            field=error.detail.get('field'),
            conflicts=list(error.detail.get('conflicts', [])),
        )

    @property
    def detail(self):
        return {'field': self.field, 'conflicts': list(self.conflicts)}

    def to_dict(self):
        payload = {'error': self.kind, 'message': self.message}
        if self.field:
            payload['field'] = self.field
        if self.conflicts:
            payload['conflicts'] = [c.to_dict() for c in self.conflicts]
        return payload
