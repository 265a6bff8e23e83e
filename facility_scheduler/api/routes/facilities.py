from datetime import time
from flask import Blueprint, request, jsonify, current_app
from facility_scheduler.api.providers import get_booking_service
from facility_scheduler.api.routes.bookings import rejection_response, store_unavailable_response
from facility_scheduler.errors import Rejection, StoreUnavailable, ValidationError
from facility_scheduler.services.booking_service import parse_date

facilities_bp = Blueprint('facilities', __name__)

@facilities_bp.errorhandler(StoreUnavailable)
def handle_store_unavailable(e):
    current_app.logger.error(f"Booking store unavailable: {e}")
    return store_unavailable_response()

def _requested_date():
    return parse_date(request.args.get('date'), 'date')

@facilities_bp.route('/<int:facility_id>/booked-slots', methods=['GET'])
def booked_slots(facility_id):
    """Slots already taken, for display before a booking is submitted."""
    try:
        target_date = _requested_date()
    except ValidationError as e:
        return rejection_response(Rejection.from_error(e))

    intervals = get_booking_service().list_booked_slots_for(facility_id, target_date)
    return jsonify({
        'facility_id': facility_id,
        'date': target_date.isoformat(),
        'slots': [i.to_dict() for i in intervals],
    })

@facilities_bp.route('/<int:facility_id>/free-slots', methods=['GET'])
def free_slots_for(facility_id):
    try:
        target_date = _requested_date()
    except ValidationError as e:
        return rejection_response(Rejection.from_error(e))

    opening = time(hour=current_app.config['OPENING_HOUR'])
    closing = time(hour=current_app.config['CLOSING_HOUR'])
    slots = get_booking_service().list_free_slots_for(facility_id, target_date, opening, closing)
    return jsonify({
        'facility_id': facility_id,
        'date': target_date.isoformat(),
        'slots': [i.to_dict() for i in slots],
    })
