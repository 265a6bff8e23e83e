from flask import Blueprint, request, jsonify, current_app
from facility_scheduler.api.providers import get_booking_service
from facility_scheduler.errors import Rejection, StoreUnavailable, ValidationError
from facility_scheduler.services.booking_service import BookingRequest, parse_filters
from facility_scheduler.utils.decorators import token_required

bookings_bp = Blueprint('bookings', __name__)

REJECTION_STATUS = {
    'ValidationError': 400,
    'InvalidTimeRange': 400,
    'NotFound': 404,
    'SlotConflict': 409,
    'FacilityUnavailable': 422,
    'DuplicateCodeError': 500,
}

def rejection_response(rejection):
    return jsonify(rejection.to_dict()), REJECTION_STATUS.get(rejection.kind, 400)

def store_unavailable_response():
    return jsonify({'error': 'StoreUnavailable', 'message': 'Service temporarily unavailable, please try again.'}), 503

@bookings_bp.errorhandler(StoreUnavailable)
def handle_store_unavailable(e):
    current_app.logger.error(f"Booking store unavailable: {e}")
    return store_unavailable_response()

@bookings_bp.route('/', methods=['POST'])
@token_required
def create_booking(claims):
    try:
        booking_request = BookingRequest.from_payload(request.get_json(silent=True))
    except ValidationError as e:
        return rejection_response(Rejection.from_error(e))

    result = get_booking_service().create_booking(booking_request)
    if isinstance(result, Rejection):
        return rejection_response(result)

    current_app.logger.info(f"Booking {result.booking_code} created by {claims.get('sub', 'unknown')}")
    return jsonify(result.to_dict()), 201

@bookings_bp.route('/', methods=['GET'])
def list_bookings():
    try:
        filters = parse_filters(request.args)
    except ValidationError as e:
        return rejection_response(Rejection.from_error(e))

    bookings = get_booking_service().list_bookings(**filters)
    return jsonify([b.to_dict() for b in bookings])

@bookings_bp.route('/<string:booking_code>', methods=['GET'])
def get_booking(booking_code):
    booking = get_booking_service().get_by_code(booking_code)
    if booking is None:
        return jsonify({'error': 'NotFound', 'message': 'Booking not found.'}), 404
    return jsonify(booking.to_dict())

@bookings_bp.route('/<int:booking_id>', methods=['DELETE'])
@token_required
def cancel_booking(claims, booking_id):
    result = get_booking_service().cancel_booking(booking_id)
    if isinstance(result, Rejection):
        return rejection_response(result)
    return jsonify({'message': 'Booking cancelled successfully.', 'booking': result.to_dict()}), 200

@bookings_bp.route('/<int:booking_id>/payment', methods=['PATCH'])
@token_required
def update_payment(claims, booking_id):
    data = request.get_json(silent=True) or {}
    result = get_booking_service().update_payment_status(booking_id, data.get('payment_status'))
    if isinstance(result, Rejection):
        return rejection_response(result)
    return jsonify(result.to_dict()), 200
